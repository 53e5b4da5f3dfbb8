'''
Tutor account service.
'''
from typing import Annotated
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..common.logger import log
from ..models import user as user_models
from .identity_service import IdentityService


class TutorService:
    """
    Service for tutor accounts. A tutor row mirrors a user of the
    identity provider who activated their tutor account.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        identity_service: Annotated[IdentityService, Depends(IdentityService)]
    ):
        self.db = db
        self.identity_service = identity_service

    async def get_tutor_by_external_id(self, external_id: str) -> db_models.Tutors | None:
        log.info(f"Fetching tutor for identity: {external_id}")
        try:
            stmt = select(db_models.Tutors).filter(db_models.Tutors.external_id == external_id)
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching tutor {external_id}: {e}", exc_info=True)
            raise

    async def activate_tutor_for_api(self, external_id: str) -> user_models.TutorRead:
        """
        Creates the tutor row for an identity on first activation.
        Activating an already active tutor returns the existing row.
        """
        existing = await self.get_tutor_by_external_id(external_id)
        if existing:
            log.info(f"Tutor {existing.id} already activated.")
            return user_models.TutorRead.model_validate(existing)

        profile = await self.identity_service.lookup(external_id)

        tutor = db_models.Tutors(
            external_id=external_id,
            name=profile.name or "Unknown",
            email=profile.email,
            avatar=profile.image or "",
            color="#6366f1",
            is_active=True,
            is_admin=False,
        )
        self.db.add(tutor)
        await self.db.flush()
        log.info(f"Activated tutor account {tutor.id} for identity {external_id}.")
        return user_models.TutorRead.model_validate(tutor)
