'''
Occurrence feed service.
'''
import asyncio
from datetime import date, datetime, time, timedelta
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.config import settings
from ..common.exceptions import NotFoundError
from ..common.logger import log
from ..core.occurrence_expander import expand_invitations, horizon_end
from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import occurrences as occurrence_models
from .identity_service import IdentityService
from .invitation_service import InvitationService


class OccurrenceService:
    """
    Builds a tutor's calendar: stored one-off timeblocks plus the weekly
    sessions of accepted invitations, expanded over the rolling horizon.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)],
        identity_service: Annotated[IdentityService, Depends(IdentityService)]
    ):
        self.db = db
        self.invitation_service = invitation_service
        self.identity_service = identity_service

    async def get_derived_occurrences(self, tutor: db_models.Tutors, today: date) -> list[occurrence_models.DerivedOccurrence]:
        invitations = await self.invitation_service.list_accepted_invitations(tutor.id)
        cancellations = await self.invitation_service.list_cancellations(tutor.id)
        return expand_invitations(
            invitations,
            cancellations,
            today=today,
            horizon_months=settings.OCCURRENCE_HORIZON_MONTHS
        )

    async def get_persisted_occurrences(self, tutor: db_models.Tutors, today: date) -> list[occurrence_models.PersistedOccurrence]:
        start = datetime.combine(today, time.min)
        end = datetime.combine(horizon_end(today, settings.OCCURRENCE_HORIZON_MONTHS) + timedelta(days=1), time.min)
        stmt = select(db_models.Timeblocks).filter(
            db_models.Timeblocks.tutor_id == tutor.id,
            db_models.Timeblocks.start_time >= start,
            db_models.Timeblocks.start_time < end
        )
        result = await self.db.execute(stmt)
        return [occurrence_models.PersistedOccurrence.model_validate(tb) for tb in result.scalars().all()]

    async def _resolve_student_names(self, student_ids: set[str]) -> dict[str, str]:
        """Best effort: unknown or unreachable students are left unnamed."""
        async def resolve(student_id: str) -> tuple[str, Optional[str]]:
            try:
                profile = await self.identity_service.lookup(student_id)
                return student_id, profile.name
            except NotFoundError:
                return student_id, None
            except Exception as e:
                log.warning(f"Could not resolve student {student_id}: {e}")
                return student_id, None

        pairs = await asyncio.gather(*(resolve(sid) for sid in student_ids))
        return {sid: name for sid, name in pairs if name}

    async def get_occurrences_for_api(
        self,
        tutor: db_models.Tutors,
        today: Optional[date] = None,
        resolve_students: bool = False
    ) -> list[occurrence_models.PersistedOccurrence | occurrence_models.DerivedOccurrence]:
        """
        Every occurrence from `today` to the horizon end, ordered by start time.
        """
        today = today or date.today()
        log.info(f"Tutor {tutor.id} requesting occurrences from {today}.")

        persisted = await self.get_persisted_occurrences(tutor, today)
        derived = await self.get_derived_occurrences(tutor, today)
        occurrences = [*persisted, *derived]

        if resolve_students:
            student_ids = {o.student_id for o in occurrences if o.student_id}
            names = await self._resolve_student_names(student_ids)
            for occurrence in occurrences:
                occurrence.student_name = names.get(occurrence.student_id or "")

        occurrences.sort(key=lambda o: o.start_time)
        return occurrences
