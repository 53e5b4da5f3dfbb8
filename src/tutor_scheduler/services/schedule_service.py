'''
Weekly schedule service.
'''
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.exceptions import PersistenceFailure
from ..common.logger import log
from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import schedule as schedule_models
from .invitation_service import InvitationService


class ScheduleService:
    """
    Service for the tutor's weekly template: one document per tutor,
    replaced wholesale on every save.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        invitation_service: Annotated[InvitationService, Depends(InvitationService)]
    ):
        self.db = db
        self.invitation_service = invitation_service

    async def _get_schedule_row(self, tutor_id: UUID) -> db_models.WeeklySchedules | None:
        stmt = select(db_models.WeeklySchedules).filter(db_models.WeeklySchedules.tutor_id == tutor_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    def _format_schedule_for_api(self, row: db_models.WeeklySchedules) -> schedule_models.WeeklyTemplateRead:
        return schedule_models.WeeklyTemplateRead(
            tutor_id=row.tutor_id,
            updated_at=row.updated_at,
            days=row.schedule,
        )

    async def upsert_template(self, tutor_id: UUID, template: schedule_models.WeeklyTemplate) -> db_models.WeeklySchedules:
        """Stores `template` as the tutor's schedule, replacing any previous one."""
        payload = template.model_dump(mode="json")["days"]
        try:
            row = await self._get_schedule_row(tutor_id)
            if row:
                row.schedule = payload
            else:
                row = db_models.WeeklySchedules(tutor_id=tutor_id, schedule=payload)
                self.db.add(row)
            await self.db.flush()
            await self.db.refresh(row)
            return row
        except SQLAlchemyError as e:
            log.error(f"Failed to store weekly schedule for tutor {tutor_id}: {e}", exc_info=True)
            raise PersistenceFailure("Failed to save schedule") from e

    # --- Public Methods (API-Facing) ---

    async def get_template_for_api(self, tutor: db_models.Tutors) -> schedule_models.WeeklyTemplateRead:
        log.info(f"Tutor {tutor.id} requesting weekly schedule.")
        row = await self._get_schedule_row(tutor.id)
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No schedule saved yet.")
        return self._format_schedule_for_api(row)

    async def save_template_for_api(
        self,
        tutor: db_models.Tutors,
        template: schedule_models.WeeklyTemplate
    ) -> schedule_models.ScheduleSaveResult:
        """
        Saves the template, then invites every student newly placed in a
        regulars slot. Email problems never undo the save.
        """
        log.info(f"Tutor {tutor.id} saving weekly schedule with {len(template.days)} days.")
        row = await self.upsert_template(tutor.id, template)
        summary = await self.invitation_service.process_regulars(tutor, template)
        return schedule_models.ScheduleSaveResult(
            schedule=self._format_schedule_for_api(row),
            invitations=summary,
        )
