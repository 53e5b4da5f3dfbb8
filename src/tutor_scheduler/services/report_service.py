'''
Team reporting service.
'''
from datetime import datetime
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.logger import log
from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import TimeblockStatusEnum
from ..models import reports as report_models


class ReportService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    def _authorize_admin(self, current_tutor: db_models.Tutors):
        if not current_tutor.is_admin:
            log.warning(f"Unauthorized report access by tutor {current_tutor.id}.")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action."
            )

    async def get_team_hours_for_api(
        self,
        current_tutor: db_models.Tutors,
        now: Optional[datetime] = None
    ) -> list[report_models.TutorHoursByType]:
        """
        Hours per tutor and session type, counting booked timeblocks that
        started before `now`. Sorted by tutor name, then session type.
        """
        self._authorize_admin(current_tutor)
        now = now or datetime.now()
        log.info(f"Admin {current_tutor.id} requesting team hours up to {now}.")

        total_minutes = func.sum(db_models.Timeblocks.duration).label("total_minutes")
        session_count = func.count(db_models.Timeblocks.id).label("session_count")
        stmt = select(
            db_models.Tutors.id,
            db_models.Tutors.name,
            db_models.Tutors.email,
            db_models.Tutors.color,
            db_models.Timeblocks.session_type,
            total_minutes,
            session_count,
        ).select_from(db_models.Timeblocks).join(
            db_models.Tutors, db_models.Tutors.id == db_models.Timeblocks.tutor_id
        ).filter(
            db_models.Timeblocks.status == TimeblockStatusEnum.BOOKED.value,
            db_models.Timeblocks.start_time < now
        ).group_by(
            db_models.Tutors.id,
            db_models.Tutors.name,
            db_models.Tutors.email,
            db_models.Tutors.color,
            db_models.Timeblocks.session_type
        ).order_by(db_models.Tutors.name.asc(), db_models.Timeblocks.session_type.asc())

        result = await self.db.execute(stmt)
        return [
            report_models.TutorHoursByType(
                tutor_id=row.id,
                tutor_name=row.name,
                tutor_email=row.email,
                tutor_color=row.color,
                session_type=row.session_type,
                total_hours=round(int(row.total_minutes) / 60, 2),
                total_minutes=int(row.total_minutes),
                session_count=int(row.session_count),
            )
            for row in result.all()
        ]
