'''
Timeblock service.
'''
from datetime import date
from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.config import settings
from ..common.exceptions import InvalidPatternError, PersistenceFailure
from ..common.logger import log
from ..core import recurring_patterns
from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import TimeblockStatusEnum
from ..models import timeblocks as timeblock_models


class TimeblockService:
    """
    Service for stored one-off sessions, including series stamped out
    from a recurring pattern.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def create_recurring_for_api(
        self,
        tutor: db_models.Tutors,
        data: timeblock_models.RecurringTimeblockCreate,
        today: Optional[date] = None
    ) -> timeblock_models.RecurringTimeblockResult:
        """
        Validates the pattern, expands it and stores one available
        timeblock per occurrence. An invalid pattern raises InvalidPatternError.
        """
        log.info(f"Tutor {tutor.id} creating recurring timeblocks '{data.title}'.")
        recurring_patterns.validate(data.pattern, today)

        base = recurring_patterns.BaseTimeblock(
            title=data.title,
            description=data.description,
            tutor_id=tutor.id,
            start_time=data.start_time,
            end_time=data.end_time,
            location=data.location,
        )
        copies = recurring_patterns.expand(base, data.pattern, data.start_date, data.end_date)
        if len(copies) > settings.MAX_RECURRING_TIMEBLOCKS:
            log.warning(f"Tutor {tutor.id} asked for {len(copies)} recurring timeblocks. Rejecting.")
            raise InvalidPatternError([
                f"Pattern produces {len(copies)} timeblocks; at most {settings.MAX_RECURRING_TIMEBLOCKS} can be created at once"
            ])
        duration = int((data.end_time - data.start_time).total_seconds() // 60)

        try:
            for copy in copies:
                self.db.add(db_models.Timeblocks(
                    tutor_id=tutor.id,
                    title=copy.title,
                    description=copy.description,
                    start_time=copy.start_time,
                    duration=duration,
                    session_type=data.session_type.value,
                    location=copy.location,
                    status=TimeblockStatusEnum.AVAILABLE.value,
                ))
            await self.db.flush()
        except SQLAlchemyError as e:
            log.error(f"Failed to store recurring timeblocks for tutor {tutor.id}: {e}", exc_info=True)
            raise PersistenceFailure("Failed to create timeblocks") from e

        return timeblock_models.RecurringTimeblockResult(
            pattern_summary=recurring_patterns.format_pattern(data.pattern),
            created=len(copies),
        )
