'''
Timeblock API Models
'''
from typing import Optional
from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from ..core.recurring_patterns import RecurringPattern
from ..database.db_enums import SessionTypeEnum


class RecurringTimeblockCreate(BaseModel):
    """
    A one-off session template plus the pattern to repeat it with.
    Only the time of day of start_time/end_time matters for the copies.
    """
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: str
    session_type: SessionTypeEnum = SessionTypeEnum.INDIVIDUAL
    pattern: RecurringPattern
    start_date: date
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class RecurringTimeblockResult(BaseModel):
    pattern_summary: str
    created: int
