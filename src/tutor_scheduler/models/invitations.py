'''
Recurring Invitation API Models
'''
from typing import Optional
from uuid import UUID
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import InvitationStatusEnum


class RecurringInvitationRead(BaseModel):
    """
    A tutor's standing offer of a weekly session to one student.
    The token is deliberately not exposed here.
    """
    id: UUID
    tutor_id: UUID
    student_email: str
    student_id: str
    day_of_week: int = Field(..., ge=0, le=6)
    start_time: str
    duration: int
    location: str
    description: Optional[str] = None
    color: Optional[str] = None
    status: InvitationStatusEnum
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SessionCancellationCreate(BaseModel):
    cancelled_date: date


class SessionCancellationRead(BaseModel):
    id: UUID
    invitation_id: UUID
    cancelled_date: date

    model_config = ConfigDict(from_attributes=True)
