'''
Reporting API Models
'''
from uuid import UUID

from pydantic import BaseModel

from ..database.db_enums import SessionTypeEnum


class TutorHoursByType(BaseModel):
    """
    Hours a tutor has delivered for one session type.
    Only booked timeblocks that already started are counted.
    """
    tutor_id: UUID
    tutor_name: str
    tutor_email: str
    tutor_color: str
    session_type: SessionTypeEnum
    total_hours: float
    total_minutes: int
    session_count: int
