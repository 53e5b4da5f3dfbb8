'''
Weekly Schedule API Models
'''
from typing import Annotated, Literal, Optional, Union
from uuid import UUID
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..database.db_enums import SessionTypeEnum

DEFAULT_COLORS = {
    SessionTypeEnum.INDIVIDUAL.value: "#3b82f6",
    SessionTypeEnum.GROUP.value: "#10b981",
    SessionTypeEnum.REGULARS.value: "#8b5cf6",
}

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TimeSlotBase(BaseModel):
    """
    Fields shared by every slot of the weekly template.
    """
    id: str = Field(..., min_length=1)
    start_time: str = Field(..., pattern=HHMM_PATTERN, description="HH:mm")
    duration: int = Field(..., ge=15, description="Minutes, multiple of 15")
    location: str
    description: Optional[str] = None
    color: Optional[str] = None

    @field_validator("duration")
    @classmethod
    def duration_in_quarter_hours(cls, value: int) -> int:
        if value % 15 != 0:
            raise ValueError("duration must be a multiple of 15 minutes")
        return value

    @model_validator(mode="after")
    def apply_default_color(self):
        if not self.color:
            self.color = DEFAULT_COLORS[self.session_type]
        return self


class IndividualSlot(TimeSlotBase):
    session_type: Literal["individual"]


class GroupSlot(TimeSlotBase):
    session_type: Literal["group"]


class RegularsSlot(TimeSlotBase):
    """
    A weekly 1:1 slot reserved for one specific student.
    Saving a template with a new one of these sends the student an invitation.
    """
    session_type: Literal["regulars"]
    email: str = Field(..., min_length=3)
    student_id: str = Field(..., min_length=1)


TimeSlot = Annotated[
    Union[IndividualSlot, GroupSlot, RegularsSlot],
    Field(discriminator="session_type")
]


class DaySchedule(BaseModel):
    day: int = Field(..., ge=0, le=6, description="0=Sunday, 6=Saturday")
    time_slots: list[TimeSlot] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_start_times(self):
        seen = set()
        for slot in self.time_slots:
            if slot.start_time in seen:
                raise ValueError(f"Two slots start at {slot.start_time} on day {self.day}")
            seen.add(slot.start_time)
        return self


class WeeklyTemplate(BaseModel):
    """
    The tutor's full recurring availability. Replaced wholesale on each save.
    """
    days: list[DaySchedule] = Field(default_factory=list)

    @model_validator(mode="after")
    def unique_days(self):
        days = [d.day for d in self.days]
        if len(days) != len(set(days)):
            raise ValueError("Each day may appear only once in a weekly template")
        self.days.sort(key=lambda d: d.day)
        return self

    def regulars_slots(self) -> list[tuple[int, RegularsSlot]]:
        """Returns every (day, slot) pair whose slot is a regulars slot."""
        return [
            (day.day, slot)
            for day in self.days
            for slot in day.time_slots
            if isinstance(slot, RegularsSlot)
        ]


class WeeklyTemplateRead(WeeklyTemplate):
    tutor_id: UUID
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InvitationDiffSummary(BaseModel):
    """Outcome of one invitation diffing pass."""
    created: int = 0
    skipped: int = 0
    notified: int = 0
    notification_failures: list[str] = Field(default_factory=list)


class ScheduleSaveResult(BaseModel):
    schedule: WeeklyTemplateRead
    invitations: InvitationDiffSummary
