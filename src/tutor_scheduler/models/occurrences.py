'''
Occurrence API Models

A tutor's calendar is made of two kinds of entries: one-off sessions stored in
the database, and weekly sessions derived on the fly from accepted invitations.
'''
from typing import Annotated, Literal, Optional, Union
from uuid import UUID
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, computed_field

from ..database.db_enums import OccurrenceStatusEnum, SessionTypeEnum, TimeblockStatusEnum


class PersistedOccurrence(BaseModel):
    origin: Literal["persisted"] = "persisted"
    id: UUID
    tutor_id: UUID
    title: str
    start_time: datetime
    duration: int
    status: TimeblockStatusEnum
    session_type: SessionTypeEnum
    location: str
    student_id: Optional[str] = None
    student_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)


class DerivedOccurrence(BaseModel):
    """
    One dated instance of an accepted recurring invitation. Never stored.
    Identified by its invitation and its position in the expansion.
    """
    origin: Literal["derived"] = "derived"
    invitation_id: UUID
    occurrence_index: int = Field(..., ge=0)
    tutor_id: UUID
    start_time: datetime
    duration: int
    status: OccurrenceStatusEnum
    session_type: Literal["regular"] = "regular"
    location: str
    student_id: str
    student_name: Optional[str] = None

    @computed_field
    @property
    def id(self) -> str:
        return f"{self.invitation_id}:{self.occurrence_index}"

    @computed_field
    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration)


Occurrence = Annotated[
    Union[PersistedOccurrence, DerivedOccurrence],
    Field(discriminator="origin")
]
