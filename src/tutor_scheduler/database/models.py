from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKeyConstraint, Index, Integer, JSON, PrimaryKeyConstraint, SmallInteger, String, Text, UniqueConstraint, Uuid, CheckConstraint, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import uuid

from .db_enums import SessionTypeEnum, InvitationStatusEnum, TimeblockStatusEnum

class Base(DeclarativeBase):
    pass


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Tutors(Base):
    __tablename__ = 'tutors'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='tutors_pkey'),
        UniqueConstraint('external_id', name='tutors_external_id_key'),
        UniqueConstraint('email', name='tutors_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    external_id: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(Text)
    email: Mapped[str] = mapped_column(String(255))
    avatar: Mapped[str] = mapped_column(Text, default='')
    color: Mapped[str] = mapped_column(String(16), default='#6366f1')
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now, server_default=func.now())

    weekly_schedule: Mapped[Optional['WeeklySchedules']] = relationship('WeeklySchedules', back_populates='tutor', uselist=False)
    recurring_invitations: Mapped[list['RecurringInvitations']] = relationship('RecurringInvitations', back_populates='tutor')
    timeblocks: Mapped[list['Timeblocks']] = relationship('Timeblocks', back_populates='tutor')


class WeeklySchedules(Base):
    __tablename__ = 'weekly_schedules'
    __table_args__ = (
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='weekly_schedules_tutor_id_fkey'),
        PrimaryKeyConstraint('id', name='weekly_schedules_pkey'),
        UniqueConstraint('tutor_id', name='weekly_schedules_tutor_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    # The full list of day schedules, replaced wholesale on every save.
    schedule: Mapped[list] = mapped_column(JSON().with_variant(JSONB, 'postgresql'))
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now, server_default=func.now(), onupdate=datetime.datetime.now)

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='weekly_schedule')


class RecurringInvitations(Base):
    __tablename__ = 'recurring_invitations'
    __table_args__ = (
        CheckConstraint('day_of_week >= 0 AND day_of_week <= 6', name='valid_day_of_week'),
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='recurring_invitations_tutor_id_fkey'),
        PrimaryKeyConstraint('id', name='recurring_invitations_pkey'),
        UniqueConstraint('token', name='recurring_invitations_token_key'),
        Index('idx_invitations_natural_key', 'tutor_id', 'student_email', 'day_of_week', 'start_time')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_email: Mapped[str] = mapped_column(String(255))
    student_id: Mapped[str] = mapped_column(String(255))
    day_of_week: Mapped[int] = mapped_column(SmallInteger)
    start_time: Mapped[str] = mapped_column(String(5))
    duration: Mapped[int] = mapped_column(Integer)
    location: Mapped[str] = mapped_column(Text)
    token: Mapped[str] = mapped_column(String(128))
    status: Mapped[str] = mapped_column(Enum(*_enum_values(InvitationStatusEnum), name='invitation_status_enum'), default=InvitationStatusEnum.PENDING.value)
    description: Mapped[Optional[str]] = mapped_column(Text)
    color: Mapped[Optional[str]] = mapped_column(String(16))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now, server_default=func.now())

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='recurring_invitations')
    cancellations: Mapped[list['SessionCancellations']] = relationship('SessionCancellations', back_populates='invitation', cascade='all, delete-orphan')


class SessionCancellations(Base):
    __tablename__ = 'session_cancellations'
    __table_args__ = (
        ForeignKeyConstraint(['invitation_id'], ['recurring_invitations.id'], ondelete='CASCADE', name='session_cancellations_invitation_id_fkey'),
        PrimaryKeyConstraint('id', name='session_cancellations_pkey'),
        UniqueConstraint('invitation_id', 'cancelled_date', name='session_cancellations_invitation_date_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    invitation_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    cancelled_date: Mapped[datetime.date] = mapped_column(Date)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, default=datetime.datetime.now, server_default=func.now())

    invitation: Mapped['RecurringInvitations'] = relationship('RecurringInvitations', back_populates='cancellations')


class Timeblocks(Base):
    __tablename__ = 'timeblocks'
    __table_args__ = (
        ForeignKeyConstraint(['tutor_id'], ['tutors.id'], ondelete='CASCADE', name='timeblocks_tutor_id_fkey'),
        PrimaryKeyConstraint('id', name='timeblocks_pkey'),
        Index('idx_timeblocks_tutor_start', 'tutor_id', 'start_time')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    tutor_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    title: Mapped[str] = mapped_column(Text)
    start_time: Mapped[datetime.datetime] = mapped_column(DateTime)
    duration: Mapped[int] = mapped_column(Integer)
    session_type: Mapped[str] = mapped_column(Enum(*_enum_values(SessionTypeEnum), name='session_type_enum'))
    location: Mapped[str] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Enum(*_enum_values(TimeblockStatusEnum), name='timeblock_status_enum'), default=TimeblockStatusEnum.AVAILABLE.value)
    description: Mapped[Optional[str]] = mapped_column(Text)
    student_id: Mapped[Optional[str]] = mapped_column(String(255))

    tutor: Mapped['Tutors'] = relationship('Tutors', back_populates='timeblocks')
