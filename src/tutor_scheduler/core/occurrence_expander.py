'''
Turns accepted recurring invitations into dated sessions.

Occurrences are never stored: every read expands the accepted invitations over
a rolling horizon starting today and marks the dates the tutor cancelled.
'''
from datetime import date, datetime, time, timedelta
from typing import Iterable, Protocol
from uuid import UUID

from dateutil.relativedelta import relativedelta

from ..database.db_enums import OccurrenceStatusEnum
from ..models.occurrences import DerivedOccurrence
from .recurring_patterns import sunday_based_weekday

DEFAULT_HORIZON_MONTHS = 3


class InvitationLike(Protocol):
    id: UUID
    tutor_id: UUID
    student_id: str
    day_of_week: int
    start_time: str
    duration: int
    location: str


class CancellationLike(Protocol):
    invitation_id: UUID
    cancelled_date: date


def horizon_end(today: date, months: int = DEFAULT_HORIZON_MONTHS) -> date:
    """Last date (inclusive) occurrences are generated for."""
    return today + relativedelta(months=months)


def first_occurrence(today: date, day_of_week: int) -> date:
    """First date on or after `today` falling on `day_of_week` (0=Sunday)."""
    days_ahead = (day_of_week - sunday_based_weekday(today)) % 7
    return today + timedelta(days=days_ahead)


def _parse_clock(start_time: str) -> time:
    hours, minutes = start_time.split(":")
    return time(int(hours), int(minutes))


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def expand_invitations(
    invitations: Iterable[InvitationLike],
    cancellations: Iterable[CancellationLike],
    today: date,
    horizon_months: int = DEFAULT_HORIZON_MONTHS
) -> list[DerivedOccurrence]:
    """
    Expands each invitation into one occurrence per week from its first
    matching date on or after `today` up to the horizon end, inclusive.

    An occurrence is cancelled when its invitation has a cancellation on the
    same calendar date. The caller passes only accepted invitations.
    """
    today = _as_date(today)
    end = horizon_end(today, horizon_months)
    cancelled = {
        (c.invitation_id, _as_date(c.cancelled_date))
        for c in cancellations
    }

    occurrences = []
    for invitation in invitations:
        clock = _parse_clock(invitation.start_time)
        current = first_occurrence(today, invitation.day_of_week)
        index = 0
        while current <= end:
            is_cancelled = (invitation.id, current) in cancelled
            occurrences.append(DerivedOccurrence(
                invitation_id=invitation.id,
                occurrence_index=index,
                tutor_id=invitation.tutor_id,
                start_time=datetime.combine(current, clock),
                duration=invitation.duration,
                status=OccurrenceStatusEnum.CANCELLED if is_cancelled else OccurrenceStatusEnum.BOOKED,
                location=invitation.location,
                student_id=invitation.student_id or "",
            ))
            current += timedelta(days=7)
            index += 1
    return occurrences
