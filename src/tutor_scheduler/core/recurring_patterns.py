'''
Recurring pattern utilities.

A general recurrence model (daily, weekly or monthly, every N units, optionally
restricted to some days of the week) that can turn one template timeblock into
a series of dated timeblocks.

Days of the week use 0=Sunday .. 6=Saturday throughout.
'''
import json
from datetime import date, datetime, timedelta
from typing import Optional
from uuid import UUID

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from ..common.exceptions import InvalidPatternError
from ..common.logger import log

FREQUENCIES = ("daily", "weekly", "monthly")
DEFAULT_EXPANSION_DAYS = 90
MAX_SEARCH_STEPS = 100
DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class RecurringPattern(BaseModel):
    """
    Accepts both snake_case and the camelCase keys stored by the web client.
    Values are not checked on construction; call `validate` for that.

    The web client serialises `endDate` as a full ISO timestamp
    ("2026-12-01T10:30:00.000Z"); only its calendar date is kept.
    """
    frequency: str
    interval: Optional[int] = 1
    days_of_week: Optional[list[int]] = None
    end_date: Optional[date] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator("end_date", mode="before")
    @classmethod
    def end_date_from_timestamp(cls, value):
        if isinstance(value, str) and "T" in value:
            value = isoparse(value)
        if isinstance(value, datetime):
            return value.date()
        return value


class BaseTimeblock(BaseModel):
    """The template a recurring pattern is stamped from."""
    title: str
    description: Optional[str] = None
    tutor_id: UUID
    start_time: datetime
    end_time: datetime
    location: str


def sunday_based_weekday(day: date) -> int:
    """Converts Python's Monday=0 weekday to the Sunday=0 convention."""
    return (day.weekday() + 1) % 7


def should_occur_on(day: date, pattern: RecurringPattern) -> bool:
    """
    Daily and monthly patterns match every date they land on; the interval
    alone decides which dates those are. Weekly patterns additionally require
    the weekday to be listed.
    """
    if pattern.frequency == "daily":
        return True
    if pattern.frequency == "weekly":
        return sunday_based_weekday(day) in (pattern.days_of_week or [])
    if pattern.frequency == "monthly":
        return True
    return False


def next_occurrence(day: date, pattern: RecurringPattern) -> date:
    """Steps `day` forward by one interval of the pattern's frequency."""
    if pattern.frequency == "daily":
        return day + timedelta(days=pattern.interval)
    if pattern.frequency == "weekly":
        return day + timedelta(weeks=pattern.interval)
    if pattern.frequency == "monthly":
        # relativedelta clamps to the last day of shorter months
        return day + relativedelta(months=pattern.interval)
    raise InvalidPatternError([f"Unknown frequency '{pattern.frequency}'"])


def _structural_errors(pattern: RecurringPattern) -> list[str]:
    errors = []
    if pattern.frequency not in FREQUENCIES:
        errors.append("Invalid frequency. Must be 'daily', 'weekly', or 'monthly'")
    if pattern.interval is None or pattern.interval < 1:
        errors.append("Interval must be at least 1")
    if pattern.frequency == "weekly" and not pattern.days_of_week:
        errors.append("Weekly patterns must specify at least one day of the week")
    if pattern.days_of_week and any(d < 0 or d > 6 for d in pattern.days_of_week):
        errors.append("Invalid days of week. Must be between 0 (Sunday) and 6 (Saturday)")
    return errors


def validate(pattern: RecurringPattern, today: Optional[date] = None) -> None:
    """
    Raises InvalidPatternError listing every rule the pattern breaks.
    """
    today = today or date.today()
    errors = _structural_errors(pattern)
    if pattern.end_date and pattern.end_date < today:
        errors.append("End date cannot be in the past")
    if errors:
        raise InvalidPatternError(errors)


def is_valid(pattern: RecurringPattern, today: Optional[date] = None) -> bool:
    try:
        validate(pattern, today)
    except InvalidPatternError:
        return False
    return True


def expand(
    base_timeblock: BaseTimeblock,
    pattern: RecurringPattern,
    start_date: date,
    end_date: Optional[date] = None
) -> list[BaseTimeblock]:
    """
    Stamps one copy of `base_timeblock` on every matching date in
    [start_date, end_date], both ends inclusive.

    The end is the explicit `end_date`, else the pattern's own end date,
    else 90 days after `start_date`. Each copy keeps the base block's
    time of day and takes the occurrence's date.
    """
    errors = _structural_errors(pattern)
    if errors:
        raise InvalidPatternError(errors)

    final_end = end_date or pattern.end_date or (start_date + timedelta(days=DEFAULT_EXPANSION_DAYS))
    start_clock = base_timeblock.start_time.time()
    end_clock = base_timeblock.end_time.time()

    timeblocks = []
    current = start_date
    while current <= final_end:
        if should_occur_on(current, pattern):
            timeblocks.append(base_timeblock.model_copy(update={
                "start_time": datetime.combine(current, start_clock),
                "end_time": datetime.combine(current, end_clock),
            }))
        current = next_occurrence(current, pattern)
    return timeblocks


def next_occurrence_from(
    from_date: date,
    pattern: RecurringPattern,
    today: Optional[date] = None
) -> Optional[date]:
    """
    First date at or after `from_date` the pattern lands on.
    Returns None for an invalid pattern or when nothing matches
    within MAX_SEARCH_STEPS steps.
    """
    if not is_valid(pattern, today):
        return None

    current = from_date
    for _ in range(MAX_SEARCH_STEPS):
        if should_occur_on(current, pattern):
            return current
        current = next_occurrence(current, pattern)
    return None


def parse_pattern(pattern_json: Optional[str]) -> Optional[RecurringPattern]:
    """
    Parses a pattern stored as JSON text. A missing, null or zero interval
    becomes 1. Malformed input is logged and yields None.
    """
    if not pattern_json:
        return None
    try:
        raw = json.loads(pattern_json)
        pattern = RecurringPattern.model_validate(raw)
    except (ValueError, ValidationError) as e:
        log.error(f"Error parsing recurring pattern: {e}")
        return None
    if not pattern.interval:
        pattern.interval = 1
    return pattern


def format_pattern(pattern: RecurringPattern) -> str:
    """Human readable summary, e.g. 'Every 2 weeks on Monday, Wednesday'."""
    interval = pattern.interval or 1
    plural = "s" if interval > 1 else ""
    if pattern.frequency == "daily":
        return f"Every {interval} day{plural}"
    if pattern.frequency == "weekly":
        if pattern.days_of_week:
            day_names = ", ".join(DAY_NAMES[d] for d in pattern.days_of_week)
            return f"Every {interval} week{plural} on {day_names}"
        return f"Every {interval} week{plural}"
    if pattern.frequency == "monthly":
        return f"Every {interval} month{plural}"
    return "Unknown pattern"
