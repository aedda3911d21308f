# app/services/classifier.py
"""
Urgency and past-due classification of appointment records.

Appointment dates and times arrive as doctor-local civil values
(`YYYY-MM-DD` plus either `H:MM` or `H:MM AM/PM`). These helpers never
raise for malformed records: a parse failure is logged and the record
gets the safe classification (not urgent, not past).
"""

import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core import config
from app.core.logger import get_module_logger
from app.models.appointment import Appointment

logger = get_module_logger("classifier")

PENDING = "pending"
APPROVED = "approved"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
CANCELLED = "cancelled"

TERMINAL_STATUSES = frozenset({COMPLETED, CANCELLED})

_STATUS_ALIASES = {
    "canceled": CANCELLED,
}

_CLOCK_24H = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*$')
_CLOCK_12H = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?\s*([AaPp])\.?\s*[Mm]\.?\s*$')


def canonical_status(status: Optional[str]) -> str:
    """Lower-case status with both cancel spellings folded together"""
    value = (status or PENDING).strip().lower() or PENDING
    return _STATUS_ALIASES.get(value, value)


def is_terminal(status: Optional[str]) -> bool:
    return canonical_status(status) in TERMINAL_STATUSES


def parse_appointment_date(value: str) -> date:
    return date.fromisoformat(value.strip())


def normalize_clock_hour(hour: int) -> int:
    """
    Wrap a clock reading of hour 24 to hour 0.

    Some formatters emit midnight as "24:MM". The reading stays on the
    same calendar date; it is not rolled forward to the next day.
    """
    if hour == 24:
        return 0
    return hour


def parse_civil_time(value: str) -> time:
    """
    Parse a doctor-local time of day.

    The 12-hour form is detected by the presence of an "M" (AM/PM marker);
    anything else is read as 24-hour. Raises ValueError when unparseable.
    """
    if not value or not value.strip():
        raise ValueError("empty time value")

    if "M" in value.upper():
        match = _CLOCK_12H.match(value)
        if not match:
            raise ValueError(f"unrecognized 12-hour time: {value!r}")
        hour, minute = int(match.group(1)), int(match.group(2))
        second = int(match.group(3) or 0)
        if not 1 <= hour <= 12:
            raise ValueError(f"hour out of range in {value!r}")
        hour = hour % 12
        if match.group(4).upper() == "P":
            hour += 12
    else:
        match = _CLOCK_24H.match(value)
        if not match:
            raise ValueError(f"unrecognized 24-hour time: {value!r}")
        hour = normalize_clock_hour(int(match.group(1)))
        minute = int(match.group(2))
        second = int(match.group(3) or 0)

    return time(hour, minute, second)


def resolve_time_zone(name: Optional[str]) -> ZoneInfo:
    """Doctor zone, falling back to the configured default when absent or unknown"""
    if not name:
        return ZoneInfo(config.DEFAULT_DOCTOR_TIME_ZONE)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown time zone {name!r}, using {config.DEFAULT_DOCTOR_TIME_ZONE}")
        return ZoneInfo(config.DEFAULT_DOCTOR_TIME_ZONE)


def civil_to_instant(date_value: str, time_value: str, time_zone: Optional[str]) -> datetime:
    """Interpret a civil date+time as wall-clock time in `time_zone` (aware result)"""
    civil = datetime.combine(parse_appointment_date(date_value), parse_civil_time(time_value))
    return civil.replace(tzinfo=resolve_time_zone(time_zone))


def _reference_date(reference: Union[date, datetime, None]) -> date:
    if reference is None:
        return date.today()
    if isinstance(reference, datetime):
        return reference.date()
    return reference


def _reference_instant(reference: Optional[datetime]) -> datetime:
    if reference is None:
        return datetime.now(timezone.utc)
    if reference.tzinfo is None:
        # naive readings are system-local wall clock
        return reference.astimezone()
    return reference


def is_urgent_pending(
        appointment: Appointment,
        reference: Union[date, datetime, None] = None,
        window_days: int = None
) -> bool:
    """
    True when the appointment is pending and due within the urgent window.

    "Today" is the calendar date of `reference` as given by the caller
    (server-local `date.today()` when omitted), not the doctor's zone.
    """
    if canonical_status(appointment.status) != PENDING:
        return False

    if window_days is None:
        window_days = config.URGENT_WINDOW_DAYS

    try:
        appointment_date = parse_appointment_date(appointment.date)
    except (ValueError, AttributeError) as e:
        logger.warning(f"Cannot read date of appointment {appointment.id}: {str(e)}")
        return False

    today = _reference_date(reference)
    return today <= appointment_date <= today + timedelta(days=window_days)


def is_past_due(appointment: Appointment, reference: Optional[datetime] = None) -> bool:
    """
    True when the appointment's scheduled instant, read in the doctor's
    zone, is strictly before `reference` (now when omitted).
    """
    try:
        scheduled = civil_to_instant(appointment.date, appointment.time, appointment.doctor_time_zone)
    except (ValueError, AttributeError, TypeError) as e:
        logger.warning(
            f"Cannot compute scheduled time of appointment {appointment.id} "
            f"({appointment.date!r} {appointment.time!r}): {str(e)}"
        )
        return False

    return scheduled < _reference_instant(reference)
