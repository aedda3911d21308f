# app/services/aggregator.py
"""
Builds the appointment list view models from remote query results.

Summary counters are always computed over the source set of the current
mode, never over the display order, so pinning urgent rows to the top
does not change any count.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from app.core.logger import get_module_logger
from app.models.appointment import Appointment, AppointmentPage
from app.models.dashboard import AppointmentRow, AppointmentsView, FilterState, Navigation, SummaryCounts
from app.services.actions import available_actions
from app.services.classifier import (
    canonical_status, is_past_due, is_terminal, is_urgent_pending,
    APPROVED, CANCELLED, COMPLETED, IN_PROGRESS, PENDING,
)

logger = get_module_logger("aggregator")

STATUS_LABELS = {
    COMPLETED: "Completed",
    APPROVED: "Approved",
    PENDING: "Pending",
    IN_PROGRESS: "In Progress",
    CANCELLED: "Cancelled",
}

# Lower sorts first in the history view; anything else ranks with pending
HISTORY_PRIORITY = {
    COMPLETED: 1,
    CANCELLED: 2,
    APPROVED: 3,
    IN_PROGRESS: 4,
}
DEFAULT_HISTORY_PRIORITY = 5


def status_label(status: str) -> str:
    return STATUS_LABELS.get(canonical_status(status), status)


def split_time(value: str) -> Tuple[str, str]:
    """'10:30 AM' -> ('10:30', 'AM'); 24h values have no period"""
    parts = (value or "").split()
    if not parts:
        return value or "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def attendance_label(attendance: Optional[str]) -> Optional[str]:
    if not attendance:
        return None
    return "Shown" if attendance == "shown" else "Not Shown"


def completion_rate(completed: int, total: int) -> int:
    if total == 0:
        return 0
    return round(completed / total * 100)


def summarize(appointments: Iterable[Appointment]) -> SummaryCounts:
    counts = {COMPLETED: 0, PENDING: 0, IN_PROGRESS: 0, CANCELLED: 0}
    total = 0
    revenue = 0.0

    for appointment in appointments:
        total += 1
        status = canonical_status(appointment.status)
        if status in counts:
            counts[status] += 1
        revenue += appointment.fee or 0

    return SummaryCounts(
        total=total,
        completed=counts[COMPLETED],
        pending=counts[PENDING],
        in_progress=counts[IN_PROGRESS],
        cancelled=counts[CANCELLED],
        revenue=revenue,
        completion_rate=completion_rate(counts[COMPLETED], total),
    )


def urgent_only(appointments: Iterable[Appointment], today: date) -> List[Appointment]:
    return [a for a in appointments if is_urgent_pending(a, today)]


def pin_urgent(appointments: Sequence[Appointment], today: date) -> List[Appointment]:
    """Stable partition: urgent rows first, remote order kept within each part"""
    urgent, rest = [], []
    for appointment in appointments:
        (urgent if is_urgent_pending(appointment, today) else rest).append(appointment)
    return urgent + rest


def history_sort(appointments: Iterable[Appointment]) -> List[Appointment]:
    """
    Order by status priority, then date descending, then time descending.

    Date and time are compared as plain strings: this assumes ISO dates
    and one time format per doctor. Mixed 12h/24h values sort lexically.
    """
    by_recency = sorted(appointments, key=lambda a: (a.date, a.time), reverse=True)
    return sorted(
        by_recency,
        key=lambda a: HISTORY_PRIORITY.get(canonical_status(a.status), DEFAULT_HISTORY_PRIORITY),
    )


def build_row(appointment: Appointment, today: date, now: datetime) -> AppointmentRow:
    time_value, time_period = split_time(appointment.time)
    past = is_past_due(appointment, now)
    return AppointmentRow(
        appointment=appointment,
        status=canonical_status(appointment.status),
        status_label=status_label(appointment.status),
        time_value=time_value,
        time_period=time_period,
        display_fee=appointment.fee if appointment.fee else None,
        attendance_label=attendance_label(appointment.attendance),
        is_urgent=is_urgent_pending(appointment, today),
        is_past=past,
        show_actions=not is_terminal(appointment.status),
        actions=available_actions(appointment, now, past=past),
    )


def build_live_view(
        page: AppointmentPage,
        all_pending: AppointmentPage,
        filters: FilterState,
        today: date,
        now: datetime,
        navigation: Optional[Navigation] = None,
        errors: Optional[List[str]] = None
) -> AppointmentsView:
    urgent_set = urgent_only(all_pending.appointments, today)

    if filters.urgent_only:
        # urgent mode shows every urgent appointment, not just this page's
        source = urgent_set
        display = urgent_set
        has_next_page = False
    else:
        source = page.appointments
        display = pin_urgent(page.appointments, today)
        has_next_page = page.has_next_page

    logger.info(
        f"Live view: {len(display)} rows, {len(urgent_set)} urgent overall, "
        f"urgent_only={filters.urgent_only}"
    )

    return AppointmentsView(
        filters=filters,
        appointments=[build_row(a, today, now) for a in display],
        urgent_count=len(urgent_set),
        summary=summarize(source),
        has_next_page=has_next_page,
        navigation=navigation,
        errors=errors or [],
    )


def build_history_view(
        page: AppointmentPage,
        filters: FilterState,
        today: date,
        now: datetime,
        navigation: Optional[Navigation] = None,
        errors: Optional[List[str]] = None
) -> AppointmentsView:
    ordered = history_sort(page.appointments)
    return AppointmentsView(
        filters=filters,
        appointments=[build_row(a, today, now) for a in ordered],
        urgent_count=len(urgent_only(page.appointments, today)),
        summary=summarize(page.appointments),
        has_next_page=page.has_next_page,
        navigation=navigation,
        errors=errors or [],
    )
