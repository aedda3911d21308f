# app/services/filters.py
"""
Translation between URL query parameters and remote query variables.

`parse_filter_state` and `filter_to_params` are inverses for any state
they produce, so a generated link fed back into the parser yields the
same filters.
"""

from datetime import date, timedelta
from typing import Mapping, Optional, Literal
from urllib.parse import urlencode

from app.core import config
from app.models.appointment import AppointmentQuery
from app.models.dashboard import FilterState, NavLink, Navigation
from app.services.classifier import canonical_status, CANCELLED, PENDING

DEFAULT_RANGE = "30"
# Longer look-backs fall back to the default range
MAX_RANGE_DAYS = 3650
ALL = "all"

RANGE_OPTIONS = [
    ("30", "Past 30 Days"),
    ("90", "Past 90 Days"),
    ("180", "Past 6 Months"),
    ("365", "Past Year"),
    (ALL, "All Time"),
]

STATUS_OPTIONS = [
    (ALL, "All Statuses"),
    ("approved", "Approved"),
    ("pending", "Pending"),
    (CANCELLED, "Cancelled"),
    ("completed", "Completed"),
]

# The remote API spells the cancelled status with one "l"
_REMOTE_STATUS = {CANCELLED: "canceled"}

_TRUTHY = {"1", "true", "yes", "on"}

View = Literal["live", "history"]


def _parse_range(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    if value == ALL:
        return ALL
    if not value.isdecimal():
        return DEFAULT_RANGE
    try:
        days = int(value)
    except ValueError:
        return DEFAULT_RANGE
    if not 0 < days <= MAX_RANGE_DAYS:
        return DEFAULT_RANGE
    return str(days)


def _parse_page(value: Optional[str]) -> int:
    try:
        page = int((value or "").strip())
    except ValueError:
        return 1
    return max(page, 1)


def _parse_status(value: Optional[str]) -> str:
    value = (value or "").strip().lower()
    if not value or value == ALL:
        return ALL
    return canonical_status(value)


def parse_filter_state(params: Mapping[str, str]) -> FilterState:
    return FilterState(
        date_range=_parse_range(params.get("range")),
        page=_parse_page(params.get("page")),
        status=_parse_status(params.get("status")),
        urgent_only=(params.get("urgent") or "").strip().lower() in _TRUTHY,
    )


def filter_to_params(filters: FilterState) -> dict:
    params = {"range": filters.date_range}
    if filters.status != ALL:
        params["status"] = filters.status
    params["page"] = str(filters.page)
    if filters.urgent_only:
        params["urgent"] = "1"
    return params


def build_href(base_path: str, filters: FilterState) -> str:
    return f"{base_path}?{urlencode(filter_to_params(filters))}"


def remote_status(status: str) -> Optional[str]:
    if status == ALL:
        return None
    return _REMOTE_STATUS.get(status, status)


def range_start_date(filters: FilterState, today: date) -> Optional[date]:
    if filters.date_range == ALL:
        return None
    try:
        return today - timedelta(days=int(filters.date_range))
    except (ValueError, OverflowError):
        return today - timedelta(days=int(DEFAULT_RANGE))


def live_cutoff_date(today: date) -> date:
    """First date shown in the live view"""
    return today - timedelta(days=config.LIVE_WINDOW_DAYS)


def history_end_date(today: date) -> date:
    """Last date shown in the history view; the day before the live cutoff"""
    return live_cutoff_date(today) - timedelta(days=1)


def build_appointment_query(
        filters: FilterState,
        doctor_id: str,
        view: View,
        today: date,
        limit: int
) -> AppointmentQuery:
    start = range_start_date(filters, today)

    if view == "live":
        cutoff = live_cutoff_date(today)
        start = cutoff if start is None else max(start, cutoff)
        end = None
    else:
        end = history_end_date(today)

    return AppointmentQuery(
        doctor_id=doctor_id,
        start_date=start.isoformat() if start else None,
        end_date=end.isoformat() if end else None,
        status=remote_status(filters.status),
        page=filters.page,
        limit=limit,
    )


def build_pending_query(doctor_id: str, today: date, limit: int) -> AppointmentQuery:
    """Global, unpaged pending appointments from today on (urgent badge source)"""
    return AppointmentQuery(
        doctor_id=doctor_id,
        start_date=today.isoformat(),
        status=PENDING,
        limit=limit,
    )


def build_navigation(filters: FilterState, has_next_page: bool, base_path: str) -> Navigation:
    previous_disabled = filters.page <= 1
    previous = NavLink(
        label="Previous",
        href=None if previous_disabled else build_href(base_path, filters.model_copy(update={"page": filters.page - 1})),
        disabled=previous_disabled,
    )
    next_link = NavLink(
        label="Next",
        href=build_href(base_path, filters.model_copy(update={"page": filters.page + 1})) if has_next_page else None,
        disabled=not has_next_page,
    )

    statuses = [
        NavLink(
            label=label,
            value=value,
            href=build_href(base_path, filters.model_copy(update={"status": value, "page": 1})),
            active=filters.status == value,
        )
        for value, label in STATUS_OPTIONS
    ]

    ranges = [
        NavLink(
            label=label,
            value=value,
            href=build_href(base_path, filters.model_copy(update={"date_range": value})),
            active=filters.date_range == value,
        )
        for value, label in RANGE_OPTIONS
    ]

    urgent_toggle = NavLink(
        label="Urgent only",
        href=build_href(base_path, filters.model_copy(update={"urgent_only": not filters.urgent_only})),
        active=filters.urgent_only,
    )

    return Navigation(
        previous=previous,
        next=next_link,
        statuses=statuses,
        ranges=ranges,
        urgent_toggle=urgent_toggle,
    )
