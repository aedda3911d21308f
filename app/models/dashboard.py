# app/models/dashboard.py

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List

from app.models.appointment import Appointment, AppointmentDetail, GeoResult


class ViewModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class FilterState(ViewModel):
    """Request-scoped list filters. Never mutated; every change is a new instance."""
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, frozen=True)

    date_range: str = Field("30", description="Number of days back, or 'all'")
    page: int = Field(1, ge=1)
    status: str = Field("all", description="Canonical status, or 'all'")
    urgent_only: bool = False


class ActionOption(ViewModel):
    action: str
    label: str
    description: str
    requires_note: bool = False


class SummaryCounts(ViewModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    cancelled: int = 0
    revenue: float = 0
    completion_rate: int = 0


class AppointmentRow(ViewModel):
    appointment: Appointment
    status: str
    status_label: str
    time_value: str
    time_period: str = ""
    display_fee: Optional[float] = None
    attendance_label: Optional[str] = None
    is_urgent: bool = False
    is_past: bool = False
    show_actions: bool = True
    actions: List[ActionOption] = Field(default_factory=list)


class NavLink(ViewModel):
    label: str
    href: Optional[str] = None
    value: Optional[str] = None
    active: bool = False
    disabled: bool = False


class Navigation(ViewModel):
    previous: NavLink
    next: NavLink
    statuses: List[NavLink] = Field(default_factory=list)
    ranges: List[NavLink] = Field(default_factory=list)
    urgent_toggle: NavLink


class AppointmentsView(ViewModel):
    filters: FilterState
    appointments: List[AppointmentRow] = Field(default_factory=list)
    urgent_count: int = 0
    summary: SummaryCounts = Field(default_factory=SummaryCounts)
    has_next_page: bool = False
    navigation: Optional[Navigation] = None
    errors: List[str] = Field(default_factory=list)


class AppointmentDetailView(ViewModel):
    appointment: AppointmentDetail
    status: str
    status_label: str
    date_label: str = ""
    time_value: str = ""
    time_period: str = ""
    attendance_label: Optional[str] = None
    is_past: bool = False
    show_actions: bool = True
    actions: List[ActionOption] = Field(default_factory=list)
    location: Optional[GeoResult] = None
