# app/services/actions.py
"""
Per-appointment decision table and the action panel controller.

Which actions an appointment offers depends only on its canonical status
and whether its scheduled time has passed:

    pending              -> approve, cancel
    approved (future)    -> cancel
    approved (past)      -> mark shown, mark not shown, cancel
    completed, cancelled -> nothing (panel hidden)
    anything else        -> approve, cancel
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Hashable, Iterable, List, Optional

from pydantic import BaseModel

from app.core import config
from app.core.errors import ActionNotAvailableError
from app.core.logger import get_module_logger
from app.models.appointment import Appointment, MutationResult
from app.models.dashboard import ActionOption
from app.services.classifier import canonical_status, is_past_due, is_terminal, APPROVED

logger = get_module_logger("actions")


class Action(str, Enum):
    APPROVE = "approved"
    CANCEL = "cancelled"
    SHOWN = "shown"
    NOT_SHOWN = "not_shown"


ATTENDANCE_ACTIONS = frozenset({Action.SHOWN, Action.NOT_SHOWN})

_STATUS_OPTIONS = (
    ActionOption(
        action=Action.APPROVE.value,
        label="Approve",
        description="Confirm & notify patient via email + SMS",
    ),
    ActionOption(
        action=Action.CANCEL.value,
        label="Cancel",
        description="Cancel & notify patient via email + SMS",
        requires_note=True,
    ),
)

_ATTENDANCE_OPTIONS = (
    ActionOption(
        action=Action.SHOWN.value,
        label="Mark Show",
        description="Mark attendance: Patient showed up",
    ),
    ActionOption(
        action=Action.NOT_SHOWN.value,
        label="No Show",
        description="Mark attendance: Patient did not show up",
        requires_note=True,
    ),
)


def parse_action(value) -> Action:
    if isinstance(value, Action):
        return value
    if value in ("shown", "not_shown"):
        return Action(value)
    return Action(canonical_status(value))


def available_actions(
        appointment: Appointment,
        now: Optional[datetime] = None,
        past: Optional[bool] = None
) -> List[ActionOption]:
    """Ordered actions for the appointment; a new list on every call"""
    status = canonical_status(appointment.status)
    if is_terminal(status):
        return []

    options = [o.model_copy() for o in _STATUS_OPTIONS if o.action != status]

    if status == APPROVED:
        if past is None:
            past = is_past_due(appointment, now)
        if past:
            options = [o.model_copy() for o in _ATTENDANCE_OPTIONS] + options

    return options


class Notice(BaseModel):
    kind: str
    message: str
    expires_at: datetime

    def expires_in(self, now: datetime) -> int:
        return max(math.ceil((self.expires_at - now).total_seconds()), 0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActionController:
    """
    State of one appointment's command panel.

    At most one action runs at a time; calls made while one is in flight
    are ignored without contacting the remote API. A new notice replaces
    the previous one and expires after `notice_seconds`.
    """

    def __init__(
            self,
            appointment: Appointment,
            doctor_id: str,
            service,
            on_refresh: Iterable[Callable[[], object]] = (),
            clock: Callable[[], datetime] = _utcnow,
            notice_seconds: int = None
    ):
        self.appointment = appointment
        self.doctor_id = doctor_id
        self.service = service
        self.on_refresh = list(on_refresh)
        self.clock = clock
        self.notice_seconds = config.NOTICE_SECONDS if notice_seconds is None else notice_seconds

        self.is_open = False
        self.note = ""
        self.loading: Optional[Action] = None
        self._notice: Optional[Notice] = None

    @property
    def visible(self) -> bool:
        return not is_terminal(self.appointment.status)

    @property
    def busy(self) -> bool:
        return self.loading is not None

    @property
    def notice(self) -> Optional[Notice]:
        if self._notice and self._notice.expires_at <= self.clock():
            self._notice = None
        return self._notice

    def toggle(self) -> None:
        self.is_open = not self.is_open

    def actions(self) -> List[ActionOption]:
        return available_actions(self.appointment, self.clock())

    def _show_notice(self, kind: str, message: str) -> None:
        self._notice = Notice(
            kind=kind,
            message=message,
            expires_at=self.clock() + timedelta(seconds=self.notice_seconds),
        )

    async def handle(self, action) -> Optional[MutationResult]:
        action = parse_action(action)

        if self.busy:
            logger.info(
                f"Ignoring {action.value} on appointment {self.appointment.id}: "
                f"{self.loading.value} still in flight"
            )
            return None

        if action.value not in [o.action for o in self.actions()]:
            raise ActionNotAvailableError(action.value, self.appointment.status)

        self.loading = action
        try:
            result = await self.service.execute_action(
                action,
                self.appointment.id,
                self.doctor_id,
                self.note or None,
            )
        finally:
            self.loading = None

        if result.success:
            self.note = ""
            self.is_open = False
            for refresh in self.on_refresh:
                refresh()
            self._show_notice("success", result.message)
        else:
            self._show_notice("error", result.message)

        return result


class InFlightRegistry:
    """Keys with an action outstanding in this process"""

    def __init__(self):
        self._keys = set()

    def acquire(self, key: Hashable) -> bool:
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def release(self, key: Hashable) -> None:
        self._keys.discard(key)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._keys
