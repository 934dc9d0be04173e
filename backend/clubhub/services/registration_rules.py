"""Registration state machine.

Pure functions deciding what a registration change should do. The SQL side
(`clubhub.services.registrations`) loads the current row, asks these rules
for a plan, and applies it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from clubhub.core.constants import (
    REG_ATTENDED,
    REG_CANCELLED,
    REG_CONFIRMED,
    REG_INTERESTED,
    REG_NO_SHOW,
    REG_PENDING_PAYMENT,
    REG_REJECTED,
)
from clubhub.core.errors import ForbiddenError, NotFoundError, ValidationError

USER_REQUESTABLE_STATUSES = frozenset({REG_INTERESTED, REG_PENDING_PAYMENT, REG_CONFIRMED})
_RESTARTABLE = frozenset({REG_CANCELLED, REG_REJECTED})
_ATTENDANCE = frozenset({REG_ATTENDED, REG_NO_SHOW})

CREATE = "create"
UPDATE = "update"
DELETE = "delete"


@dataclass(frozen=True)
class RegistrationPlan:
    action: str
    status: str | None = None


def plan_user_registration(current: str | None, requested: str) -> RegistrationPlan:
    if requested not in USER_REQUESTABLE_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(sorted(USER_REQUESTABLE_STATUSES))}")
    if current is None:
        return RegistrationPlan(CREATE, requested)
    if current in _RESTARTABLE:
        return RegistrationPlan(UPDATE, requested)
    if current == REG_CONFIRMED and requested == REG_INTERESTED:
        raise ValidationError("Cannot downgrade a confirmed registration to interested")
    return RegistrationPlan(UPDATE, requested)


def plan_cancellation(current: str | None) -> RegistrationPlan:
    if current is None:
        raise NotFoundError("Registration not found")
    if current == REG_CANCELLED:
        raise ValidationError("Registration already cancelled")
    if current == REG_INTERESTED:
        # interest toggles off without leaving history
        return RegistrationPlan(DELETE)
    return RegistrationPlan(UPDATE, REG_CANCELLED)


def check_manager_transition(
    target: str,
    *,
    event_start: datetime,
    today: date,
    capacity: int | None,
    confirmed_count: int,
) -> None:
    """Raise ValidationError when a manager may not move a registration to `target`."""
    if target in _ATTENDANCE and today < event_start.date():
        raise ValidationError("Attendance can only be recorded once the event has started")
    if target == REG_CONFIRMED and capacity is not None and confirmed_count >= capacity:
        raise ValidationError("Event capacity reached")


def ensure_can_rate(current: str | None) -> None:
    if current != REG_ATTENDED:
        raise ForbiddenError("You can only rate events you attended")
