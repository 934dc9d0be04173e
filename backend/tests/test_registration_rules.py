from datetime import date, datetime, timezone

import pytest

from clubhub.core.errors import ForbiddenError, NotFoundError, ValidationError
from clubhub.services.registration_rules import (
    CREATE,
    DELETE,
    UPDATE,
    check_manager_transition,
    ensure_can_rate,
    plan_cancellation,
    plan_user_registration,
)

EVENT_START = datetime(2026, 5, 10, 18, 0, tzinfo=timezone.utc)


def test_first_registration_creates_row_in_requested_status():
    plan = plan_user_registration(None, "INTERESTED")
    assert plan.action == CREATE
    assert plan.status == "INTERESTED"


@pytest.mark.parametrize("previous", ["CANCELLED", "REJECTED"])
def test_cancelled_or_rejected_row_restarts(previous):
    plan = plan_user_registration(previous, "CONFIRMED")
    assert plan.action == UPDATE
    assert plan.status == "CONFIRMED"


def test_confirmed_cannot_downgrade_to_interested():
    with pytest.raises(ValidationError) as exc:
        plan_user_registration("CONFIRMED", "INTERESTED")
    assert "downgrade" in exc.value.detail


def test_other_transitions_overwrite_status():
    assert plan_user_registration("INTERESTED", "PENDING_PAYMENT").status == "PENDING_PAYMENT"
    assert plan_user_registration("PENDING_PAYMENT", "INTERESTED").status == "INTERESTED"
    assert plan_user_registration("ATTENDED", "CONFIRMED").status == "CONFIRMED"


def test_user_cannot_request_manager_statuses():
    with pytest.raises(ValidationError):
        plan_user_registration(None, "ATTENDED")


def test_cancel_without_row_is_not_found():
    with pytest.raises(NotFoundError):
        plan_cancellation(None)


def test_cancel_twice_fails():
    with pytest.raises(ValidationError) as exc:
        plan_cancellation("CANCELLED")
    assert "already cancelled" in exc.value.detail


def test_cancel_interested_deletes_row():
    assert plan_cancellation("INTERESTED").action == DELETE


@pytest.mark.parametrize("current", ["CONFIRMED", "PENDING_PAYMENT", "REJECTED", "ATTENDED"])
def test_cancel_other_statuses_soft_cancels(current):
    plan = plan_cancellation(current)
    assert plan.action == UPDATE
    assert plan.status == "CANCELLED"


@pytest.mark.parametrize("target", ["ATTENDED", "NO_SHOW"])
def test_attendance_before_event_day_is_rejected(target):
    with pytest.raises(ValidationError):
        check_manager_transition(
            target, event_start=EVENT_START, today=date(2026, 5, 9), capacity=None, confirmed_count=0
        )


def test_attendance_on_event_day_ignores_time_of_day():
    # the event starts at 18:00, the comparison is on calendar dates only
    check_manager_transition(
        "ATTENDED", event_start=EVENT_START, today=date(2026, 5, 10), capacity=None, confirmed_count=0
    )


def test_confirm_respects_capacity():
    check_manager_transition(
        "CONFIRMED", event_start=EVENT_START, today=date(2026, 5, 1), capacity=2, confirmed_count=1
    )
    with pytest.raises(ValidationError) as exc:
        check_manager_transition(
            "CONFIRMED", event_start=EVENT_START, today=date(2026, 5, 1), capacity=2, confirmed_count=2
        )
    assert "capacity" in exc.value.detail


def test_confirm_without_capacity_is_unbounded():
    check_manager_transition(
        "CONFIRMED", event_start=EVENT_START, today=date(2026, 5, 1), capacity=None, confirmed_count=500
    )


def test_manager_may_move_backwards():
    for target in ("INTERESTED", "REJECTED", "CANCELLED", "PENDING_PAYMENT"):
        check_manager_transition(
            target, event_start=EVENT_START, today=date(2026, 1, 1), capacity=1, confirmed_count=1
        )


def test_rating_requires_attendance():
    ensure_can_rate("ATTENDED")
    for status in (None, "CONFIRMED", "NO_SHOW"):
        with pytest.raises(ForbiddenError):
            ensure_can_rate(status)
