from datetime import datetime, timezone

import pytest

from clubhub.core.errors import ValidationError
from clubhub.schemas.clubs import ClubUpdateIn
from clubhub.schemas.events import EventUpdateIn
from clubhub.services.clubs import update_club
from clubhub.services.events import update_event
from tests.fakedb import FakeSession

EVENT_ROW = {
    "id": 1,
    "club_id": 3,
    "title": "Hack night",
    "start_time": datetime(2026, 6, 1, 10, tzinfo=timezone.utc),
    "end_time": datetime(2026, 6, 1, 12, tzinfo=timezone.utc),
    "status": "DRAFT",
}


def _events_db() -> FakeSession:
    return FakeSession([("FROM events e WHERE e.id=:id", [EVENT_ROW])])


@pytest.mark.parametrize("field", ["title", "start_time", "end_time"])
def test_event_update_rejects_null_required_fields(field):
    db = _events_db()
    with pytest.raises(ValidationError) as exc:
        update_event(db, 1, EventUpdateIn.model_validate({field: None}), actor_id=9)
    assert field in exc.value.detail
    assert exc.value.status_code == 400
    assert db.writes() == []


def test_event_update_checks_window_against_stored_start():
    db = _events_db()
    payload = EventUpdateIn.model_validate({"end_time": "2026-06-01T09:00:00Z"})
    with pytest.raises(ValidationError) as exc:
        update_event(db, 1, payload, actor_id=9)
    assert exc.value.status_code == 400
    assert db.writes() == []


def test_event_update_checks_window_against_stored_end():
    db = _events_db()
    payload = EventUpdateIn.model_validate({"start_time": "2026-06-01T13:00:00Z"})
    with pytest.raises(ValidationError):
        update_event(db, 1, payload, actor_id=9)
    assert db.writes() == []


@pytest.mark.parametrize("field", ["name", "short_description", "logo_url", "about"])
def test_club_update_rejects_null_required_fields(field):
    db = FakeSession([("FROM clubs c WHERE c.id=:id", [{"id": 1, "name": "Chess", "status": "APPROVED"}])])
    with pytest.raises(ValidationError) as exc:
        update_club(db, 1, ClubUpdateIn.model_validate({field: None}), actor_id=9)
    assert exc.value.status_code == 400
    assert db.writes() == []
