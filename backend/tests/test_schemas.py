from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from clubhub.schemas.auth import RegisterIn as AccountRegisterIn
from clubhub.schemas.clubs import ClubCreateIn
from clubhub.schemas.events import EventCreateIn, RateIn, RegisterIn, RegistrationStatusIn
from clubhub.schemas.users import ProfileUpdateIn


def test_account_email_is_normalized():
    payload = AccountRegisterIn(email="  Ada.Lovelace@Uni.EDU ", password="longenough", full_name=" Ada ")
    assert payload.email == "ada.lovelace@uni.edu"
    assert payload.full_name == "Ada"


def test_account_rejects_bad_email_and_short_password():
    with pytest.raises(ValidationError):
        AccountRegisterIn(email="not-an-email", password="longenough", full_name="Ada")
    with pytest.raises(ValidationError):
        AccountRegisterIn(email="ada@uni.edu", password="short", full_name="Ada")


def test_register_defaults_to_interested():
    assert RegisterIn().status == "INTERESTED"


def test_register_rejects_manager_statuses():
    with pytest.raises(ValidationError):
        RegisterIn(status="ATTENDED")


def test_manager_status_accepts_full_set():
    for status in ("INTERESTED", "PENDING_PAYMENT", "CONFIRMED", "CANCELLED", "REJECTED", "ATTENDED", "NO_SHOW"):
        assert RegistrationStatusIn(status=status).status == status
    with pytest.raises(ValidationError):
        RegistrationStatusIn(status="WAITLISTED")


@pytest.mark.parametrize("rating", [0, 6])
def test_rating_bounds(rating):
    with pytest.raises(ValidationError):
        RateIn(rating=rating)


def test_event_capacity_must_be_positive():
    base = {
        "club_id": 1,
        "title": "Hack night",
        "start_time": datetime(2026, 4, 1, 18, tzinfo=timezone.utc),
        "end_time": datetime(2026, 4, 1, 22, tzinfo=timezone.utc),
    }
    assert EventCreateIn(**base).capacity is None
    with pytest.raises(ValidationError):
        EventCreateIn(**base, capacity=0)
    with pytest.raises(ValidationError):
        EventCreateIn(**base, price=-1)


def test_club_requires_core_fields():
    with pytest.raises(ValidationError):
        ClubCreateIn(name="Chess")
    club = ClubCreateIn(name="Chess", short_description="Play", logo_url="/l.png", about="Weekly games")
    assert club.history is None


def test_profile_update_tracks_only_sent_fields():
    payload = ProfileUpdateIn(bio="Hi")
    assert payload.model_dump(exclude_unset=True) == {"bio": "Hi"}
