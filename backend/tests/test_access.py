import pytest

from clubhub.core.errors import ForbiddenError, NotFoundError
from clubhub.services.access import (
    ACTION_ADMIN,
    ACTION_MANAGE_CLUB,
    ACTION_MANAGER_AREA,
    Actor,
    ClubAccessRequest,
    authorize,
    resolve_club_id,
)


class FakeLookups:
    def __init__(self, events=None, registrations=None, join_requests=None):
        self.events = events or {}
        self.registrations = registrations or {}
        self.join_requests = join_requests or {}
        self.calls = []

    def event_club_id(self, event_id):
        self.calls.append(("event", event_id))
        return self.events.get(event_id)

    def registration_club_id(self, registration_id):
        self.calls.append(("registration", registration_id))
        return self.registrations.get(registration_id)

    def join_request_club_id(self, request_id):
        self.calls.append(("join_request", request_id))
        return self.join_requests.get(request_id)


LOOKUPS = FakeLookups(events={7: 3}, registrations={11: 3}, join_requests={21: 5})


def _check(actor, req, lookups=LOOKUPS):
    club_id = resolve_club_id(req, lookups)
    return authorize(actor, ACTION_MANAGE_CLUB, club_id)


def test_publish_event_scopes_to_owning_club():
    req = ClubAccessRequest(path="/manager/events/7/publish", params={"id": "7"})
    manager_of_3 = Actor(user_id=1, role="MANAGER", managed_club_ids=frozenset({3}))
    manager_of_4 = Actor(user_id=2, role="MANAGER", managed_club_ids=frozenset({4}))

    assert _check(manager_of_3, req).allowed
    decision = _check(manager_of_4, req)
    assert not decision.allowed
    with pytest.raises(ForbiddenError):
        decision.require()


def test_admin_bypasses_membership():
    admin = Actor(user_id=9, role="ADMIN")
    req = ClubAccessRequest(path="/manager/events/7/publish", params={"id": 7})
    assert _check(admin, req).allowed


def test_route_club_id_wins_without_lookup():
    lookups = FakeLookups()
    req = ClubAccessRequest(path="/manager/clubs/12/events", params={"club_id": "12"}, body={"club_id": 99})
    assert resolve_club_id(req, lookups) == 12
    assert lookups.calls == []


def test_body_club_id_used_for_event_creation():
    req = ClubAccessRequest(path="/manager/events", params={}, body={"club_id": 4, "title": "x"})
    assert resolve_club_id(req, FakeLookups()) == 4


def test_club_path_uses_id_directly():
    lookups = FakeLookups()
    req = ClubAccessRequest(path="/manager/clubs/8", params={"id": "8"})
    assert resolve_club_id(req, lookups) == 8
    assert lookups.calls == []


def test_missing_event_is_not_found():
    req = ClubAccessRequest(path="/manager/events/404", params={"id": 404})
    with pytest.raises(NotFoundError):
        resolve_club_id(req, LOOKUPS)


def test_registration_resolves_through_event():
    req = ClubAccessRequest(path="/manager/registrations/11/status", params={"id": 11})
    assert resolve_club_id(req, LOOKUPS) == 3
    with pytest.raises(NotFoundError):
        resolve_club_id(ClubAccessRequest(path="/manager/registrations/12/status", params={"id": 12}), LOOKUPS)


def test_join_request_resolves_club():
    req = ClubAccessRequest(path="/manager/join-requests/21/approve", params={"request_id": 21})
    assert resolve_club_id(req, LOOKUPS) == 5
    with pytest.raises(NotFoundError):
        resolve_club_id(
            ClubAccessRequest(path="/manager/join-requests/22/approve", params={"request_id": 22}), LOOKUPS
        )


def test_unresolvable_request_is_forbidden():
    with pytest.raises(ForbiddenError) as exc:
        resolve_club_id(ClubAccessRequest(path="/manager/something", params={}), LOOKUPS)
    assert "Unable to determine club access" in exc.value.detail


def test_unknown_id_route_is_forbidden():
    with pytest.raises(ForbiddenError):
        resolve_club_id(ClubAccessRequest(path="/manager/widgets/3", params={"id": 3}), LOOKUPS)


def test_manager_area_and_admin_actions():
    user = Actor(user_id=1, role="USER")
    manager = Actor(user_id=2, role="MANAGER")
    admin = Actor(user_id=3, role="ADMIN")

    assert not authorize(user, ACTION_MANAGER_AREA).allowed
    assert authorize(manager, ACTION_MANAGER_AREA).allowed
    assert authorize(admin, ACTION_MANAGER_AREA).allowed

    assert not authorize(manager, ACTION_ADMIN).allowed
    assert authorize(admin, ACTION_ADMIN).allowed


def test_unknown_action_is_denied():
    assert not authorize(Actor(user_id=3, role="ADMIN"), "club:explode").allowed
