from __future__ import annotations

import pytest

from tests.testkit import ApiError, create_approved_club, create_event, register_user, relogin


def test_auth_token_lifecycle(api, identity_factory):
    user = register_user(api, identity_factory)
    assert user["role"] == "USER"

    me = api.call("GET", "/auth/me", token=user["token"])
    assert me["email"] == user["email"]
    assert me["email_verified"] is False

    if user["dev_token"]:
        api.call("POST", "/auth/verify-email", body={"token": user["dev_token"]})
        assert api.call("GET", "/auth/me", token=user["token"])["email_verified"] is True
        with pytest.raises(ApiError) as reused:
            api.call("POST", "/auth/verify-email", body={"token": user["dev_token"]})
        assert reused.value.status_code == 400

    rotated = api.call("POST", "/auth/refresh", body={"refresh_token": user["refresh_token"]})
    assert rotated["refresh_token"] != user["refresh_token"]
    with pytest.raises(ApiError) as replay:
        api.call("POST", "/auth/refresh", body={"refresh_token": user["refresh_token"]})
    assert replay.value.status_code == 401

    api.call("POST", "/auth/logout", token=rotated["access_token"], body={})
    with pytest.raises(ApiError) as after_logout:
        api.call("POST", "/auth/refresh", body={"refresh_token": rotated["refresh_token"]})
    assert after_logout.value.status_code == 401


def test_duplicate_email_and_bad_login(api, identity_factory):
    user = register_user(api, identity_factory)
    with pytest.raises(ApiError) as dup:
        api.call(
            "POST",
            "/auth/register",
            body={"email": user["email"], "password": user["password"], "full_name": "Someone Else"},
        )
    assert dup.value.status_code == 409

    with pytest.raises(ApiError) as bad:
        api.call("POST", "/auth/login", body={"email": user["email"], "password": "wrong-password"})
    assert bad.value.status_code == 401


def test_password_reset_flow(api, identity_factory):
    user = register_user(api, identity_factory)
    out = api.call("POST", "/auth/forgot-password", body={"email": user["email"]})
    assert out["ok"] is True
    if not out.get("dev_token"):
        pytest.skip("dev_token only returned with ENV=dev")

    new_password = user["password"] + "x"
    api.call("POST", "/auth/reset-password", body={"token": out["dev_token"], "new_password": new_password})
    with pytest.raises(ApiError) as revoked:
        api.call("POST", "/auth/refresh", body={"refresh_token": user["refresh_token"]})
    assert revoked.value.status_code == 401

    api.call("POST", "/auth/login", body={"email": user["email"], "password": new_password})
    assert api.call("POST", "/auth/forgot-password", body={"email": "nobody@university.test"})["ok"] is True


def test_profile_update(api, identity_factory):
    user = register_user(api, identity_factory)
    profile = api.call("PUT", "/users/me", token=user["token"], body={"bio": "Second year CS", "student_year": "2"})
    assert profile["bio"] == "Second year CS"
    public = api.call("GET", f"/users/{user['id']}/profile", token=user["token"])
    assert public["student_year"] == "2"
    assert "email" not in public


def test_club_approval_makes_owner_manager(api, identity_factory, admin):
    owner = register_user(api, identity_factory, "owner")
    club = create_approved_club(api, identity_factory, admin, owner)
    assert club["status"] == "APPROVED"

    owner = relogin(api, owner)
    assert owner["role"] == "MANAGER"
    managed = api.call("GET", "/manager/clubs", token=owner["token"])
    assert club["id"] in {c["id"] for c in managed}

    listed = api.call("GET", "/clubs")
    assert club["id"] in {c["id"] for c in listed}


def test_pending_club_hidden_and_duplicate_name(api, identity_factory):
    owner = register_user(api, identity_factory, "owner")
    body = {
        "name": identity_factory.next_name("Pending club"),
        "short_description": "Waiting",
        "logo_url": "/l.png",
        "about": "Not approved yet",
    }
    club = api.call("POST", "/clubs", token=owner["token"], body=body)
    assert club["status"] == "PENDING"

    with pytest.raises(ApiError) as dup:
        api.call("POST", "/clubs", token=owner["token"], body=body)
    assert dup.value.status_code == 409

    with pytest.raises(ApiError) as hidden:
        api.call("GET", f"/clubs/{club['id']}")
    assert hidden.value.status_code == 404


def test_follow_is_idempotent(api, identity_factory, admin):
    owner = register_user(api, identity_factory, "owner")
    club = create_approved_club(api, identity_factory, admin, owner)
    fan = register_user(api, identity_factory)

    api.call("POST", f"/clubs/{club['id']}/follow", token=fan["token"])
    api.call("POST", f"/clubs/{club['id']}/follow", token=fan["token"])
    assert api.call("GET", f"/clubs/{club['id']}/followers/count")["count"] == 1
    assert api.call("GET", f"/clubs/{club['id']}/following", token=fan["token"])["is_following"] is True

    api.call("DELETE", f"/clubs/{club['id']}/follow", token=fan["token"])
    assert api.call("GET", f"/clubs/{club['id']}/followers/count")["count"] == 0


def test_join_request_lifecycle(api, identity_factory, admin):
    owner = register_user(api, identity_factory, "owner")
    club = create_approved_club(api, identity_factory, admin, owner)
    owner = relogin(api, owner)
    student = register_user(api, identity_factory)

    req = api.call("POST", f"/clubs/{club['id']}/join-requests", token=student["token"])
    assert req["status"] == "PENDING"
    with pytest.raises(ApiError) as again:
        api.call("POST", f"/clubs/{club['id']}/join-requests", token=student["token"])
    assert again.value.status_code == 409

    rejected = api.call("PATCH", f"/manager/join-requests/{req['id']}/reject", token=owner["token"])
    assert rejected["status"] == "REJECTED"

    reopened = api.call("POST", f"/clubs/{club['id']}/join-requests", token=student["token"])
    assert reopened["id"] == req["id"]
    assert reopened["status"] == "PENDING"

    approved = api.call("PATCH", f"/manager/join-requests/{req['id']}/approve", token=owner["token"])
    assert approved["status"] == "APPROVED"
    mine = api.call("GET", f"/clubs/{club['id']}/join-requests/me", token=student["token"])
    assert mine["request"]["status"] == "APPROVED"


def test_manager_cannot_touch_other_club(api, identity_factory, admin):
    owner_a = register_user(api, identity_factory, "owner")
    owner_b = register_user(api, identity_factory, "owner")
    club_a = create_approved_club(api, identity_factory, admin, owner_a)
    create_approved_club(api, identity_factory, admin, owner_b)
    owner_a = relogin(api, owner_a)
    owner_b = relogin(api, owner_b)

    event = create_event(api, owner_a["token"], club_a["id"], publish=False)
    with pytest.raises(ApiError) as denied:
        api.call("PATCH", f"/manager/events/{event['id']}/publish", token=owner_b["token"])
    assert denied.value.status_code == 403

    with pytest.raises(ApiError) as missing:
        api.call("PATCH", "/manager/events/999999999/publish", token=owner_a["token"])
    assert missing.value.status_code == 404

    student = register_user(api, identity_factory)
    with pytest.raises(ApiError) as not_manager:
        api.call("GET", "/manager/clubs", token=student["token"])
    assert not_manager.value.status_code == 403


def test_registration_on_draft_event_fails(api, identity_factory, admin):
    owner = register_user(api, identity_factory, "owner")
    club = create_approved_club(api, identity_factory, admin, owner)
    owner = relogin(api, owner)
    event = create_event(api, owner["token"], club["id"], publish=False)

    student = register_user(api, identity_factory)
    with pytest.raises(ApiError) as closed:
        api.call("POST", f"/events/{event['id']}/register", token=student["token"], body={"status": "INTERESTED"})
    assert closed.value.status_code == 400


def test_event_window_validation(api, identity_factory, admin):
    owner = register_user(api, identity_factory, "owner")
    club = create_approved_club(api, identity_factory, admin, owner)
    owner = relogin(api, owner)
    with pytest.raises(ApiError) as inverted:
        api.call(
            "POST",
            "/manager/events",
            token=owner["token"],
            body={
                "club_id": club["id"],
                "title": "Backwards",
                "start_time": "2030-01-02T10:00:00Z",
                "end_time": "2030-01-01T10:00:00Z",
            },
        )
    assert inverted.value.status_code == 400


def test_trending_limit_bounds(api):
    assert len(api.call("GET", "/events/trending")) <= 3
    with pytest.raises(ApiError) as too_many:
        api.call("GET", "/events/trending?limit=500")
    assert too_many.value.status_code == 422
