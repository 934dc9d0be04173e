from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from urllib import error, request


class ApiError(RuntimeError):
    def __init__(self, status_code: int, payload):
        self.status_code = status_code
        self.payload = payload
        super().__init__(f"HTTP {status_code}: {payload}")


class ApiClient:
    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def call(self, method: str, path: str, *, token: str | None = None, body=None, timeout: int = 20):
        url = f"{self.base_url}{path}"
        headers = {"Accept": "application/json"}
        payload = None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if body is not None:
            headers["Content-Type"] = "application/json"
            payload = json.dumps(body).encode("utf-8")

        req = request.Request(url=url, data=payload, headers=headers, method=method.upper())
        try:
            with request.urlopen(req, timeout=timeout) as resp:
                raw = resp.read().decode("utf-8")
                return _parse_payload(raw)
        except error.HTTPError as exc:
            raw = exc.read().decode("utf-8")
            raise ApiError(exc.code, _parse_payload(raw)) from exc


@dataclass
class IdentityFactory:
    seed: str
    counter: int = 0

    def next_email(self, prefix: str = "student") -> str:
        self.counter += 1
        return f"{prefix}.{self.seed}.{self.counter}@university.test"

    def next_name(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix} {self.seed} {self.counter}"


def _parse_payload(raw: str):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _session(out: dict, password: str) -> dict:
    user = out["user"]
    return {
        "id": user["id"],
        "email": user["email"],
        "role": user["role"],
        "token": out["access_token"],
        "refresh_token": out["refresh_token"],
        "password": password,
        "dev_token": out.get("dev_token"),
    }


def register_user(api: ApiClient, factory: IdentityFactory, prefix: str = "student") -> dict:
    email = factory.next_email(prefix)
    password = f"Pw_{factory.seed}_{factory.counter}_Aa1"
    out = api.call(
        "POST",
        "/auth/register",
        body={"email": email, "password": password, "full_name": factory.next_name(prefix.capitalize())},
    )
    return _session(out, password)


def login_user(api: ApiClient, email: str, password: str) -> dict:
    out = api.call("POST", "/auth/login", body={"email": email, "password": password})
    return _session(out, password)


def relogin(api: ApiClient, user: dict) -> dict:
    """Fresh tokens, e.g. after a role change."""
    return login_user(api, user["email"], user["password"])


def create_approved_club(api: ApiClient, factory: IdentityFactory, admin: dict, owner: dict) -> dict:
    club = api.call(
        "POST",
        "/clubs",
        token=owner["token"],
        body={
            "name": factory.next_name("Club"),
            "short_description": "Integration test club",
            "logo_url": "/uploads/test/logo.png",
            "about": "Created by the integration suite.",
        },
    )
    return api.call("PATCH", f"/admin/clubs/{club['id']}/approve", token=admin["token"])


def create_event(
    api: ApiClient,
    token: str,
    club_id: int,
    *,
    starts_in: timedelta = timedelta(days=3),
    duration: timedelta = timedelta(hours=2),
    capacity: int | None = 10,
    publish: bool = True,
) -> dict:
    start = datetime.now(timezone.utc) + starts_in
    event = api.call(
        "POST",
        "/manager/events",
        token=token,
        body={
            "club_id": club_id,
            "title": "Integration event",
            "location": "Main hall",
            "start_time": iso(start),
            "end_time": iso(start + duration),
            "capacity": capacity,
        },
    )
    if publish:
        event = api.call("PATCH", f"/manager/events/{event['id']}/publish", token=token)
    return event
