"""Club-access resolution and the authorization decision.

Handlers call `resolve_club_id` to find which club a request concerns and
`authorize` to decide whether the actor may act on it. Both are plain
functions so they can be exercised without a database.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol

import sqlalchemy as sa
from sqlalchemy.orm import Session

from clubhub.core.constants import ROLE_ADMIN, ROLE_MANAGER
from clubhub.core.errors import ForbiddenError, NotFoundError

ACTION_MANAGE_CLUB = "club:manage"
ACTION_MANAGER_AREA = "manager:access"
ACTION_ADMIN = "admin:access"


@dataclass(frozen=True)
class Actor:
    user_id: int
    role: str
    managed_club_ids: frozenset[int] = frozenset()

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str | None = None

    def require(self) -> None:
        if not self.allowed:
            raise ForbiddenError(self.reason or "Forbidden")


ALLOW = AccessDecision(True)


def deny(reason: str) -> AccessDecision:
    return AccessDecision(False, reason)


@dataclass
class ClubAccessRequest:
    path: str
    params: Mapping[str, Any] = field(default_factory=dict)
    body: Mapping[str, Any] | None = None


class ClubLookups(Protocol):
    def event_club_id(self, event_id: int) -> int | None: ...

    def registration_club_id(self, registration_id: int) -> int | None: ...

    def join_request_club_id(self, request_id: int) -> int | None: ...


def resolve_club_id(req: ClubAccessRequest, lookups: ClubLookups) -> int:
    """Return the club a request concerns; first matching rule wins."""
    params = req.params or {}
    path = req.path or ""

    if params.get("club_id") is not None:
        return int(params["club_id"])

    if req.body and req.body.get("club_id") is not None:
        return int(req.body["club_id"])

    entity_id = params.get("id")
    if entity_id is not None:
        if "/clubs/" in path:
            return int(entity_id)
        if "/events/" in path:
            club_id = lookups.event_club_id(int(entity_id))
            if club_id is None:
                raise NotFoundError("Event not found")
            return club_id
        if "/registrations/" in path:
            club_id = lookups.registration_club_id(int(entity_id))
            if club_id is None:
                raise NotFoundError("Registration not found")
            return club_id

    request_id = params.get("request_id")
    if request_id is not None and "/join-requests/" in path:
        club_id = lookups.join_request_club_id(int(request_id))
        if club_id is None:
            raise NotFoundError("Join request not found")
        return club_id

    raise ForbiddenError("Unable to determine club access")


def authorize(actor: Actor, action: str, resource: int | None = None) -> AccessDecision:
    if action == ACTION_ADMIN:
        return ALLOW if actor.is_admin else deny("Admin access required")
    if action == ACTION_MANAGER_AREA:
        if actor.role in (ROLE_MANAGER, ROLE_ADMIN):
            return ALLOW
        return deny("Manager access required")
    if action == ACTION_MANAGE_CLUB:
        if actor.is_admin:
            return ALLOW
        if resource is not None and resource in actor.managed_club_ids:
            return ALLOW
        return deny("You do not have access to this club")
    return deny(f"Unknown action: {action}")


class SqlClubLookups:
    def __init__(self, db: Session):
        self.db = db

    def event_club_id(self, event_id: int) -> int | None:
        return self.db.execute(sa.text("""
            SELECT club_id FROM events WHERE id=:id
        """), {"id": event_id}).scalar()

    def registration_club_id(self, registration_id: int) -> int | None:
        return self.db.execute(sa.text("""
            SELECT e.club_id
            FROM registrations r
            JOIN events e ON e.id=r.event_id
            WHERE r.id=:id
        """), {"id": registration_id}).scalar()

    def join_request_club_id(self, request_id: int) -> int | None:
        return self.db.execute(sa.text("""
            SELECT club_id FROM club_join_requests WHERE id=:id
        """), {"id": request_id}).scalar()


def load_managed_club_ids(db: Session, user_id: int) -> frozenset[int]:
    rows = db.execute(sa.text("""
        SELECT club_id FROM club_managers WHERE user_id=:u
    """), {"u": user_id}).scalars().all()
    return frozenset(int(r) for r in rows)
