from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from pydantic import BaseModel
from sqlalchemy.orm import Session

from clubhub.core.errors import ForbiddenError, UnauthorizedError
from clubhub.core.security import decode_token
from clubhub.db.session import get_db
from clubhub.services.access import (
    ACTION_ADMIN,
    ACTION_MANAGE_CLUB,
    ACTION_MANAGER_AREA,
    Actor,
    ClubAccessRequest,
    SqlClubLookups,
    authorize,
    load_managed_club_ids,
    resolve_club_id,
)
from clubhub.services.users import UserRecord, get_user

bearer = HTTPBearer(auto_error=False)


def _get_user_from_access_token(token: str, db: Session) -> UserRecord:
    try:
        payload = decode_token(token)
    except JWTError:
        raise UnauthorizedError("Invalid token")
    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token")
    user = get_user(db, user_id)
    if not user:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise ForbiddenError("Account is disabled")
    return user


def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserRecord:
    if creds is None:
        raise UnauthorizedError("Not authenticated")
    return _get_user_from_access_token(creds.credentials, db)


def get_optional_user(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserRecord | None:
    # public listings personalise the payload when a valid token is sent
    if creds is None:
        return None
    try:
        return _get_user_from_access_token(creds.credentials, db)
    except (UnauthorizedError, ForbiddenError):
        return None


def actor_for(db: Session, user: UserRecord) -> Actor:
    return Actor(user_id=user.id, role=user.role, managed_club_ids=load_managed_club_ids(db, user.id))


def get_actor(
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Actor:
    return actor_for(db, user)


def get_optional_actor(
    user: UserRecord | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
) -> Actor | None:
    return actor_for(db, user) if user else None


def get_manager_actor(actor: Actor = Depends(get_actor)) -> Actor:
    authorize(actor, ACTION_MANAGER_AREA).require()
    return actor


def get_admin_actor(actor: Actor = Depends(get_actor)) -> Actor:
    authorize(actor, ACTION_ADMIN).require()
    return actor


def club_access_request(request: Request, body: BaseModel | None = None) -> ClubAccessRequest:
    return ClubAccessRequest(
        path=request.url.path,
        params=dict(request.path_params),
        body=body.model_dump() if body is not None else None,
    )


def require_club_access(db: Session, actor: Actor, request: Request, body: BaseModel | None = None) -> int:
    """Resolve the club the request targets and check the actor may manage it."""
    club_id = resolve_club_id(club_access_request(request, body), SqlClubLookups(db))
    authorize(actor, ACTION_MANAGE_CLUB, club_id).require()
    return club_id
