from typing import Literal

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from clubhub.api.deps import get_manager_actor, require_club_access
from clubhub.core.constants import EVENT_CLOSED, EVENT_PUBLISHED, JOIN_APPROVED, JOIN_REJECTED
from clubhub.db.session import get_db
from clubhub.schemas.clubs import (
    ClubManagerIn,
    ClubManagerOut,
    ClubOut,
    ClubUpdateIn,
    JoinRequestOut,
    JoinRequestWithUserOut,
)
from clubhub.schemas.common import SimpleOKOut
from clubhub.schemas.events import (
    EventCreateIn,
    EventOut,
    EventRegistrationsOut,
    EventUpdateIn,
    RegistrationOut,
    RegistrationStatusIn,
)
from clubhub.services import clubs as club_service
from clubhub.services import events as event_service
from clubhub.services import registrations as registration_service
from clubhub.services.access import Actor

router = APIRouter()


# Clubs

@router.get("/clubs", response_model=list[ClubOut])
def my_managed_clubs(actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    return club_service.list_managed_clubs(db, actor)


@router.get("/clubs/{id}", response_model=ClubOut)
def get_managed_club(id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    return club_service.club_out(club_service.require_club(db, id))


@router.put("/clubs/{id}", response_model=ClubOut)
def update_managed_club(
    id: int,
    payload: ClubUpdateIn,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = club_service.update_club(db, id, payload, actor.user_id)
    db.commit()
    return out


@router.get("/clubs/{club_id}/events", response_model=list[EventOut])
def club_events(club_id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    return event_service.list_club_events(db, club_id)


@router.get("/clubs/{club_id}/join-requests", response_model=list[JoinRequestWithUserOut])
def club_join_requests(
    club_id: int,
    request: Request,
    status: Literal["PENDING", "APPROVED", "REJECTED"] | None = Query(default=None),
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    return club_service.list_join_requests(db, club_id, status)


@router.get("/clubs/{club_id}/managers", response_model=list[ClubManagerOut])
def club_managers(club_id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    return club_service.list_managers(db, club_id)


@router.post("/clubs/{club_id}/managers", response_model=ClubManagerOut, status_code=201)
def add_club_manager(
    club_id: int,
    payload: ClubManagerIn,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = club_service.add_manager(db, club_id, payload.user_id, actor.user_id)
    db.commit()
    return out


@router.delete("/clubs/{club_id}/managers/{user_id}", response_model=SimpleOKOut)
def remove_club_manager(
    club_id: int,
    user_id: int,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    club_service.remove_manager(db, club_id, user_id, actor.user_id)
    db.commit()
    return SimpleOKOut(ok=True)


# Events

@router.post("/events", response_model=EventOut, status_code=201)
def create_event(
    payload: EventCreateIn,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request, body=payload)
    out = event_service.create_event(db, payload, actor.user_id)
    db.commit()
    return out


@router.put("/events/{id}", response_model=EventOut)
def update_event(
    id: int,
    payload: EventUpdateIn,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = event_service.update_event(db, id, payload, actor.user_id)
    db.commit()
    return out


@router.delete("/events/{id}", response_model=SimpleOKOut)
def delete_event(id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    event_service.delete_event(db, id, actor.user_id)
    db.commit()
    return SimpleOKOut(ok=True)


@router.patch("/events/{id}/publish", response_model=EventOut)
def publish_event(id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    out = event_service.set_event_status(db, id, EVENT_PUBLISHED, actor.user_id)
    db.commit()
    return out


@router.patch("/events/{id}/close", response_model=EventOut)
def close_event(id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    out = event_service.set_event_status(db, id, EVENT_CLOSED, actor.user_id)
    db.commit()
    return out


@router.get("/events/{id}/registrations", response_model=EventRegistrationsOut)
def event_registrations(id: int, request: Request, actor: Actor = Depends(get_manager_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    return registration_service.list_event_registrations(db, id)


# Registrations and join requests

@router.patch("/registrations/{id}/status", response_model=RegistrationOut)
def set_registration_status(
    id: int,
    payload: RegistrationStatusIn,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = registration_service.update_status_by_manager(db, id, payload.status, actor.user_id)
    db.commit()
    return out


@router.patch("/join-requests/{request_id}/approve", response_model=JoinRequestOut)
def approve_join_request(
    request_id: int,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = club_service.decide_join_request(db, request_id, JOIN_APPROVED, actor.user_id)
    db.commit()
    return out


@router.patch("/join-requests/{request_id}/reject", response_model=JoinRequestOut)
def reject_join_request(
    request_id: int,
    request: Request,
    actor: Actor = Depends(get_manager_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = club_service.decide_join_request(db, request_id, JOIN_REJECTED, actor.user_id)
    db.commit()
    return out
