from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clubhub.api.deps import get_admin_actor
from clubhub.core.constants import CLUB_PENDING
from clubhub.db.session import get_db
from clubhub.schemas.clubs import AdminClubOut, ClubOut
from clubhub.services import clubs as club_service
from clubhub.services.access import Actor

router = APIRouter()


@router.get("/clubs", response_model=list[AdminClubOut])
def list_clubs(
    status: Literal["PENDING", "APPROVED", "REJECTED"] | None = Query(default=None),
    _: Actor = Depends(get_admin_actor),
    db: Session = Depends(get_db),
):
    return club_service.list_clubs_for_admin(db, status)


@router.get("/clubs/pending", response_model=list[AdminClubOut])
def pending_clubs(_: Actor = Depends(get_admin_actor), db: Session = Depends(get_db)):
    return club_service.list_clubs_for_admin(db, CLUB_PENDING)


@router.patch("/clubs/{id}/approve", response_model=ClubOut)
def approve_club(id: int, actor: Actor = Depends(get_admin_actor), db: Session = Depends(get_db)):
    out = club_service.approve_club(db, id, actor.user_id)
    db.commit()
    return out


@router.patch("/clubs/{id}/reject", response_model=ClubOut)
def reject_club(id: int, actor: Actor = Depends(get_admin_actor), db: Session = Depends(get_db)):
    out = club_service.reject_club(db, id, actor.user_id)
    db.commit()
    return out
