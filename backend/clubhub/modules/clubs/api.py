from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from clubhub.api.deps import get_actor, get_current_user, get_optional_actor, require_club_access
from clubhub.db.session import get_db
from clubhub.schemas.clubs import (
    ClubCreateIn,
    ClubDetailOut,
    ClubEventsOut,
    ClubOut,
    ClubSummaryOut,
    ClubUpdateIn,
    FollowerOut,
    FollowingOut,
    JoinRequestOut,
    MyJoinRequestOut,
)
from clubhub.schemas.common import CountOut, SimpleOKOut
from clubhub.services import clubs as club_service
from clubhub.services.access import Actor
from clubhub.services.users import UserRecord

router = APIRouter()


@router.get("", response_model=list[ClubSummaryOut])
def list_clubs(db: Session = Depends(get_db)):
    return club_service.list_approved_clubs(db)


@router.post("", response_model=ClubOut, status_code=201)
def create_club(
    payload: ClubCreateIn,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    out = club_service.create_club(db, user.id, payload)
    db.commit()
    return out


@router.get("/{id}", response_model=ClubDetailOut)
def get_club(id: int, actor: Actor | None = Depends(get_optional_actor), db: Session = Depends(get_db)):
    return club_service.get_club_detail(db, id, actor)


@router.put("/{id}", response_model=ClubOut)
def update_club(
    id: int,
    payload: ClubUpdateIn,
    request: Request,
    actor: Actor = Depends(get_actor),
    db: Session = Depends(get_db),
):
    require_club_access(db, actor, request)
    out = club_service.update_club(db, id, payload, actor.user_id)
    db.commit()
    return out


@router.delete("/{id}", response_model=SimpleOKOut)
def delete_club(id: int, request: Request, actor: Actor = Depends(get_actor), db: Session = Depends(get_db)):
    require_club_access(db, actor, request)
    club_service.delete_club(db, id, actor.user_id)
    db.commit()
    return SimpleOKOut(ok=True)


@router.get("/{id}/events", response_model=ClubEventsOut)
def club_events(id: int, db: Session = Depends(get_db)):
    return club_service.club_events_with_stats(db, id)


@router.get("/{id}/followers", response_model=list[FollowerOut])
def club_followers(id: int, db: Session = Depends(get_db)):
    return club_service.list_followers(db, id)


@router.get("/{id}/followers/count", response_model=CountOut)
def club_follower_count(id: int, db: Session = Depends(get_db)):
    return CountOut(count=club_service.follower_count(db, id))


@router.get("/{id}/following", response_model=FollowingOut)
def club_following(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return FollowingOut(is_following=club_service.is_following(db, user.id, id))


@router.post("/{id}/follow", response_model=FollowingOut)
def follow_club(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    club_service.follow_club(db, user.id, id)
    db.commit()
    return FollowingOut(is_following=True)


@router.delete("/{id}/follow", response_model=FollowingOut)
def unfollow_club(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    club_service.unfollow_club(db, user.id, id)
    db.commit()
    return FollowingOut(is_following=False)


@router.post("/{id}/join-requests", response_model=JoinRequestOut, status_code=201)
def request_to_join(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    out = club_service.request_to_join(db, user.id, id)
    db.commit()
    return out


@router.get("/{id}/join-requests/me", response_model=MyJoinRequestOut)
def my_join_request(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return MyJoinRequestOut(request=club_service.get_my_join_request(db, user.id, id))
