from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from clubhub.api.deps import get_current_user
from clubhub.db.session import get_db
from clubhub.schemas.clubs import FollowingOut
from clubhub.schemas.events import MyRegistrationOut
from clubhub.schemas.users import (
    DashboardOut,
    FollowedClubOut,
    MyRegistrationRowOut,
    ProfileOut,
    ProfileUpdateIn,
    PublicUserOut,
    UserEventOut,
    UserRatingOut,
)
from clubhub.services import clubs as club_service
from clubhub.services import registrations as registration_service
from clubhub.services import users as user_service
from clubhub.services.audit import audit
from clubhub.services.users import UserRecord

router = APIRouter()


@router.get("/me", response_model=ProfileOut)
def get_me(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.get_profile(db, user.id)


@router.put("/me", response_model=ProfileOut)
def update_me(
    payload: ProfileUpdateIn,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    out = user_service.update_profile(db, user.id, payload)
    audit(db, user.id, "user", user.id, "profile_updated", {"fields": sorted(payload.model_fields_set)})
    db.commit()
    return out


@router.get("/me/dashboard", response_model=DashboardOut)
def my_dashboard(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.dashboard(db, user.id)


@router.get("/me/registrations", response_model=list[MyRegistrationRowOut])
def my_registrations(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.my_registrations(db, user.id)


@router.get("/me/events/upcoming", response_model=list[UserEventOut])
def my_upcoming_events(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.upcoming_events(db, user.id)


@router.get("/me/events/past", response_model=list[UserEventOut])
def my_past_events(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.past_events(db, user.id)


@router.get("/me/events/{event_id}/registration", response_model=MyRegistrationOut)
def my_event_registration(
    event_id: int,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return MyRegistrationOut(registration=registration_service.my_registration(db, user.id, event_id))


@router.get("/me/clubs", response_model=list[FollowedClubOut])
def my_clubs(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.followed_clubs(db, user.id)


@router.get("/me/clubs/{club_id}/following", response_model=FollowingOut)
def my_club_following(club_id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return FollowingOut(is_following=club_service.is_following(db, user.id, club_id))


@router.post("/me/clubs/{club_id}/follow", response_model=FollowingOut)
def follow_club(club_id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    club_service.follow_club(db, user.id, club_id)
    db.commit()
    return FollowingOut(is_following=True)


@router.delete("/me/clubs/{club_id}/follow", response_model=FollowingOut)
def unfollow_club(club_id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    club_service.unfollow_club(db, user.id, club_id)
    db.commit()
    return FollowingOut(is_following=False)


@router.get("/me/ratings", response_model=list[UserRatingOut])
def my_ratings(user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return user_service.user_ratings(db, user.id)


@router.get("/{user_id}/profile", response_model=PublicUserOut)
def public_profile(
    user_id: int,
    _: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return user_service.get_public_profile(db, user_id)
