from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from clubhub.api.deps import get_current_user, get_optional_actor, get_optional_user
from clubhub.core.config import settings
from clubhub.db.session import get_db
from clubhub.schemas.events import (
    EventDetailOut,
    EventListItemOut,
    EventRatingsOut,
    MyRegistrationOut,
    RateIn,
    RatingOut,
    RegisterIn,
    RegistrationOut,
    TrendingEventOut,
)
from clubhub.services import events as event_service
from clubhub.services import registrations as registration_service
from clubhub.services.access import Actor
from clubhub.services.users import UserRecord

router = APIRouter()


def _viewer_id(user: UserRecord | None) -> int | None:
    return user.id if user else None


@router.get("", response_model=list[EventListItemOut])
def list_events(user: UserRecord | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    return event_service.list_published_events(db, _viewer_id(user))


@router.get("/upcoming", response_model=list[EventListItemOut])
def upcoming_events(user: UserRecord | None = Depends(get_optional_user), db: Session = Depends(get_db)):
    return event_service.list_upcoming_events(db, _viewer_id(user))


@router.get("/trending", response_model=list[TrendingEventOut])
def trending_events(
    limit: int = Query(default=settings.TRENDING_DEFAULT_LIMIT, ge=1, le=settings.TRENDING_MAX_LIMIT),
    user: UserRecord | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return event_service.trending_events(db, limit, viewer_id=_viewer_id(user))


@router.get("/{id}", response_model=EventDetailOut)
def get_event(id: int, actor: Actor | None = Depends(get_optional_actor), db: Session = Depends(get_db)):
    return event_service.get_event_detail(db, id, actor)


@router.get("/{id}/ratings", response_model=EventRatingsOut)
def event_ratings(id: int, db: Session = Depends(get_db)):
    return event_service.list_ratings(db, id)


@router.get("/{id}/my-registration", response_model=MyRegistrationOut)
def my_registration(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    return MyRegistrationOut(registration=registration_service.my_registration(db, user.id, id))


@router.post("/{id}/register", response_model=RegistrationOut)
def register(
    id: int,
    payload: RegisterIn,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    out = registration_service.register(db, user.id, id, payload.status)
    db.commit()
    return out


@router.delete("/{id}/register", response_model=MyRegistrationOut)
def cancel_registration(id: int, user: UserRecord = Depends(get_current_user), db: Session = Depends(get_db)):
    out = registration_service.cancel(db, user.id, id)
    db.commit()
    return MyRegistrationOut(registration=out)


@router.post("/{id}/rate", response_model=RatingOut)
def rate_event(
    id: int,
    payload: RateIn,
    user: UserRecord = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    out = registration_service.rate_event(db, user.id, id, payload.rating, payload.comment)
    db.commit()
    return out
