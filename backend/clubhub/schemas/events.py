from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

from clubhub.schemas.users import EventClubOut

RegistrationStatusLiteral = Literal[
    "INTERESTED", "PENDING_PAYMENT", "CONFIRMED", "CANCELLED", "REJECTED", "ATTENDED", "NO_SHOW"
]


class EventSection(BaseModel):
    title: str = Field(..., max_length=200)
    description: str = Field(..., max_length=5000)
    image_url: str | None = None


class EventCreateIn(BaseModel):
    club_id: int
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10000)
    location: str | None = Field(default=None, max_length=300)
    start_time: datetime
    end_time: datetime
    capacity: int | None = Field(default=None, ge=1)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    photo_url: str | None = None
    sections: list[EventSection] | None = None


class EventUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=10000)
    location: str | None = Field(default=None, max_length=300)
    start_time: datetime | None = None
    end_time: datetime | None = None
    capacity: int | None = Field(default=None, ge=1)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    photo_url: str | None = None
    sections: list[EventSection] | None = None


class EventOut(BaseModel):
    id: int
    club_id: int
    title: str
    description: str | None = None
    location: str | None = None
    start_time: datetime
    end_time: datetime
    capacity: int | None = None
    price: Decimal | None = None
    photo_url: str | None = None
    sections: list[EventSection] | None = None
    status: Literal["DRAFT", "PUBLISHED", "CLOSED"]
    created_at: datetime
    updated_at: datetime


class EventStatsOut(BaseModel):
    interested_count: int = 0
    confirmed_count: int = 0
    registrations_count: int = 0
    average_rating: float | None = None
    rating_count: int = 0
    remaining_places: int | None = None


class EventListItemOut(EventOut):
    club: EventClubOut
    my_registration_status: str | None = None


class EventDetailOut(EventListItemOut):
    stats: EventStatsOut


class TrendingEventOut(EventListItemOut):
    score: float
    stats: EventStatsOut


class RegisterIn(BaseModel):
    status: Literal["INTERESTED", "PENDING_PAYMENT", "CONFIRMED"] = "INTERESTED"


class RegistrationOut(BaseModel):
    id: int
    user_id: int
    event_id: int
    status: RegistrationStatusLiteral
    created_at: datetime
    updated_at: datetime


class MyRegistrationOut(BaseModel):
    registration: RegistrationOut | None = None


class RegistrationStatusIn(BaseModel):
    status: RegistrationStatusLiteral


class RateIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)


class RatingOut(BaseModel):
    id: int
    user_id: int
    event_id: int
    rating: int
    comment: str | None = None
    created_at: datetime
    updated_at: datetime


class RatingRowOut(RatingOut):
    user_full_name: str
    user_avatar_url: str | None = None


class EventRatingsOut(BaseModel):
    event_id: int
    average_rating: float | None = None
    rating_count: int
    rows: list[RatingRowOut]


class RegistrantOut(BaseModel):
    id: int
    email: str
    full_name: str


class ManagedRegistrationOut(BaseModel):
    id: int
    user: RegistrantOut
    status: RegistrationStatusLiteral
    created_at: datetime


class EventRegistrationsSummaryOut(BaseModel):
    id: int
    title: str
    capacity: int | None = None
    confirmed_count: int


class EventRegistrationsOut(BaseModel):
    event: EventRegistrationsSummaryOut
    registrations: list[ManagedRegistrationOut]
