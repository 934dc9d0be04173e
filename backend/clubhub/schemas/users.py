from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    avatar_url: str | None = None
    role: Literal["USER", "MANAGER", "ADMIN"]
    email_verified: bool


class ProfileOut(UserOut):
    bio: str | None = None
    student_year: str | None = None
    phone_number: str | None = None
    created_at: datetime


class ProfileUpdateIn(BaseModel):
    full_name: str | None = Field(default=None, min_length=2, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    student_year: str | None = Field(default=None, max_length=50)
    phone_number: str | None = Field(default=None, max_length=20)
    avatar_url: str | None = Field(default=None, max_length=500)


class PublicUserOut(BaseModel):
    id: int
    full_name: str
    avatar_url: str | None = None
    bio: str | None = None
    student_year: str | None = None
    events_attended: int = 0
    clubs_followed: int = 0


class EventClubOut(BaseModel):
    id: int
    name: str
    logo_url: str | None = None


class UserEventOut(BaseModel):
    id: int
    title: str
    start_time: datetime
    end_time: datetime
    status: Literal["upcoming", "past"]
    registration_status: str
    photo_url: str | None = None
    club: EventClubOut | None = None


class FollowedClubOut(BaseModel):
    id: int
    name: str
    logo_url: str | None = None
    short_description: str | None = None
    followed_at: datetime


class UserRatingOut(BaseModel):
    id: int
    event_id: int
    event_title: str
    rating: int
    comment: str | None = None
    created_at: datetime


class MyRegistrationRowOut(BaseModel):
    id: int
    event_id: int
    event_title: str
    start_time: datetime
    status: str
    created_at: datetime
    updated_at: datetime


class DashboardStatsOut(BaseModel):
    events_attended: int
    events_upcoming: int
    clubs_followed: int
    ratings_given: int


class DashboardOut(BaseModel):
    profile: ProfileOut
    stats: DashboardStatsOut
    upcoming_events: list[UserEventOut]
    recent_events: list[UserEventOut]
    followed_clubs: list[FollowedClubOut]
