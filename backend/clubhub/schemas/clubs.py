from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_SECTION_IMAGES = {
    "about": "/uploads/defaults/about-default.jpg",
    "history": "/uploads/defaults/history-default.jpg",
    "mission": "/uploads/defaults/mission-default.jpg",
    "activities": "/uploads/defaults/activities-default.jpg",
    "achievements": "/uploads/defaults/achievements-default.jpg",
    "join_us": "/uploads/defaults/join-default.jpg",
    "cover": "/uploads/defaults/cover-default.jpg",
    "logo": "/uploads/defaults/logo-default.png",
}

SECTION_FIELDS = ("history", "mission", "activities", "achievements", "join_us")

ClubStatusLiteral = Literal["PENDING", "APPROVED", "REJECTED"]
JoinRequestStatusLiteral = Literal["PENDING", "APPROVED", "REJECTED"]


class ClubSection(BaseModel):
    title: str = Field(..., max_length=200)
    content: str = Field(..., max_length=10000)
    image_url: str | None = None


class ClubContact(BaseModel):
    email: str | None = None
    phone: str | None = None
    facebook: str | None = None
    instagram: str | None = None
    linkedin: str | None = None
    website: str | None = None


class ClubCreateIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=120)
    short_description: str = Field(..., max_length=300)
    logo_url: str = Field(..., max_length=500)
    about: str = Field(..., max_length=10000)
    about_image_url: str | None = None
    history: ClubSection | None = None
    mission: ClubSection | None = None
    activities: ClubSection | None = None
    achievements: ClubSection | None = None
    join_us: ClubSection | None = None
    contact: ClubContact | None = None
    cover_image_url: str | None = None
    founded_year: int | None = Field(default=None, ge=1900)
    payment_info: str | None = Field(default=None, max_length=1000)


class ClubUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=120)
    short_description: str | None = Field(default=None, max_length=300)
    logo_url: str | None = Field(default=None, max_length=500)
    about: str | None = Field(default=None, max_length=10000)
    about_image_url: str | None = None
    history: ClubSection | None = None
    mission: ClubSection | None = None
    activities: ClubSection | None = None
    achievements: ClubSection | None = None
    join_us: ClubSection | None = None
    contact: ClubContact | None = None
    cover_image_url: str | None = None
    founded_year: int | None = Field(default=None, ge=1900)
    payment_info: str | None = Field(default=None, max_length=1000)


class ClubSummaryOut(BaseModel):
    id: int
    name: str
    short_description: str | None = None
    logo_url: str
    cover_image_url: str | None = None
    about: str | None = None
    follower_count: int = 0
    created_at: datetime


class ClubOut(BaseModel):
    id: int
    name: str
    short_description: str | None = None
    logo_url: str
    about: str | None = None
    about_image_url: str | None = None
    history: ClubSection | None = None
    mission: ClubSection | None = None
    activities: ClubSection | None = None
    achievements: ClubSection | None = None
    join_us: ClubSection | None = None
    contact: ClubContact | None = None
    cover_image_url: str | None = None
    founded_year: int | None = None
    payment_info: str | None = None
    status: ClubStatusLiteral
    owner_id: int | None = None
    created_at: datetime
    updated_at: datetime


class ClubDetailOut(ClubOut):
    follower_count: int
    is_following: bool
    upcoming_events_count: int
    is_manager: bool


class ClubEventStatsRowOut(BaseModel):
    id: int
    title: str
    description: str | None = None
    location: str | None = None
    start_time: datetime
    end_time: datetime
    capacity: int | None = None
    photo_url: str | None = None
    status: str
    registrations_count: int
    attended_count: int
    attendance_rate: int
    average_rating: float | None = None


class ClubEventsOut(BaseModel):
    club_id: int
    club_name: str
    total_events: int
    total_attendance: int
    average_attendance_rate: int
    average_rating: float | None = None
    events: list[ClubEventStatsRowOut]


class FollowerOut(BaseModel):
    id: int
    full_name: str
    avatar_url: str | None = None


class FollowingOut(BaseModel):
    is_following: bool


class JoinRequestUserOut(BaseModel):
    id: int
    full_name: str
    email: str
    avatar_url: str | None = None


class JoinRequestOut(BaseModel):
    id: int
    user_id: int
    club_id: int
    status: JoinRequestStatusLiteral
    created_at: datetime
    updated_at: datetime


class JoinRequestWithUserOut(JoinRequestOut):
    user: JoinRequestUserOut


class MyJoinRequestOut(BaseModel):
    request: JoinRequestOut | None = None


class ClubManagerOut(BaseModel):
    user_id: int
    club_id: int
    full_name: str
    email: str
    created_at: datetime


class ClubManagerIn(BaseModel):
    user_id: int


class AdminClubOut(ClubOut):
    owner_email: str | None = None
    owner_full_name: str | None = None
