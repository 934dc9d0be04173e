from __future__ import annotations

from dataclasses import dataclass

import sqlalchemy as sa
from sqlalchemy.orm import Session

from clubhub.core.constants import REG_ATTENDED, REG_CANCELLED, REG_REJECTED
from clubhub.core.errors import NotFoundError
from clubhub.core.security import now_utc
from clubhub.schemas.users import (
    DashboardOut,
    DashboardStatsOut,
    EventClubOut,
    FollowedClubOut,
    MyRegistrationRowOut,
    ProfileOut,
    ProfileUpdateIn,
    PublicUserOut,
    UserEventOut,
    UserOut,
    UserRatingOut,
)

_USER_COLUMNS = """
    id, email, full_name, avatar_url, bio, student_year, phone_number,
    role, email_verified, is_active, created_at
"""

# registrations left out of the profile event lists
_INACTIVE_REGISTRATIONS = (REG_CANCELLED, REG_REJECTED)


@dataclass(frozen=True)
class UserRecord:
    id: int
    email: str
    full_name: str
    role: str
    email_verified: bool
    is_active: bool
    avatar_url: str | None = None

    @classmethod
    def from_row(cls, row) -> "UserRecord":
        return cls(
            id=row["id"],
            email=row["email"],
            full_name=row["full_name"],
            role=row["role"],
            email_verified=row["email_verified"],
            is_active=row["is_active"],
            avatar_url=row["avatar_url"],
        )

    def out(self) -> UserOut:
        return UserOut(
            id=self.id,
            email=self.email,
            full_name=self.full_name,
            avatar_url=self.avatar_url,
            role=self.role,
            email_verified=self.email_verified,
        )


def get_user_row(db: Session, user_id: int):
    return db.execute(sa.text(f"""
        SELECT {_USER_COLUMNS} FROM users WHERE id=:id
    """), {"id": user_id}).mappings().first()


def get_user_by_email(db: Session, email: str):
    return db.execute(sa.text(f"""
        SELECT {_USER_COLUMNS}, password_hash FROM users WHERE email=:e
    """), {"e": email}).mappings().first()


def get_user(db: Session, user_id: int) -> UserRecord | None:
    row = get_user_row(db, user_id)
    return UserRecord.from_row(row) if row else None


def get_profile(db: Session, user_id: int) -> ProfileOut:
    row = get_user_row(db, user_id)
    if not row:
        raise NotFoundError("User not found")
    return ProfileOut(**{k: row[k] for k in ProfileOut.model_fields})


def update_profile(db: Session, user_id: int, payload: ProfileUpdateIn) -> ProfileOut:
    changes = payload.model_dump(exclude_unset=True)
    if changes:
        assignments = ", ".join(f"{col}=:{col}" for col in changes)
        db.execute(sa.text(f"""
            UPDATE users SET {assignments}, updated_at=now() WHERE id=:id
        """), {**changes, "id": user_id})
    return get_profile(db, user_id)


def get_public_profile(db: Session, user_id: int) -> PublicUserOut:
    row = db.execute(sa.text("""
        SELECT u.id, u.full_name, u.avatar_url, u.bio, u.student_year,
               (SELECT count(*) FROM registrations r WHERE r.user_id=u.id AND r.status=:attended) AS events_attended,
               (SELECT count(*) FROM club_followers f WHERE f.user_id=u.id) AS clubs_followed
        FROM users u
        WHERE u.id=:id AND u.is_active=true
    """), {"id": user_id, "attended": REG_ATTENDED}).mappings().first()
    if not row:
        raise NotFoundError("User not found")
    return PublicUserOut(**row)


def _user_events(db: Session, user_id: int, upcoming: bool, limit: int | None = None) -> list[UserEventOut]:
    now = now_utc()
    comparison = "e.end_time >= :now" if upcoming else "e.end_time < :now"
    order = "e.start_time ASC" if upcoming else "e.start_time DESC"
    params = {"u": user_id, "now": now, "inactive": list(_INACTIVE_REGISTRATIONS)}
    limit_sql = ""
    if limit is not None:
        limit_sql = "LIMIT :limit"
        params["limit"] = limit
    rows = db.execute(sa.text(f"""
        SELECT e.id, e.title, e.start_time, e.end_time, e.photo_url,
               r.status AS registration_status,
               c.id AS club_id, c.name AS club_name, c.logo_url AS club_logo_url
        FROM registrations r
        JOIN events e ON e.id=r.event_id
        LEFT JOIN clubs c ON c.id=e.club_id
        WHERE r.user_id=:u
          AND r.status <> ALL(:inactive)
          AND {comparison}
        ORDER BY {order}
        {limit_sql}
    """), params).mappings().all()
    return [
        UserEventOut(
            id=r["id"],
            title=r["title"],
            start_time=r["start_time"],
            end_time=r["end_time"],
            status="upcoming" if upcoming else "past",
            registration_status=r["registration_status"],
            photo_url=r["photo_url"],
            club=EventClubOut(id=r["club_id"], name=r["club_name"], logo_url=r["club_logo_url"]) if r["club_id"] else None,
        )
        for r in rows
    ]


def upcoming_events(db: Session, user_id: int, limit: int | None = None) -> list[UserEventOut]:
    return _user_events(db, user_id, upcoming=True, limit=limit)


def past_events(db: Session, user_id: int, limit: int | None = None) -> list[UserEventOut]:
    return _user_events(db, user_id, upcoming=False, limit=limit)


def my_registrations(db: Session, user_id: int) -> list[MyRegistrationRowOut]:
    rows = db.execute(sa.text("""
        SELECT r.id, r.event_id, e.title AS event_title, e.start_time,
               r.status, r.created_at, r.updated_at
        FROM registrations r
        JOIN events e ON e.id=r.event_id
        WHERE r.user_id=:u
        ORDER BY r.created_at DESC
    """), {"u": user_id}).mappings().all()
    return [MyRegistrationRowOut(**r) for r in rows]


def followed_clubs(db: Session, user_id: int) -> list[FollowedClubOut]:
    rows = db.execute(sa.text("""
        SELECT c.id, c.name, c.logo_url, c.short_description, f.created_at AS followed_at
        FROM club_followers f
        JOIN clubs c ON c.id=f.club_id
        WHERE f.user_id=:u
        ORDER BY f.created_at DESC
    """), {"u": user_id}).mappings().all()
    return [FollowedClubOut(**r) for r in rows]


def user_ratings(db: Session, user_id: int) -> list[UserRatingOut]:
    rows = db.execute(sa.text("""
        SELECT er.id, er.event_id, e.title AS event_title, er.rating, er.comment, er.created_at
        FROM event_ratings er
        JOIN events e ON e.id=er.event_id
        WHERE er.user_id=:u
        ORDER BY er.created_at DESC
    """), {"u": user_id}).mappings().all()
    return [UserRatingOut(**r) for r in rows]


def dashboard(db: Session, user_id: int) -> DashboardOut:
    profile = get_profile(db, user_id)
    counts = db.execute(sa.text("""
        SELECT
            (SELECT count(*) FROM registrations r WHERE r.user_id=:u AND r.status=:attended) AS events_attended,
            (SELECT count(*)
               FROM registrations r JOIN events e ON e.id=r.event_id
              WHERE r.user_id=:u AND r.status <> ALL(:inactive) AND e.end_time >= :now) AS events_upcoming,
            (SELECT count(*) FROM club_followers f WHERE f.user_id=:u) AS clubs_followed,
            (SELECT count(*) FROM event_ratings er WHERE er.user_id=:u) AS ratings_given
    """), {
        "u": user_id,
        "attended": REG_ATTENDED,
        "inactive": list(_INACTIVE_REGISTRATIONS),
        "now": now_utc(),
    }).mappings().one()
    return DashboardOut(
        profile=profile,
        stats=DashboardStatsOut(**counts),
        upcoming_events=upcoming_events(db, user_id, limit=5),
        recent_events=past_events(db, user_id, limit=5),
        followed_clubs=followed_clubs(db, user_id),
    )
