from __future__ import annotations

import logging
from datetime import datetime, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Session

from clubhub.core.constants import (
    CLUB_APPROVED,
    EVENT_CLOSED,
    EVENT_PUBLISHED,
    REG_CANCELLED,
    REG_CONFIRMED,
    REG_INTERESTED,
    REG_REJECTED,
)
from clubhub.core.errors import NotFoundError, ValidationError
from clubhub.core.security import now_utc
from clubhub.schemas.clubs import DEFAULT_SECTION_IMAGES
from clubhub.schemas.events import (
    EventCreateIn,
    EventDetailOut,
    EventListItemOut,
    EventOut,
    EventRatingsOut,
    EventStatsOut,
    EventUpdateIn,
    RatingRowOut,
    TrendingEventOut,
)
from clubhub.schemas.users import EventClubOut
from clubhub.services.access import Actor
from clubhub.services.audit import audit
from clubhub.services.trending import EventStats, rank_trending

logger = logging.getLogger(__name__)

_EVENT_COLUMNS = """
    e.id, e.club_id, e.title, e.description, e.location, e.start_time, e.end_time,
    e.capacity, e.price, e.photo_url, e.sections, e.status, e.created_at, e.updated_at
"""

# NOT NULL columns a partial update may not clear
_REQUIRED_EVENT_FIELDS = ("title", "start_time", "end_time")

_LISTING_COLUMNS = _EVENT_COLUMNS + """,
    c.name AS club_name, c.logo_url AS club_logo_url
"""

_STATS_COLUMNS = """
    (SELECT count(*) FROM registrations r WHERE r.event_id=e.id AND r.status=:interested) AS interested_count,
    (SELECT count(*) FROM registrations r WHERE r.event_id=e.id AND r.status=:confirmed) AS confirmed_count,
    (SELECT count(*) FROM registrations r WHERE r.event_id=e.id AND r.status <> ALL(:inactive)) AS registrations_count,
    (SELECT avg(er.rating) FROM event_ratings er WHERE er.event_id=e.id) AS average_rating,
    (SELECT count(*) FROM event_ratings er WHERE er.event_id=e.id) AS rating_count
"""


def _stats_params() -> dict:
    return {
        "interested": REG_INTERESTED,
        "confirmed": REG_CONFIRMED,
        "inactive": [REG_CANCELLED, REG_REJECTED],
    }


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_window(start_time: datetime, end_time: datetime) -> None:
    if as_utc(start_time) >= as_utc(end_time):
        raise ValidationError("Event start time must be before end time")


def get_event_row(db: Session, event_id: int):
    return db.execute(sa.text(f"""
        SELECT {_EVENT_COLUMNS} FROM events e WHERE e.id=:id
    """), {"id": event_id}).mappings().first()


def require_event(db: Session, event_id: int):
    row = get_event_row(db, event_id)
    if not row:
        raise NotFoundError(f"Event with ID {event_id} not found")
    return row


def event_out(row) -> EventOut:
    return EventOut(**{k: row[k] for k in EventOut.model_fields})


def _club_of(row) -> EventClubOut:
    return EventClubOut(
        id=row["club_id"],
        name=row["club_name"],
        logo_url=row["club_logo_url"] or DEFAULT_SECTION_IMAGES["logo"],
    )


def _stats_out(row) -> EventStatsOut:
    confirmed = int(row["confirmed_count"])
    capacity = row["capacity"]
    return EventStatsOut(
        interested_count=int(row["interested_count"]),
        confirmed_count=confirmed,
        registrations_count=int(row["registrations_count"]),
        average_rating=round(float(row["average_rating"]), 2) if row["average_rating"] is not None else None,
        rating_count=int(row["rating_count"]),
        remaining_places=max(0, capacity - confirmed) if capacity is not None else None,
    )


def _my_statuses(db: Session, user_id: int | None, event_ids: list[int]) -> dict[int, str]:
    if user_id is None or not event_ids:
        return {}
    rows = db.execute(sa.text("""
        SELECT event_id, status FROM registrations
        WHERE user_id=:u AND event_id = ANY(:ids)
    """), {"u": user_id, "ids": event_ids}).all()
    return {event_id: status for event_id, status in rows}


# Manager side

def create_event(db: Session, payload: EventCreateIn, actor_id: int) -> EventOut:
    club = db.execute(sa.text("SELECT id FROM clubs WHERE id=:id"), {"id": payload.club_id}).first()
    if not club:
        raise NotFoundError(f"Club with ID {payload.club_id} not found")
    validate_window(payload.start_time, payload.end_time)

    stmt = sa.text("""
        INSERT INTO events (club_id, title, description, location, start_time, end_time,
                            capacity, price, photo_url, sections)
        VALUES (:club_id, :title, :description, :location, :start_time, :end_time,
                :capacity, :price, :photo_url, :sections)
        RETURNING id
    """).bindparams(sa.bindparam("sections", type_=sa.JSON))
    event_id = db.execute(stmt, {
        "club_id": payload.club_id,
        "title": payload.title,
        "description": payload.description,
        "location": payload.location,
        "start_time": as_utc(payload.start_time),
        "end_time": as_utc(payload.end_time),
        "capacity": payload.capacity,
        "price": payload.price,
        "photo_url": payload.photo_url,
        "sections": [s.model_dump() for s in payload.sections] if payload.sections is not None else None,
    }).scalar_one()

    audit(db, actor_id, "event", event_id, "event_created", {"club_id": payload.club_id})
    return event_out(require_event(db, event_id))


def update_event(db: Session, event_id: int, payload: EventUpdateIn, actor_id: int) -> EventOut:
    current = require_event(db, event_id)
    values = payload.model_dump(exclude_unset=True)
    for key in _REQUIRED_EVENT_FIELDS:
        if key in values and values[key] is None:
            raise ValidationError(f"{key} cannot be null")
    for key in ("start_time", "end_time"):
        if key in values:
            values[key] = as_utc(values[key])
    validate_window(values.get("start_time", current["start_time"]), values.get("end_time", current["end_time"]))

    if "sections" in values and values["sections"] is not None:
        values["sections"] = [s.model_dump() for s in payload.sections]

    if values:
        assignments = ", ".join(f"{c}=:{c}" for c in values)
        stmt = sa.text(f"""
            UPDATE events SET {assignments}, updated_at=now() WHERE id=:event_id
        """)
        if "sections" in values:
            stmt = stmt.bindparams(sa.bindparam("sections", type_=sa.JSON))
        db.execute(stmt, {**values, "event_id": event_id})
        audit(db, actor_id, "event", event_id, "event_updated", {"fields": sorted(values)})
    return event_out(require_event(db, event_id))


def delete_event(db: Session, event_id: int, actor_id: int) -> None:
    row = require_event(db, event_id)
    db.execute(sa.text("DELETE FROM events WHERE id=:id"), {"id": event_id})
    audit(db, actor_id, "event", event_id, "event_deleted", {"club_id": row["club_id"]})


def set_event_status(db: Session, event_id: int, status: str, actor_id: int) -> EventOut:
    require_event(db, event_id)
    db.execute(sa.text("""
        UPDATE events SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": status, "id": event_id})
    action = "event_published" if status == EVENT_PUBLISHED else "event_closed" if status == EVENT_CLOSED else "event_status"
    audit(db, actor_id, "event", event_id, action, {"status": status})
    logger.info("event %s moved to %s by user %s", event_id, status, actor_id)
    return event_out(require_event(db, event_id))


def list_club_events(db: Session, club_id: int) -> list[EventOut]:
    rows = db.execute(sa.text(f"""
        SELECT {_EVENT_COLUMNS}
        FROM events e
        WHERE e.club_id=:c
        ORDER BY e.start_time DESC
    """), {"c": club_id}).mappings().all()
    return [event_out(r) for r in rows]


# Public side

def _listing(db: Session, viewer_id: int | None, upcoming_only: bool) -> list[EventListItemOut]:
    where = ["e.status=:published", "c.status=:approved"]
    params: dict[str, object] = {"published": EVENT_PUBLISHED, "approved": CLUB_APPROVED}
    if upcoming_only:
        where.append("e.start_time >= :now")
        params["now"] = now_utc()
    rows = db.execute(sa.text(f"""
        SELECT {_LISTING_COLUMNS}
        FROM events e
        JOIN clubs c ON c.id=e.club_id
        WHERE {" AND ".join(where)}
        ORDER BY e.start_time ASC
    """), params).mappings().all()

    mine = _my_statuses(db, viewer_id, [r["id"] for r in rows])
    return [
        EventListItemOut(
            **event_out(r).model_dump(),
            club=_club_of(r),
            my_registration_status=mine.get(r["id"]),
        )
        for r in rows
    ]


def list_published_events(db: Session, viewer_id: int | None) -> list[EventListItemOut]:
    return _listing(db, viewer_id, upcoming_only=False)


def list_upcoming_events(db: Session, viewer_id: int | None) -> list[EventListItemOut]:
    return _listing(db, viewer_id, upcoming_only=True)


def get_event_detail(db: Session, event_id: int, actor: Actor | None) -> EventDetailOut:
    row = db.execute(sa.text(f"""
        SELECT {_LISTING_COLUMNS}, {_STATS_COLUMNS}
        FROM events e
        JOIN clubs c ON c.id=e.club_id
        WHERE e.id=:id
    """), {"id": event_id, **_stats_params()}).mappings().first()
    if not row:
        raise NotFoundError(f"Event with ID {event_id} not found")

    can_manage = actor is not None and (actor.is_admin or row["club_id"] in actor.managed_club_ids)
    if row["status"] != EVENT_PUBLISHED and not can_manage:
        raise NotFoundError(f"Event with ID {event_id} not found")

    mine = _my_statuses(db, actor.user_id if actor else None, [event_id])
    return EventDetailOut(
        **event_out(row).model_dump(),
        club=_club_of(row),
        my_registration_status=mine.get(event_id),
        stats=_stats_out(row),
    )


def list_ratings(db: Session, event_id: int) -> EventRatingsOut:
    require_event(db, event_id)
    rows = db.execute(sa.text("""
        SELECT er.id, er.user_id, er.event_id, er.rating, er.comment, er.created_at, er.updated_at,
               u.full_name AS user_full_name, u.avatar_url AS user_avatar_url
        FROM event_ratings er
        JOIN users u ON u.id=er.user_id
        WHERE er.event_id=:e
        ORDER BY er.created_at DESC
    """), {"e": event_id}).mappings().all()
    ratings = [RatingRowOut(**r) for r in rows]
    average = round(sum(r.rating for r in ratings) / len(ratings), 2) if ratings else None
    return EventRatingsOut(event_id=event_id, average_rating=average, rating_count=len(ratings), rows=ratings)


def trending_events(
    db: Session,
    limit: int,
    viewer_id: int | None = None,
    now: datetime | None = None,
) -> list[TrendingEventOut]:
    now = now or now_utc()
    rows = db.execute(sa.text(f"""
        SELECT {_LISTING_COLUMNS}, {_STATS_COLUMNS}
        FROM events e
        JOIN clubs c ON c.id=e.club_id
        WHERE e.status=:published AND c.status=:approved
        ORDER BY e.start_time ASC, e.id ASC
    """), {"published": EVENT_PUBLISHED, "approved": CLUB_APPROVED, **_stats_params()}).mappings().all()

    by_id = {r["id"]: r for r in rows}
    stats = [
        EventStats(
            event_id=r["id"],
            start_time=as_utc(r["start_time"]),
            interested_count=int(r["interested_count"]),
            confirmed_count=int(r["confirmed_count"]),
            average_rating=float(r["average_rating"]) if r["average_rating"] is not None else 0.0,
            rating_count=int(r["rating_count"]),
            capacity=r["capacity"],
        )
        for r in rows
    ]
    ranked = rank_trending(stats, now, limit=limit)

    mine = _my_statuses(db, viewer_id, [s.stats.event_id for s in ranked])
    out = []
    for scored in ranked:
        r = by_id[scored.stats.event_id]
        out.append(TrendingEventOut(
            **event_out(r).model_dump(),
            club=_club_of(r),
            my_registration_status=mine.get(r["id"]),
            score=round(scored.score, 2),
            stats=_stats_out(r),
        ))
    return out
