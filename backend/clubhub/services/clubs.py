from __future__ import annotations

import logging

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhub.core.constants import (
    CLUB_APPROVED,
    CLUB_PENDING,
    CLUB_REJECTED,
    EVENT_PUBLISHED,
    JOIN_APPROVED,
    JOIN_PENDING,
    JOIN_REJECTED,
    REG_ATTENDED,
    ROLE_MANAGER,
    ROLE_USER,
)
from clubhub.core.errors import ConflictError, NotFoundError, ValidationError
from clubhub.core.security import now_utc
from clubhub.schemas.clubs import (
    DEFAULT_SECTION_IMAGES,
    SECTION_FIELDS,
    AdminClubOut,
    ClubCreateIn,
    ClubDetailOut,
    ClubEventStatsRowOut,
    ClubEventsOut,
    ClubManagerOut,
    ClubOut,
    ClubSummaryOut,
    ClubUpdateIn,
    FollowerOut,
    JoinRequestOut,
    JoinRequestUserOut,
    JoinRequestWithUserOut,
)
from clubhub.services.access import Actor
from clubhub.services.audit import audit

logger = logging.getLogger(__name__)

_JSON_COLUMNS = set(SECTION_FIELDS) | {"contact"}

# fields required at creation; a partial update may not clear them
_REQUIRED_CLUB_FIELDS = ("name", "short_description", "logo_url", "about")

_CLUB_COLUMNS = """
    c.id, c.name, c.short_description, c.logo_url, c.about, c.about_image_url,
    c.history, c.mission, c.activities, c.achievements, c.join_us, c.contact,
    c.cover_image_url, c.founded_year, c.payment_info, c.status,
    c.user_id AS owner_id, c.created_at, c.updated_at
"""


def _with_default_images(row) -> dict:
    data = dict(row)
    data["logo_url"] = data.get("logo_url") or DEFAULT_SECTION_IMAGES["logo"]
    data["about_image_url"] = data.get("about_image_url") or DEFAULT_SECTION_IMAGES["about"]
    data["cover_image_url"] = data.get("cover_image_url") or DEFAULT_SECTION_IMAGES["cover"]
    for name in SECTION_FIELDS:
        section = data.get(name)
        if section:
            data[name] = {**section, "image_url": section.get("image_url") or DEFAULT_SECTION_IMAGES[name]}
    return data


def club_out(row) -> ClubOut:
    return ClubOut(**{k: v for k, v in _with_default_images(row).items() if k in ClubOut.model_fields})


def get_club_row(db: Session, club_id: int):
    return db.execute(sa.text(f"""
        SELECT {_CLUB_COLUMNS} FROM clubs c WHERE c.id=:id
    """), {"id": club_id}).mappings().first()


def require_club(db: Session, club_id: int):
    row = get_club_row(db, club_id)
    if not row:
        raise NotFoundError(f"Club with ID {club_id} not found")
    return row


def require_approved_club(db: Session, club_id: int):
    row = require_club(db, club_id)
    if row["status"] != CLUB_APPROVED:
        raise NotFoundError(f"Club with ID {club_id} not found")
    return row


def _club_values(payload: ClubCreateIn | ClubUpdateIn, exclude_unset: bool) -> dict:
    values = payload.model_dump(mode="json", exclude_unset=exclude_unset)
    founded_year = values.get("founded_year")
    if founded_year is not None and founded_year > now_utc().year:
        raise ValidationError("Founded year cannot be in the future")
    return values


def _json_bindparams(columns) -> list:
    return [sa.bindparam(c, type_=sa.JSON) for c in columns if c in _JSON_COLUMNS]


def _ensure_name_available(db: Session, name: str, exclude_club_id: int | None = None):
    row = db.execute(sa.text("""
        SELECT id FROM clubs WHERE lower(name)=lower(:n)
    """), {"n": name}).first()
    if row and row[0] != exclude_club_id:
        raise ConflictError("A club with this name already exists")


def list_approved_clubs(db: Session) -> list[ClubSummaryOut]:
    rows = db.execute(sa.text("""
        SELECT c.id, c.name, c.short_description, c.logo_url, c.cover_image_url,
               c.about, c.created_at,
               (SELECT count(*) FROM club_followers f WHERE f.club_id=c.id) AS follower_count
        FROM clubs c
        WHERE c.status=:approved
        ORDER BY c.name ASC
    """), {"approved": CLUB_APPROVED}).mappings().all()
    out = []
    for r in rows:
        data = dict(r)
        data["logo_url"] = data["logo_url"] or DEFAULT_SECTION_IMAGES["logo"]
        out.append(ClubSummaryOut(**data))
    return out


def get_club_detail(db: Session, club_id: int, actor: Actor | None) -> ClubDetailOut:
    row = require_club(db, club_id)
    is_manager = actor is not None and (actor.is_admin or club_id in actor.managed_club_ids)
    if row["status"] != CLUB_APPROVED and not is_manager:
        raise NotFoundError(f"Club with ID {club_id} not found")

    stats = db.execute(sa.text("""
        SELECT
            (SELECT count(*) FROM club_followers f WHERE f.club_id=:c) AS follower_count,
            (SELECT count(*) FROM club_followers f WHERE f.club_id=:c AND f.user_id=:u) AS following,
            (SELECT count(*) FROM events e
              WHERE e.club_id=:c AND e.status=:published AND e.start_time >= :now) AS upcoming_events_count
    """), {
        "c": club_id,
        "u": actor.user_id if actor else None,
        "published": EVENT_PUBLISHED,
        "now": now_utc(),
    }).mappings().one()

    return ClubDetailOut(
        **club_out(row).model_dump(),
        follower_count=stats["follower_count"],
        is_following=stats["following"] > 0,
        upcoming_events_count=stats["upcoming_events_count"],
        is_manager=is_manager,
    )


def create_club(db: Session, user_id: int, payload: ClubCreateIn) -> ClubOut:
    _ensure_name_available(db, payload.name)
    values = _club_values(payload, exclude_unset=False)
    columns = list(values)
    stmt = sa.text(f"""
        INSERT INTO clubs ({", ".join(columns)}, status, user_id)
        VALUES ({", ".join(":" + c for c in columns)}, :status, :user_id)
        RETURNING id
    """).bindparams(*_json_bindparams(columns))
    try:
        club_id = db.execute(stmt, {**values, "status": CLUB_PENDING, "user_id": user_id}).scalar_one()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A club with this name already exists") from exc
    audit(db, user_id, "club", club_id, "club_created", {"name": payload.name})
    return club_out(require_club(db, club_id))


def update_club(db: Session, club_id: int, payload: ClubUpdateIn, actor_id: int) -> ClubOut:
    require_club(db, club_id)
    values = _club_values(payload, exclude_unset=True)
    for key in _REQUIRED_CLUB_FIELDS:
        if key in values and values[key] is None:
            raise ValidationError(f"{key} cannot be null")
    if values.get("name"):
        _ensure_name_available(db, values["name"], exclude_club_id=club_id)
    if values:
        assignments = ", ".join(f"{c}=:{c}" for c in values)
        stmt = sa.text(f"""
            UPDATE clubs SET {assignments}, updated_at=now() WHERE id=:club_id
        """).bindparams(*_json_bindparams(values))
        try:
            db.execute(stmt, {**values, "club_id": club_id})
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("A club with this name already exists") from exc
        audit(db, actor_id, "club", club_id, "club_updated", {"fields": sorted(values)})
    return club_out(require_club(db, club_id))


def delete_club(db: Session, club_id: int, actor_id: int) -> None:
    require_club(db, club_id)
    db.execute(sa.text("DELETE FROM clubs WHERE id=:id"), {"id": club_id})
    audit(db, actor_id, "club", club_id, "club_deleted", {})


def club_events_with_stats(db: Session, club_id: int) -> ClubEventsOut:
    club = require_approved_club(db, club_id)
    rows = db.execute(sa.text("""
        SELECT e.id, e.title, e.description, e.location, e.start_time, e.end_time,
               e.capacity, e.photo_url, e.status,
               count(r.id) AS registrations_count,
               count(r.id) FILTER (WHERE r.status=:attended) AS attended_count,
               (SELECT avg(er.rating) FROM event_ratings er WHERE er.event_id=e.id) AS average_rating
        FROM events e
        LEFT JOIN registrations r ON r.event_id=e.id
        WHERE e.club_id=:c AND e.end_time < :now
        GROUP BY e.id
        ORDER BY e.start_time DESC
    """), {"c": club_id, "attended": REG_ATTENDED, "now": now_utc()}).mappings().all()

    events = []
    total_attendance = 0
    total_registrations = 0
    for r in rows:
        registrations = int(r["registrations_count"])
        attended = int(r["attended_count"])
        total_attendance += attended
        total_registrations += registrations
        events.append(ClubEventStatsRowOut(
            **{k: r[k] for k in ("id", "title", "description", "location", "start_time",
                                 "end_time", "capacity", "photo_url", "status")},
            registrations_count=registrations,
            attended_count=attended,
            attendance_rate=round(attended / registrations * 100) if registrations else 0,
            average_rating=round(float(r["average_rating"]), 2) if r["average_rating"] is not None else None,
        ))

    club_avg = db.execute(sa.text("""
        SELECT avg(er.rating)
        FROM event_ratings er
        JOIN events e ON e.id=er.event_id
        WHERE e.club_id=:c
    """), {"c": club_id}).scalar()

    return ClubEventsOut(
        club_id=club_id,
        club_name=club["name"],
        total_events=len(events),
        total_attendance=total_attendance,
        average_attendance_rate=round(total_attendance / total_registrations * 100) if total_registrations else 0,
        average_rating=round(float(club_avg), 2) if club_avg is not None else None,
        events=events,
    )


# Followers

def list_followers(db: Session, club_id: int) -> list[FollowerOut]:
    require_approved_club(db, club_id)
    rows = db.execute(sa.text("""
        SELECT u.id, u.full_name, u.avatar_url
        FROM club_followers f
        JOIN users u ON u.id=f.user_id
        WHERE f.club_id=:c
        ORDER BY f.created_at DESC
    """), {"c": club_id}).mappings().all()
    return [FollowerOut(**r) for r in rows]


def follower_count(db: Session, club_id: int) -> int:
    require_approved_club(db, club_id)
    return int(db.execute(sa.text("""
        SELECT count(*) FROM club_followers WHERE club_id=:c
    """), {"c": club_id}).scalar_one())


def is_following(db: Session, user_id: int, club_id: int) -> bool:
    return db.execute(sa.text("""
        SELECT 1 FROM club_followers WHERE user_id=:u AND club_id=:c
    """), {"u": user_id, "c": club_id}).first() is not None


def follow_club(db: Session, user_id: int, club_id: int) -> None:
    require_approved_club(db, club_id)
    db.execute(sa.text("""
        INSERT INTO club_followers (user_id, club_id)
        VALUES (:u, :c)
        ON CONFLICT (user_id, club_id) DO NOTHING
    """), {"u": user_id, "c": club_id})


def unfollow_club(db: Session, user_id: int, club_id: int) -> None:
    deleted = db.execute(sa.text("""
        DELETE FROM club_followers WHERE user_id=:u AND club_id=:c
    """), {"u": user_id, "c": club_id}).rowcount
    if not deleted:
        raise NotFoundError("You are not following this club")


# Join requests

_JOIN_COLUMNS = "jr.id, jr.user_id, jr.club_id, jr.status, jr.created_at, jr.updated_at"


def _get_join_request(db: Session, request_id: int):
    return db.execute(sa.text(f"""
        SELECT {_JOIN_COLUMNS} FROM club_join_requests jr WHERE jr.id=:id
    """), {"id": request_id}).mappings().first()


def get_my_join_request(db: Session, user_id: int, club_id: int) -> JoinRequestOut | None:
    row = db.execute(sa.text(f"""
        SELECT {_JOIN_COLUMNS} FROM club_join_requests jr WHERE jr.user_id=:u AND jr.club_id=:c
    """), {"u": user_id, "c": club_id}).mappings().first()
    return JoinRequestOut(**row) if row else None


def request_to_join(db: Session, user_id: int, club_id: int) -> JoinRequestOut:
    require_approved_club(db, club_id)
    existing = get_my_join_request(db, user_id, club_id)
    if existing is None:
        try:
            request_id = db.execute(sa.text("""
                INSERT INTO club_join_requests (user_id, club_id, status)
                VALUES (:u, :c, :s)
                RETURNING id
            """), {"u": user_id, "c": club_id, "s": JOIN_PENDING}).scalar_one()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("You already have a join request for this club") from exc
    elif existing.status == JOIN_REJECTED:
        request_id = existing.id
        db.execute(sa.text("""
            UPDATE club_join_requests SET status=:s, updated_at=now() WHERE id=:id
        """), {"s": JOIN_PENDING, "id": request_id})
    elif existing.status == JOIN_PENDING:
        raise ConflictError("You already have a pending join request for this club")
    else:
        raise ConflictError("You are already a member of this club")
    audit(db, user_id, "club_join_request", request_id, "join_requested", {"club_id": club_id})
    return JoinRequestOut(**_get_join_request(db, request_id))


def list_join_requests(db: Session, club_id: int, status: str | None = None) -> list[JoinRequestWithUserOut]:
    require_club(db, club_id)
    where = ["jr.club_id=:c"]
    params: dict[str, object] = {"c": club_id}
    if status is not None:
        where.append("jr.status=:s")
        params["s"] = status
    rows = db.execute(sa.text(f"""
        SELECT {_JOIN_COLUMNS},
               u.full_name AS user_full_name, u.email AS user_email, u.avatar_url AS user_avatar_url
        FROM club_join_requests jr
        JOIN users u ON u.id=jr.user_id
        WHERE {" AND ".join(where)}
        ORDER BY jr.created_at DESC
    """), params).mappings().all()
    return [
        JoinRequestWithUserOut(
            id=r["id"],
            user_id=r["user_id"],
            club_id=r["club_id"],
            status=r["status"],
            created_at=r["created_at"],
            updated_at=r["updated_at"],
            user=JoinRequestUserOut(
                id=r["user_id"],
                full_name=r["user_full_name"],
                email=r["user_email"],
                avatar_url=r["user_avatar_url"],
            ),
        )
        for r in rows
    ]


def decide_join_request(db: Session, request_id: int, new_status: str, actor_id: int) -> JoinRequestOut:
    if new_status not in (JOIN_APPROVED, JOIN_REJECTED):
        raise ValidationError("Join requests can only be approved or rejected")
    row = _get_join_request(db, request_id)
    if not row:
        raise NotFoundError("Join request not found")
    if row["status"] != JOIN_PENDING:
        raise ValidationError(f"Join request already {row['status'].lower()}")
    db.execute(sa.text("""
        UPDATE club_join_requests SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": new_status, "id": request_id})
    audit(db, actor_id, "club_join_request", request_id, f"join_{new_status.lower()}", {"club_id": row["club_id"]})
    return JoinRequestOut(**_get_join_request(db, request_id))


# Managers

def list_managed_clubs(db: Session, actor: Actor) -> list[ClubOut]:
    if actor.is_admin:
        rows = db.execute(sa.text(f"""
            SELECT {_CLUB_COLUMNS} FROM clubs c ORDER BY c.name ASC
        """)).mappings().all()
    else:
        rows = db.execute(sa.text(f"""
            SELECT {_CLUB_COLUMNS}
            FROM clubs c
            JOIN club_managers m ON m.club_id=c.id
            WHERE m.user_id=:u
            ORDER BY c.name ASC
        """), {"u": actor.user_id}).mappings().all()
    return [club_out(r) for r in rows]


def list_managers(db: Session, club_id: int) -> list[ClubManagerOut]:
    require_club(db, club_id)
    rows = db.execute(sa.text("""
        SELECT m.user_id, m.club_id, u.full_name, u.email, m.created_at
        FROM club_managers m
        JOIN users u ON u.id=m.user_id
        WHERE m.club_id=:c
        ORDER BY m.created_at ASC
    """), {"c": club_id}).mappings().all()
    return [ClubManagerOut(**r) for r in rows]


def _promote_to_manager(db: Session, user_id: int) -> None:
    db.execute(sa.text("""
        UPDATE users SET role=:manager, updated_at=now()
        WHERE id=:u AND role=:user
    """), {"u": user_id, "manager": ROLE_MANAGER, "user": ROLE_USER})


def add_manager(db: Session, club_id: int, user_id: int, actor_id: int) -> ClubManagerOut:
    require_club(db, club_id)
    exists_user = db.execute(sa.text("SELECT 1 FROM users WHERE id=:u"), {"u": user_id}).first()
    if not exists_user:
        raise NotFoundError("User not found")
    existing = db.execute(sa.text("""
        SELECT 1 FROM club_managers WHERE user_id=:u AND club_id=:c
    """), {"u": user_id, "c": club_id}).first()
    if existing:
        raise ConflictError("User already manages this club")
    try:
        db.execute(sa.text("""
            INSERT INTO club_managers (user_id, club_id) VALUES (:u, :c)
        """), {"u": user_id, "c": club_id})
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("User already manages this club") from exc
    _promote_to_manager(db, user_id)
    audit(db, actor_id, "club", club_id, "manager_added", {"user_id": user_id})
    return next(m for m in list_managers(db, club_id) if m.user_id == user_id)


def remove_manager(db: Session, club_id: int, user_id: int, actor_id: int) -> None:
    deleted = db.execute(sa.text("""
        DELETE FROM club_managers WHERE user_id=:u AND club_id=:c
    """), {"u": user_id, "c": club_id}).rowcount
    if not deleted:
        raise NotFoundError("Manager not found for this club")
    # drop the MANAGER role once the user manages nothing
    db.execute(sa.text("""
        UPDATE users SET role=:user, updated_at=now()
        WHERE id=:u AND role=:manager
          AND NOT EXISTS (SELECT 1 FROM club_managers WHERE user_id=:u)
    """), {"u": user_id, "user": ROLE_USER, "manager": ROLE_MANAGER})
    audit(db, actor_id, "club", club_id, "manager_removed", {"user_id": user_id})


# Admin approval workflow

def list_clubs_for_admin(db: Session, status: str | None = None) -> list[AdminClubOut]:
    where = ""
    params: dict[str, object] = {}
    if status is not None:
        where = "WHERE c.status=:s"
        params["s"] = status
    rows = db.execute(sa.text(f"""
        SELECT {_CLUB_COLUMNS}, u.email AS owner_email, u.full_name AS owner_full_name
        FROM clubs c
        LEFT JOIN users u ON u.id=c.user_id
        {where}
        ORDER BY c.created_at DESC
    """), params).mappings().all()
    return [
        AdminClubOut(
            **club_out(r).model_dump(),
            owner_email=r["owner_email"],
            owner_full_name=r["owner_full_name"],
        )
        for r in rows
    ]


def approve_club(db: Session, club_id: int, actor_id: int) -> ClubOut:
    club = require_club(db, club_id)
    db.execute(sa.text("""
        UPDATE clubs SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": CLUB_APPROVED, "id": club_id})

    owner_id = club["owner_id"]
    if owner_id is not None:
        _promote_to_manager(db, owner_id)
        db.execute(sa.text("""
            INSERT INTO club_managers (user_id, club_id)
            VALUES (:u, :c)
            ON CONFLICT (user_id, club_id) DO NOTHING
        """), {"u": owner_id, "c": club_id})

    audit(db, actor_id, "club", club_id, "club_approved", {"owner_id": owner_id})
    logger.info("club %s approved by admin %s", club_id, actor_id)
    return club_out(require_club(db, club_id))


def reject_club(db: Session, club_id: int, actor_id: int) -> ClubOut:
    require_club(db, club_id)
    db.execute(sa.text("""
        UPDATE clubs SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": CLUB_REJECTED, "id": club_id})
    audit(db, actor_id, "club", club_id, "club_rejected", {})
    logger.info("club %s rejected by admin %s", club_id, actor_id)
    return club_out(require_club(db, club_id))
