from __future__ import annotations

import logging

import sqlalchemy as sa
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clubhub.core.constants import EVENT_PUBLISHED, REG_CONFIRMED
from clubhub.core.errors import ConflictError, NotFoundError, ValidationError
from clubhub.core.security import now_utc
from clubhub.schemas.events import (
    EventRegistrationsOut,
    EventRegistrationsSummaryOut,
    ManagedRegistrationOut,
    RatingOut,
    RegistrantOut,
    RegistrationOut,
)
from clubhub.services import registration_rules as rules
from clubhub.services.audit import audit
from clubhub.services.events import as_utc, require_event

logger = logging.getLogger(__name__)

_REG_COLUMNS = "r.id, r.user_id, r.event_id, r.status, r.created_at, r.updated_at"


def get_registration(db: Session, user_id: int, event_id: int):
    return db.execute(sa.text(f"""
        SELECT {_REG_COLUMNS} FROM registrations r WHERE r.user_id=:u AND r.event_id=:e
    """), {"u": user_id, "e": event_id}).mappings().first()


def _get_registration_by_id(db: Session, registration_id: int):
    return db.execute(sa.text(f"""
        SELECT {_REG_COLUMNS} FROM registrations r WHERE r.id=:id
    """), {"id": registration_id}).mappings().first()


def confirmed_count(db: Session, event_id: int) -> int:
    return int(db.execute(sa.text("""
        SELECT count(*) FROM registrations WHERE event_id=:e AND status=:s
    """), {"e": event_id, "s": REG_CONFIRMED}).scalar_one())


def my_registration(db: Session, user_id: int, event_id: int) -> RegistrationOut | None:
    require_event(db, event_id)
    row = get_registration(db, user_id, event_id)
    return RegistrationOut(**row) if row else None


def register(db: Session, user_id: int, event_id: int, requested: str) -> RegistrationOut:
    event = require_event(db, event_id)
    current = get_registration(db, user_id, event_id)

    # transition rules first so a downgrade is refused whatever the event state
    plan = rules.plan_user_registration(current["status"] if current else None, requested)
    if event["status"] != EVENT_PUBLISHED:
        raise ValidationError("Event is not open for registration")

    if plan.action == rules.CREATE:
        try:
            registration_id = db.execute(sa.text("""
                INSERT INTO registrations (user_id, event_id, status)
                VALUES (:u, :e, :s)
                RETURNING id
            """), {"u": user_id, "e": event_id, "s": plan.status}).scalar_one()
        except IntegrityError as exc:
            db.rollback()
            raise ConflictError("You are already registered for this event") from exc
    else:
        registration_id = current["id"]
        db.execute(sa.text("""
            UPDATE registrations SET status=:s, updated_at=now() WHERE id=:id
        """), {"s": plan.status, "id": registration_id})

    audit(db, user_id, "registration", registration_id, "registration_" + plan.action, {
        "event_id": event_id,
        "from": current["status"] if current else None,
        "to": plan.status,
    })
    return RegistrationOut(**_get_registration_by_id(db, registration_id))


def cancel(db: Session, user_id: int, event_id: int) -> RegistrationOut | None:
    """Cancel the caller's registration.

    Returns the retained row, or None when an INTERESTED row was removed.
    """
    require_event(db, event_id)
    current = get_registration(db, user_id, event_id)
    plan = rules.plan_cancellation(current["status"] if current else None)

    if plan.action == rules.DELETE:
        db.execute(sa.text("DELETE FROM registrations WHERE id=:id"), {"id": current["id"]})
        audit(db, user_id, "registration", current["id"], "registration_delete", {"event_id": event_id})
        return None

    db.execute(sa.text("""
        UPDATE registrations SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": plan.status, "id": current["id"]})
    audit(db, user_id, "registration", current["id"], "registration_cancelled", {
        "event_id": event_id,
        "from": current["status"],
    })
    return RegistrationOut(**_get_registration_by_id(db, current["id"]))


def list_event_registrations(db: Session, event_id: int) -> EventRegistrationsOut:
    event = require_event(db, event_id)
    rows = db.execute(sa.text("""
        SELECT r.id, r.status, r.created_at, u.id AS user_id, u.email, u.full_name
        FROM registrations r
        JOIN users u ON u.id=r.user_id
        WHERE r.event_id=:e
        ORDER BY r.created_at ASC
    """), {"e": event_id}).mappings().all()
    return EventRegistrationsOut(
        event=EventRegistrationsSummaryOut(
            id=event["id"],
            title=event["title"],
            capacity=event["capacity"],
            confirmed_count=confirmed_count(db, event_id),
        ),
        registrations=[
            ManagedRegistrationOut(
                id=r["id"],
                user=RegistrantOut(id=r["user_id"], email=r["email"], full_name=r["full_name"]),
                status=r["status"],
                created_at=r["created_at"],
            )
            for r in rows
        ],
    )


def update_status_by_manager(db: Session, registration_id: int, target: str, actor_id: int) -> RegistrationOut:
    current = _get_registration_by_id(db, registration_id)
    if not current:
        raise NotFoundError("Registration not found")
    event = require_event(db, current["event_id"])

    rules.check_manager_transition(
        target,
        event_start=as_utc(event["start_time"]),
        today=now_utc().date(),
        capacity=event["capacity"],
        confirmed_count=confirmed_count(db, event["id"]) if target == REG_CONFIRMED else 0,
    )

    db.execute(sa.text("""
        UPDATE registrations SET status=:s, updated_at=now() WHERE id=:id
    """), {"s": target, "id": registration_id})
    audit(db, actor_id, "registration", registration_id, "registration_status_set", {
        "event_id": event["id"],
        "from": current["status"],
        "to": target,
    })
    logger.info("registration %s set %s -> %s by user %s", registration_id, current["status"], target, actor_id)
    return RegistrationOut(**_get_registration_by_id(db, registration_id))


def rate_event(db: Session, user_id: int, event_id: int, rating: int, comment: str | None) -> RatingOut:
    require_event(db, event_id)
    current = get_registration(db, user_id, event_id)
    rules.ensure_can_rate(current["status"] if current else None)

    row = db.execute(sa.text("""
        INSERT INTO event_ratings (user_id, event_id, rating, comment)
        VALUES (:u, :e, :rating, :comment)
        ON CONFLICT (user_id, event_id)
        DO UPDATE SET rating=EXCLUDED.rating, comment=EXCLUDED.comment, updated_at=now()
        RETURNING id, user_id, event_id, rating, comment, created_at, updated_at
    """), {"u": user_id, "e": event_id, "rating": rating, "comment": comment}).mappings().one()

    audit(db, user_id, "event_rating", row["id"], "event_rated", {"event_id": event_id, "rating": rating})
    return RatingOut(**row)
