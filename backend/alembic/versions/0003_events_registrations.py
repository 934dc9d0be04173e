"""events, registrations and ratings

Revision ID: 0003_events_registrations
Revises: 0002_clubs
Create Date: 2026-10-06

"""
from alembic import op
import sqlalchemy as sa

revision = "0003_events_registrations"
down_revision = "0002_clubs"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "events",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("club_id", sa.Integer, sa.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("location", sa.Text, nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("photo_url", sa.Text, nullable=True),
        sa.Column("sections", sa.JSON, nullable=True),
        sa.Column("status", sa.Text, nullable=False, server_default="DRAFT"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('DRAFT','PUBLISHED','CLOSED')", name="ck_events_status"),
        sa.CheckConstraint("start_time < end_time", name="ck_events_time_window"),
        sa.CheckConstraint("capacity IS NULL OR capacity >= 1", name="ck_events_capacity"),
        sa.CheckConstraint("price IS NULL OR price >= 0", name="ck_events_price"),
    )
    op.create_index("ix_events_club_start", "events", ["club_id", "start_time"])
    op.create_index("ix_events_status_start", "events", ["status", "start_time"])

    op.create_table(
        "registrations",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="INTERESTED"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint(
            "status in ('INTERESTED','PENDING_PAYMENT','CONFIRMED','CANCELLED','REJECTED','ATTENDED','NO_SHOW')",
            name="ck_registrations_status",
        ),
        sa.UniqueConstraint("user_id", "event_id", name="uq_registrations_user_event"),
    )
    op.create_index("ix_registrations_event_status", "registrations", ["event_id", "status"])

    op.create_table(
        "event_ratings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_id", sa.Integer, sa.ForeignKey("events.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.SmallInteger, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_event_ratings_range"),
        sa.UniqueConstraint("user_id", "event_id", name="uq_event_ratings_user_event"),
    )
    op.create_index("ix_event_ratings_event", "event_ratings", ["event_id"])


def downgrade():
    op.drop_index("ix_event_ratings_event", table_name="event_ratings")
    op.drop_table("event_ratings")
    op.drop_index("ix_registrations_event_status", table_name="registrations")
    op.drop_table("registrations")
    op.drop_index("ix_events_status_start", table_name="events")
    op.drop_index("ix_events_club_start", table_name="events")
    op.drop_table("events")
