"""clubs, managers, followers and join requests

Revision ID: 0002_clubs
Revises: 0001_users_and_auth
Create Date: 2026-10-05

"""
from alembic import op
import sqlalchemy as sa

revision = "0002_clubs"
down_revision = "0001_users_and_auth"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "clubs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("short_description", sa.Text, nullable=True),
        sa.Column("logo_url", sa.Text, nullable=True),
        sa.Column("about", sa.Text, nullable=True),
        sa.Column("about_image_url", sa.Text, nullable=True),
        sa.Column("history", sa.JSON, nullable=True),
        sa.Column("mission", sa.JSON, nullable=True),
        sa.Column("activities", sa.JSON, nullable=True),
        sa.Column("achievements", sa.JSON, nullable=True),
        sa.Column("join_us", sa.JSON, nullable=True),
        sa.Column("contact", sa.JSON, nullable=True),
        sa.Column("cover_image_url", sa.Text, nullable=True),
        sa.Column("founded_year", sa.Integer, nullable=True),
        sa.Column("payment_info", sa.Text, nullable=True),
        sa.Column("status", sa.Text, nullable=False, server_default="PENDING"),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('PENDING','APPROVED','REJECTED')", name="ck_clubs_status"),
        sa.UniqueConstraint("name", name="uq_clubs_name"),
    )
    op.create_index("ix_clubs_status_created", "clubs", ["status", sa.text("created_at DESC")])

    op.create_table(
        "club_managers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("club_id", sa.Integer, sa.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("user_id", "club_id", name="uq_club_managers_user_club"),
    )
    op.create_index("ix_club_managers_club", "club_managers", ["club_id"])

    op.create_table(
        "club_followers",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("club_id", sa.Integer, sa.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.UniqueConstraint("user_id", "club_id", name="uq_club_followers_user_club"),
    )
    op.create_index("ix_club_followers_club", "club_followers", ["club_id"])

    op.create_table(
        "club_join_requests",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("club_id", sa.Integer, sa.ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.Text, nullable=False, server_default="PENDING"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("status in ('PENDING','APPROVED','REJECTED')", name="ck_club_join_requests_status"),
        sa.UniqueConstraint("user_id", "club_id", name="uq_club_join_requests_user_club"),
    )
    op.create_index("ix_club_join_requests_club_status", "club_join_requests", ["club_id", "status"])


def downgrade():
    op.drop_index("ix_club_join_requests_club_status", table_name="club_join_requests")
    op.drop_table("club_join_requests")
    op.drop_index("ix_club_followers_club", table_name="club_followers")
    op.drop_table("club_followers")
    op.drop_index("ix_club_managers_club", table_name="club_managers")
    op.drop_table("club_managers")
    op.drop_index("ix_clubs_status_created", table_name="clubs")
    op.drop_table("clubs")
