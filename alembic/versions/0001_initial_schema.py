"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17

Creates all tables for FestHub:
users, events, starred_events, event_updates, festival_updates.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

USER_ROLES = ("attendee", "organizer", "admin")
EVENT_CATEGORIES = (
    "competition", "workshop", "stall", "exhibit", "performance", "lecture",
    "games", "food", "merch", "art", "sport",
)


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("auth_id", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("college", sa.String(255), nullable=True),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("course", sa.String(255), nullable=True),
        sa.Column("admission_year", sa.Integer, nullable=True),
        sa.Column("passout_year", sa.Integer, nullable=True),
        sa.Column("role", sa.Enum(*USER_ROLES, name="userrole"), nullable=False, server_default="attendee"),
        sa.Column("role_elevation_requested", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- events ---
    op.create_table(
        "events",
        sa.Column("event_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.Enum(*EVENT_CATEGORIES, name="eventcategory"), nullable=False),
        sa.Column("organizer_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("date", sa.Date, nullable=False),
        sa.Column("time", sa.Time, nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("department", sa.String(255), nullable=True),
        sa.Column("college", sa.String(255), nullable=True),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("latitude", sa.Float, nullable=True),
        sa.Column("longitude", sa.Float, nullable=True),
        sa.Column("is_approved", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("star_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("star_count >= 0", name="ck_events_star_count_non_negative"),
    )

    # --- starred_events ---
    op.create_table(
        "starred_events",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "event_id", name="uq_starred_events_user_event"),
    )

    # --- event_updates ---
    op.create_table(
        "event_updates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_id", sa.String(36), sa.ForeignKey("events.event_id"), nullable=False),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_event_updates_created_at", "event_updates", ["created_at"])

    # --- festival_updates ---
    op.create_table(
        "festival_updates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("admin_id", sa.String(36), sa.ForeignKey("users.user_id"), nullable=False),
        sa.Column("message", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_festival_updates_created_at", "festival_updates", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_festival_updates_created_at", table_name="festival_updates")
    op.drop_table("festival_updates")
    op.drop_index("ix_event_updates_created_at", table_name="event_updates")
    op.drop_table("event_updates")
    op.drop_table("starred_events")
    op.drop_table("events")
    op.drop_table("users")
    sa.Enum(name="eventcategory").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
