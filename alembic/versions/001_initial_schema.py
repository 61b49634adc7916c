"""initial schema: profiles, interactions, tender cache, visited, notification reads

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("company_name", sa.String(255)),
        sa.Column("contact_email", sa.String(255)),
        sa.Column("siret", sa.String(32)),
        sa.Column("address", sa.String(500)),
        sa.Column("website", sa.String(500)),
        sa.Column("company_size", sa.String(20)),
        sa.Column("specialization", sa.Text()),
        sa.Column("cpv_codes", sa.Text()),
        sa.Column("target_sectors", sa.Text()),
        sa.Column("certifications", sa.Text()),
        sa.Column("negative_keywords", sa.Text()),
        sa.Column("scope", sa.String(20)),
        sa.Column("target_departments", sa.Text()),
        sa.Column("subscription_status", sa.String(20)),
        sa.Column("trial_started_at", sa.DateTime()),
        sa.Column("saved_dashboard_filters", sa.JSON()),
        *_timestamps(),
    )

    op.create_table(
        "user_interactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tender_id", sa.String(64), nullable=False),
        sa.Column("status", sa.String(30), nullable=False),
        sa.Column("internal_notes", sa.Text()),
        sa.Column("custom_reminder_date", sa.Date()),
        sa.Column("ai_analysis_result", sa.JSON()),
        sa.Column("chat_history", sa.JSON()),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "tender_id", name="uq_interaction_user_tender"),
    )
    op.create_index("ix_interactions_user_status", "user_interactions", ["user_id", "status"])

    op.create_table(
        "tender_cache",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("tender_id", sa.String(64), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("cached_at", sa.DateTime()),
        sa.Column("last_accessed_at", sa.DateTime()),
        sa.UniqueConstraint("user_id", "tender_id", name="uq_tender_cache_user_tender"),
    )
    op.create_index("ix_tender_cache_user_accessed", "tender_cache", ["user_id", "last_accessed_at"])

    op.create_table(
        "visited_tenders",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("tender_id", sa.String(64), nullable=False),
        sa.Column("visited_at", sa.DateTime()),
        sa.UniqueConstraint("user_id", "tender_id", name="uq_visited_user_tender"),
    )

    op.create_table(
        "notification_reads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("notification_id", sa.String(255), nullable=False),
        sa.Column("read_at", sa.DateTime()),
        sa.UniqueConstraint("user_id", "notification_id", name="uq_notification_read"),
    )


def downgrade() -> None:
    op.drop_table("notification_reads")
    op.drop_table("visited_tenders")
    op.drop_index("ix_tender_cache_user_accessed", table_name="tender_cache")
    op.drop_table("tender_cache")
    op.drop_index("ix_interactions_user_status", table_name="user_interactions")
    op.drop_table("user_interactions")
    op.drop_table("profiles")
