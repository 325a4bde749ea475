"""create academic KPI tables

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 09:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "20261017_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "publishers",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False,
                  comment="Inactive publishers are skipped by scheduled KPI jobs"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_publishers_is_active", "publishers", ["is_active"], unique=False)

    op.create_table(
        "journals",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("publisher_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["publisher_id"], ["publishers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_journals_publisher_id", "journals", ["publisher_id"], unique=False)

    op.create_table(
        "submissions",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("journal_id", sa.String(length=64), nullable=False),
        sa.Column("publisher_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False,
                  comment="accepted, rejected, pending, under_review, revision_requested, ..."),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True,
                  comment="Null while the submission is in flight"),
        sa.ForeignKeyConstraint(["journal_id"], ["journals.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["publisher_id"], ["publishers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_submissions_publisher_submitted_at",
        "submissions",
        ["publisher_id", "submitted_at"],
        unique=False,
    )
    op.create_index("ix_submissions_journal_id", "submissions", ["journal_id"], unique=False)

    op.create_table(
        "review_assignments",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("submission_id", sa.String(length=64), nullable=False),
        sa.Column("publisher_id", sa.String(length=64), nullable=False),
        sa.Column("reviewer_id", sa.String(length=64), nullable=False),
        sa.Column("reviewer_name", sa.String(length=255), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True,
                  comment="When the reviewer accepted or declined the invitation"),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("quality_rating", sa.Float(), nullable=True,
                  comment="Editor-assigned quality rating of the review (1-5)"),
        sa.ForeignKeyConstraint(["submission_id"], ["submissions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["publisher_id"], ["publishers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_review_assignments_publisher_assigned_at",
        "review_assignments",
        ["publisher_id", "assigned_at"],
        unique=False,
    )
    op.create_index(
        "ix_review_assignments_reviewer_id",
        "review_assignments",
        ["reviewer_id"],
        unique=False,
    )

    op.create_table(
        "analytics_events",
        sa.Column("id", sa.String(length=64), nullable=False,
                  comment="<epoch-millis>-<base36 suffix>"),
        sa.Column("publisher_id", sa.String(length=64), nullable=False),
        sa.Column("journal_id", sa.String(length=64), nullable=False),
        sa.Column("submission_id", sa.String(length=64), nullable=True),
        sa.Column("event_type", sa.String(length=32), nullable=False,
                  comment="submission, review, decision, publication, metrics_update"),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("data", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_analytics_events_publisher_timestamp",
        "analytics_events",
        ["publisher_id", "timestamp"],
        unique=False,
    )

    op.create_table(
        "computed_kpis",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("publisher_id", sa.String(length=64), nullable=False),
        sa.Column("period_start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_end", sa.DateTime(timezone=True), nullable=False),
        sa.Column("computed_kpis", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("publisher_id", "period_start", "period_end",
                            name="uq_computed_kpis_publisher_period"),
    )
    op.create_index(
        "ix_computed_kpis_publisher_latest",
        "computed_kpis",
        ["publisher_id", "period_end", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_computed_kpis_publisher_latest", table_name="computed_kpis")
    op.drop_table("computed_kpis")
    op.drop_index("ix_analytics_events_publisher_timestamp", table_name="analytics_events")
    op.drop_table("analytics_events")
    op.drop_index("ix_review_assignments_reviewer_id", table_name="review_assignments")
    op.drop_index("ix_review_assignments_publisher_assigned_at", table_name="review_assignments")
    op.drop_table("review_assignments")
    op.drop_index("ix_submissions_journal_id", table_name="submissions")
    op.drop_index("ix_submissions_publisher_submitted_at", table_name="submissions")
    op.drop_table("submissions")
    op.drop_index("ix_journals_publisher_id", table_name="journals")
    op.drop_table("journals")
    op.drop_index("ix_publishers_is_active", table_name="publishers")
    op.drop_table("publishers")
