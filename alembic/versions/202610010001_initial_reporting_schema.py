"""Initial reporting schema: users, evaluations and performance snapshots

Revision ID: 202610010001
Revises:
Create Date: 2026-10-01 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610010001"
down_revision = None
branch_labels = None
depends_on = None

user_role_enum = sa.Enum(
    "admin",
    "supervisor",
    "attendant",
    "consultant",
    name="user_role",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=128), nullable=True),
        sa.Column("role", user_role_enum, nullable=False, server_default="attendant"),
        sa.Column("supervisor_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["supervisor_id"],
            ["users.id"],
            name="fk_users_supervisor_id_users",
            ondelete="SET NULL",
        ),
        sa.CheckConstraint(
            "supervisor_id IS NULL OR role = 'attendant'",
            name="ck_users_only_attendants_supervised",
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_supervisor_id", "users", ["supervisor_id"])

    op.create_table(
        "evaluations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("subject_id", sa.String(length=36), nullable=False),
        sa.Column("rater_id", sa.String(length=36), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column(
            "occurred_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["subject_id"],
            ["users.id"],
            name="fk_evaluations_subject_id_users",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["rater_id"],
            ["users.id"],
            name="fk_evaluations_rater_id_users",
            ondelete="RESTRICT",
        ),
        sa.CheckConstraint("score BETWEEN 1 AND 5", name="ck_evaluations_score_range"),
    )
    op.create_index("ix_evaluations_subject_id", "evaluations", ["subject_id"])
    op.create_index("ix_evaluations_occurred_at", "evaluations", ["occurred_at"])

    op.create_table(
        "performance_snapshots",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("period_reference_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("total_evaluations", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mean_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("satisfaction_percent", sa.Float(), nullable=False, server_default="0"),
        sa.Column("points_earned", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("worst_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["entity_id"],
            ["users.id"],
            name="fk_performance_snapshots_entity_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("entity_id", "period_reference_date", name="uq_snapshot_period"),
    )
    op.create_index(
        "ix_performance_snapshots_entity_id", "performance_snapshots", ["entity_id"]
    )
    op.create_index(
        "ix_performance_snapshots_period_reference_date",
        "performance_snapshots",
        ["period_reference_date"],
    )


def downgrade() -> None:
    op.drop_index(
        "ix_performance_snapshots_period_reference_date", table_name="performance_snapshots"
    )
    op.drop_index("ix_performance_snapshots_entity_id", table_name="performance_snapshots")
    op.drop_table("performance_snapshots")

    op.drop_index("ix_evaluations_occurred_at", table_name="evaluations")
    op.drop_index("ix_evaluations_subject_id", table_name="evaluations")
    op.drop_table("evaluations")

    op.drop_index("ix_users_supervisor_id", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
