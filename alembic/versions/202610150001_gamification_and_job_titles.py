"""Achievements catalog, achievement awards and attendant job titles

Revision ID: 202610150001
Revises: 202610010001
Create Date: 2026-10-15 00:01:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "202610150001"
down_revision = "202610010001"
branch_labels = None
depends_on = None

achievement_category_enum = sa.Enum(
    "volume",
    "quality",
    "consistency",
    "special",
    "tenure",
    name="achievement_category",
)
achievement_tier_enum = sa.Enum(
    "bronze",
    "silver",
    "gold",
    "platinum",
    "diamond",
    name="achievement_tier",
)


def upgrade() -> None:
    op.add_column("users", sa.Column("job_title", sa.String(length=64), nullable=True))

    op.create_table(
        "achievements",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("icon", sa.String(length=64), nullable=True),
        sa.Column("category", achievement_category_enum, nullable=False),
        sa.Column("tier", achievement_tier_enum, nullable=False),
        sa.Column("target_value", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.UniqueConstraint("name", name="uq_achievements_name"),
    )

    op.create_table(
        "achievement_awards",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("achievement_id", sa.String(length=36), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=False),
        sa.Column("points_awarded", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "awarded_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.ForeignKeyConstraint(
            ["achievement_id"],
            ["achievements.id"],
            name="fk_achievement_awards_achievement_id_achievements",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["entity_id"],
            ["users.id"],
            name="fk_achievement_awards_entity_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint("achievement_id", "entity_id", name="uq_achievement_award"),
    )
    op.create_index("ix_achievement_awards_entity_id", "achievement_awards", ["entity_id"])
    op.create_index("ix_achievement_awards_awarded_at", "achievement_awards", ["awarded_at"])


def downgrade() -> None:
    op.drop_index("ix_achievement_awards_awarded_at", table_name="achievement_awards")
    op.drop_index("ix_achievement_awards_entity_id", table_name="achievement_awards")
    op.drop_table("achievement_awards")
    op.drop_table("achievements")
    achievement_tier_enum.drop(op.get_bind(), checkfirst=True)
    achievement_category_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_column("users", "job_title")
