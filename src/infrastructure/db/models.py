from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from src.domain.models import AchievementCategory, AchievementTier

from .base import Base


class UserRole(str, enum.Enum):
    """User role enum matching auth.Role."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    ATTENDANT = "attendant"
    CONSULTANT = "consultant"


class UserModel(Base):
    """Account of any actor; attendants are also the entities being evaluated."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "supervisor_id IS NULL OR role = 'attendant'", name="only_attendants_supervised"
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    job_title: Mapped[str | None] = mapped_column(String(64), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda e: [x.value for x in e]),
        default=UserRole.ATTENDANT,
        nullable=False,
    )
    # Back-reference to the supervising user; never an ownership edge.
    supervisor_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    supervisor: Mapped[UserModel | None] = relationship(remote_side=[id])

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email}, role={self.role.value})>"


class EvaluationModel(Base):
    """Immutable rating of an attendant."""

    __tablename__ = "evaluations"
    __table_args__ = (CheckConstraint("score BETWEEN 1 AND 5", name="score_range"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subject_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    rater_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )


class PerformanceSnapshotModel(Base):
    """Per-attendant, per-elementary-period rollup written by the batch job."""

    __tablename__ = "performance_snapshots"
    __table_args__ = (
        UniqueConstraint("entity_id", "period_reference_date", name="uq_snapshot_period"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    period_reference_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    total_evaluations: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mean_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    satisfaction_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    points_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    worst_score: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class AchievementModel(Base):
    """Catalog entry describing an achievement attendants can earn."""

    __tablename__ = "achievements"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    icon: Mapped[str | None] = mapped_column(String(64))
    category: Mapped[AchievementCategory] = mapped_column(
        Enum(
            AchievementCategory,
            name="achievement_category",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
    )
    tier: Mapped[AchievementTier] = mapped_column(
        Enum(
            AchievementTier,
            name="achievement_tier",
            values_callable=lambda e: [x.value for x in e],
        ),
        nullable=False,
    )
    target_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class AchievementAwardModel(Base):
    """An achievement earned by one attendant; written by the scoring job."""

    __tablename__ = "achievement_awards"
    __table_args__ = (
        UniqueConstraint("achievement_id", "entity_id", name="uq_achievement_award"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    achievement_id: Mapped[str] = mapped_column(
        ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False
    )
    entity_id: Mapped[str] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    points_awarded: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )

    achievement: Mapped[AchievementModel] = relationship()
