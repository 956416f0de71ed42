from __future__ import annotations

from datetime import UTC, datetime

from src.core.auth import Role, create_access_token
from src.domain.models import (
    AchievementAward,
    AchievementCategory,
    AchievementTier,
    EvaluationRecord,
    PerformanceSnapshot,
)


def auth_headers(
    actor_id: str = "att-1", role: Role | str = Role.ATTENDANT, supervisor_id: str | None = None
) -> dict[str, str]:
    token = create_access_token(
        actor_id, role=role, supervisor_id=supervisor_id, email=f"{actor_id}@example.com"
    )
    return {"Authorization": f"Bearer {token}"}


def at(year: int, month: int, day: int, hour: int = 0) -> datetime:
    return datetime(year, month, day, hour, tzinfo=UTC)


def snapshot(
    entity_id: str,
    reference: datetime,
    *,
    total: int = 1,
    mean: float = 0.0,
    satisfaction: float = 0.0,
    points: int = 0,
    best: float = 0.0,
    worst: float = 0.0,
) -> PerformanceSnapshot:
    return PerformanceSnapshot(
        entity_id=entity_id,
        period_reference_date=reference,
        total_evaluations=total,
        mean_score=mean,
        satisfaction_percent=satisfaction,
        points_earned=points,
        best_score=best,
        worst_score=worst,
    )


def evaluation(
    subject_id: str, score: int, occurred_at: datetime, *, evaluation_id: str | None = None
) -> EvaluationRecord:
    return EvaluationRecord(
        evaluation_id=evaluation_id or f"{subject_id}-{occurred_at.isoformat()}-{score}",
        subject_entity_id=subject_id,
        rater_actor_id="admin-1",
        score=score,
        occurred_at=occurred_at,
    )


def award(
    entity_id: str,
    name: str,
    awarded_at: datetime,
    *,
    category: AchievementCategory = AchievementCategory.VOLUME,
    tier: AchievementTier = AchievementTier.BRONZE,
    points: int = 0,
) -> AchievementAward:
    return AchievementAward(
        achievement_id=name.lower().replace(" ", "-"),
        entity_id=entity_id,
        name=name,
        category=category,
        tier=tier,
        points_awarded=points,
        awarded_at=awarded_at,
    )
