"""SQLAlchemy implementation of the reporting data source."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import false, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload
from src.domain.errors import DataSourceUnavailableError
from src.domain.models import (
    AchievementAward,
    EvaluationRecord,
    PerformanceSnapshot,
    ResolvedPeriod,
)
from src.domain.services.access_scope import VisibilityFilter
from src.infrastructure.db.models import (
    AchievementAwardModel,
    AchievementModel,
    EvaluationModel,
    PerformanceSnapshotModel,
    UserModel,
    UserRole,
)

if TYPE_CHECKING:
    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

logger = structlog.get_logger()


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive values; everything is stored in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def _scoped(
    stmt: Select[Any], owner_column: InstrumentedAttribute[str], entity_filter: VisibilityFilter
) -> Select[Any]:
    """Constrain ``stmt`` to the owners admitted by ``entity_filter``."""
    if entity_filter.match_all:
        return stmt
    if entity_filter.is_empty:
        return stmt.where(false())
    return stmt.where(owner_column.in_(sorted(entity_filter.owner_ids)))


class SqlMetricsRepository:
    """Reads snapshots, evaluations, achievement awards and the supervision hierarchy."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def fetch_snapshots(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[PerformanceSnapshot]:
        stmt = (
            select(PerformanceSnapshotModel)
            .join(UserModel, UserModel.id == PerformanceSnapshotModel.entity_id)
            .where(
                UserModel.is_active.is_(True),
                PerformanceSnapshotModel.period_reference_date >= _as_utc(date_range.start),
                PerformanceSnapshotModel.period_reference_date < _as_utc(date_range.end),
            )
            .order_by(
                PerformanceSnapshotModel.entity_id,
                PerformanceSnapshotModel.period_reference_date,
            )
        )
        stmt = _scoped(stmt, PerformanceSnapshotModel.entity_id, entity_filter)
        rows = await self._scalars(stmt, source="performance_snapshots")
        return [
            PerformanceSnapshot(
                entity_id=row.entity_id,
                period_reference_date=_as_utc(row.period_reference_date),
                total_evaluations=row.total_evaluations,
                mean_score=row.mean_score,
                satisfaction_percent=row.satisfaction_percent,
                points_earned=row.points_earned,
                best_score=row.best_score,
                worst_score=row.worst_score,
            )
            for row in rows
        ]

    async def fetch_evaluations(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[EvaluationRecord]:
        stmt = (
            select(EvaluationModel)
            .join(UserModel, UserModel.id == EvaluationModel.subject_id)
            .where(
                UserModel.is_active.is_(True),
                EvaluationModel.occurred_at >= _as_utc(date_range.start),
                EvaluationModel.occurred_at < _as_utc(date_range.end),
            )
            .order_by(EvaluationModel.occurred_at)
        )
        stmt = _scoped(stmt, EvaluationModel.subject_id, entity_filter)
        rows = await self._scalars(stmt, source="evaluations")
        return [
            EvaluationRecord(
                evaluation_id=row.id,
                subject_entity_id=row.subject_id,
                rater_actor_id=row.rater_id,
                score=row.score,
                occurred_at=_as_utc(row.occurred_at),
                comment=row.comment,
            )
            for row in rows
        ]

    async def fetch_subordinates(self, actor_id: str) -> list[str]:
        stmt = (
            select(UserModel.id)
            .where(UserModel.supervisor_id == actor_id, UserModel.role == UserRole.ATTENDANT)
            .order_by(UserModel.id)
        )
        return list(await self._scalars(stmt, source="users"))

    async def fetch_achievement_awards(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[AchievementAward]:
        stmt = (
            select(AchievementAwardModel)
            .options(selectinload(AchievementAwardModel.achievement))
            .join(AchievementModel, AchievementModel.id == AchievementAwardModel.achievement_id)
            .join(UserModel, UserModel.id == AchievementAwardModel.entity_id)
            .where(
                UserModel.is_active.is_(True),
                AchievementModel.is_active.is_(True),
                AchievementAwardModel.awarded_at >= _as_utc(date_range.start),
                AchievementAwardModel.awarded_at < _as_utc(date_range.end),
            )
            .order_by(AchievementAwardModel.awarded_at, AchievementAwardModel.entity_id)
        )
        stmt = _scoped(stmt, AchievementAwardModel.entity_id, entity_filter)
        rows = await self._scalars(stmt, source="achievement_awards")
        return [
            AchievementAward(
                achievement_id=row.achievement_id,
                entity_id=row.entity_id,
                name=row.achievement.name,
                category=row.achievement.category,
                tier=row.achievement.tier,
                points_awarded=row.points_awarded,
                awarded_at=_as_utc(row.awarded_at),
                description=row.achievement.description,
                icon=row.achievement.icon,
            )
            for row in rows
        ]

    async def fetch_job_titles(self, entity_filter: VisibilityFilter) -> dict[str, str | None]:
        stmt = select(UserModel).where(UserModel.role == UserRole.ATTENDANT).order_by(UserModel.id)
        stmt = _scoped(stmt, UserModel.id, entity_filter)
        rows = await self._scalars(stmt, source="users")
        return {row.id: row.job_title for row in rows}

    async def _scalars(self, stmt: Select[Any], *, source: str) -> list[Any]:
        try:
            result = await self.session.execute(stmt)
        except (SQLAlchemyError, OSError) as exc:
            await logger.aerror("data_source_unavailable", source=source, error=str(exc)[:200])
            raise DataSourceUnavailableError(f"Could not read {source}") from exc
        return list(result.scalars().all())
