"""Reporting facade exposed to the request layer.

Every operation follows the same order: capability check, period validation,
visibility resolution, scoped reads, then pure aggregation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, tzinfo
from typing import Protocol

import structlog
from src.core.auth import role_name
from src.domain.errors import AuthorizationError, EntityNotFoundError
from src.domain.models import (
    AchievementAward,
    AchievementCategory,
    AchievementTier,
    AchievementsReport,
    Actor,
    Comparison,
    EvaluationRecord,
    Gamification,
    JobTitleBreakdown,
    PerformanceSnapshot,
    Ranking,
    ResolvedPeriod,
    ScopedReport,
    Timeline,
)
from src.domain.permissions import Capability, has_capability
from src.domain.services.access_scope import AccessScoper, VisibilityFilter
from src.domain.services.gamification import (
    DEFAULT_ACHIEVEMENT_LIMIT,
    build_job_title_breakdown,
    build_profiles,
    summarize_achievements,
)
from src.domain.services.metrics import MetricsAggregator, build_timeline
from src.domain.services.periods import Granularity, PeriodSelection, resolve_period, split_period
from src.domain.services.rankings import (
    DEFAULT_COMPARISON_METRICS,
    DEFAULT_RANKING_LIMIT,
    ComparisonMetric,
    RankingOrder,
    SortDirection,
    build_comparison,
    build_ranking,
)

logger = structlog.get_logger()

MIN_COMPARED_ENTITIES = 2
MAX_COMPARED_ENTITIES = 5


class MetricsDataSource(Protocol):
    """Read contract of the storage collaborator.

    Implementations must apply ``entity_filter`` and ``date_range`` while reading and
    raise :class:`~src.domain.errors.DataSourceUnavailableError` when the backend fails.
    """

    async def fetch_snapshots(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[PerformanceSnapshot]: ...

    async def fetch_evaluations(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[EvaluationRecord]: ...

    async def fetch_subordinates(self, actor_id: str) -> list[str]: ...

    async def fetch_achievement_awards(
        self, entity_filter: VisibilityFilter, date_range: ResolvedPeriod
    ) -> list[AchievementAward]: ...

    async def fetch_job_titles(self, entity_filter: VisibilityFilter) -> dict[str, str | None]: ...


class ReportingService:
    """Role-scoped, period-bounded performance reporting."""

    def __init__(
        self,
        data_source: MetricsDataSource,
        *,
        timezone: tzinfo = UTC,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.data_source = data_source
        self.timezone = timezone
        self.clock = clock
        self.scoper = AccessScoper(data_source)
        self.aggregator = MetricsAggregator()

    def authorize(self, actor: Actor, capability: Capability | str) -> bool:
        return has_capability(actor.role, capability)

    async def require(self, actor: Actor, capability: Capability) -> None:
        """Raise :class:`AuthorizationError` unless ``actor`` holds ``capability``."""
        if self.authorize(actor, capability):
            return
        await logger.awarning(
            "authorization_denied",
            actor_id=actor.actor_id,
            role=role_name(actor.role),
            capability=capability.value,
        )
        raise AuthorizationError(
            f"Role '{role_name(actor.role)}' lacks capability '{capability.value}'",
            capability=capability.value,
        )

    def resolve(self, selection: PeriodSelection) -> ResolvedPeriod:
        now = self.clock() if self.clock else None
        return resolve_period(selection, now=now, tz=self.timezone)

    async def scoped_aggregate(
        self,
        actor: Actor,
        period: PeriodSelection = None,
        *,
        entity_ids: Sequence[str] | None = None,
    ) -> ScopedReport:
        """Summaries and global statistics over everything ``actor`` may see."""
        await self.require(actor, Capability.VIEW_REPORTS)
        resolved = self.resolve(period)
        visibility = await self._scope(actor, entity_ids)

        snapshots = await self.data_source.fetch_snapshots(visibility, resolved)
        evaluations = await self.data_source.fetch_evaluations(visibility, resolved)
        result = self.aggregator.aggregate(snapshots, evaluations, resolved)

        await logger.ainfo(
            "metrics_aggregated",
            actor_id=actor.actor_id,
            role=role_name(actor.role),
            period=resolved.label,
            entities=len(result.entity_summaries),
            evaluations=result.global_stats.total_evaluations,
        )
        return ScopedReport(
            period=resolved,
            entity_summaries=result.entity_summaries,
            global_stats=result.global_stats,
        )

    async def ranking(
        self,
        actor: Actor,
        period: PeriodSelection = None,
        *,
        order_by: RankingOrder = RankingOrder.POINTS,
        direction: SortDirection = SortDirection.DESC,
        limit: int = DEFAULT_RANKING_LIMIT,
    ) -> Ranking:
        await self.require(actor, Capability.VIEW_RANKINGS)
        resolved = self.resolve(period)
        visibility = await self._scope(actor)

        snapshots = await self.data_source.fetch_snapshots(visibility, resolved)
        result = self.aggregator.aggregate(snapshots, [], resolved)
        entries, statistics = build_ranking(
            result.entity_summaries, order_by=order_by, direction=direction, limit=limit
        )

        await logger.ainfo(
            "ranking_built",
            actor_id=actor.actor_id,
            period=resolved.label,
            order_by=RankingOrder(order_by).value,
            entries=len(entries),
        )
        return Ranking(period=resolved, entries=entries, statistics=statistics)

    async def compare(
        self,
        actor: Actor,
        entity_ids: Sequence[str],
        period: PeriodSelection = None,
        *,
        metrics: Sequence[ComparisonMetric | str] = DEFAULT_COMPARISON_METRICS,
    ) -> Comparison:
        await self.require(actor, Capability.VIEW_COMPARATIVES)
        selected = list(dict.fromkeys(entity_ids))
        if not MIN_COMPARED_ENTITIES <= len(selected) <= MAX_COMPARED_ENTITIES:
            raise ValueError(
                f"Comparisons take between {MIN_COMPARED_ENTITIES} "
                f"and {MAX_COMPARED_ENTITIES} distinct entities"
            )
        resolved = self.resolve(period)
        visibility = await self._scope(actor, selected)

        snapshots = await self.data_source.fetch_snapshots(visibility, resolved)
        result = self.aggregator.aggregate(snapshots, [], resolved)
        if not result.entity_summaries:
            raise EntityNotFoundError(
                f"No data for entities {', '.join(selected)} in {resolved.label}"
            )

        best, worst, mean = build_comparison(result.entity_summaries, metrics)
        return Comparison(
            period=resolved,
            summaries=result.entity_summaries,
            best=best,
            worst=worst,
            mean=mean,
        )

    async def timeline(
        self,
        actor: Actor,
        period: PeriodSelection = None,
        *,
        granularity: Granularity | str = Granularity.WHOLE,
        entity_ids: Sequence[str] | None = None,
    ) -> Timeline:
        await self.require(actor, Capability.VIEW_REPORTS)
        resolved = self.resolve(period)
        buckets = split_period(resolved, granularity)
        visibility = await self._scope(actor, entity_ids)

        evaluations = await self.data_source.fetch_evaluations(visibility, resolved)
        return Timeline(period=resolved, buckets=build_timeline(evaluations, buckets))

    async def gamification(self, actor: Actor, period: PeriodSelection = None) -> Gamification:
        """Points, streaks and levels of every visible entity, best total first."""
        await self.require(actor, Capability.VIEW_GAMIFICATION)
        resolved = self.resolve(period)
        visibility = await self._scope(actor)

        evaluations = await self.data_source.fetch_evaluations(visibility, resolved)
        awards = await self.data_source.fetch_achievement_awards(visibility, resolved)
        profiles = build_profiles(evaluations, awards, tz=self.timezone)

        await logger.ainfo(
            "gamification_built",
            actor_id=actor.actor_id,
            period=resolved.label,
            entities=len(profiles),
        )
        return Gamification(period=resolved, profiles=profiles)

    async def achievements(
        self,
        actor: Actor,
        period: PeriodSelection = None,
        *,
        entity_ids: Sequence[str] | None = None,
        category: AchievementCategory | None = None,
        tier: AchievementTier | None = None,
        limit: int = DEFAULT_ACHIEVEMENT_LIMIT,
    ) -> AchievementsReport:
        await self.require(actor, Capability.VIEW_ACHIEVEMENTS)
        resolved = self.resolve(period)
        visibility = await self._scope(actor, entity_ids)

        awards = await self.data_source.fetch_achievement_awards(visibility, resolved)
        recent, total, by_category, by_tier = summarize_achievements(
            awards, category=category, tier=tier, limit=limit
        )
        return AchievementsReport(
            period=resolved,
            awards=recent,
            total=total,
            by_category=by_category,
            by_tier=by_tier,
        )

    async def job_titles(self, actor: Actor, period: PeriodSelection = None) -> JobTitleBreakdown:
        """Evaluation statistics of the visible entities grouped by job title."""
        await self.require(actor, Capability.VIEW_REPORTS)
        resolved = self.resolve(period)
        visibility = await self._scope(actor)

        evaluations = await self.data_source.fetch_evaluations(visibility, resolved)
        titles = await self.data_source.fetch_job_titles(visibility)
        return JobTitleBreakdown(
            period=resolved, rows=build_job_title_breakdown(evaluations, titles)
        )

    async def _scope(
        self, actor: Actor, entity_ids: Iterable[str] | None = None
    ) -> VisibilityFilter:
        visibility = await self.scoper.build_visibility_filter(actor)
        if entity_ids is None:
            return visibility

        selected = set(entity_ids)
        outside = sorted(entity_id for entity_id in selected if not visibility.admits(entity_id))
        if outside:
            await logger.awarning(
                "scope_violation",
                actor_id=actor.actor_id,
                role=role_name(actor.role),
                requested=outside,
            )
            raise AuthorizationError(f"Entities outside caller scope: {', '.join(outside)}")
        return visibility.narrowed_to(selected)
