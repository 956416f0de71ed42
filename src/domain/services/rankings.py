from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from statistics import fmean

from src.domain.models import (
    EntitySummary,
    MetricExtreme,
    RankingEntry,
    RankingStatistics,
)

DEFAULT_RANKING_LIMIT = 10
MAX_RANKING_LIMIT = 100


class RankingOrder(str, Enum):
    POINTS = "points"
    MEAN_SCORE = "mean_score"
    TOTAL_EVALUATIONS = "total_evaluations"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class ComparisonMetric(str, Enum):
    POINTS_TOTAL = "points_total"
    MEAN_SCORE = "mean_score"
    TOTAL_EVALUATIONS = "total_evaluations"
    SATISFACTION_PERCENT = "satisfaction_percent"


DEFAULT_COMPARISON_METRICS = (
    ComparisonMetric.POINTS_TOTAL,
    ComparisonMetric.MEAN_SCORE,
    ComparisonMetric.TOTAL_EVALUATIONS,
)

_ORDER_FIELDS = {
    RankingOrder.POINTS: "points_total",
    RankingOrder.MEAN_SCORE: "mean_score",
    RankingOrder.TOTAL_EVALUATIONS: "total_evaluations",
}


def build_ranking(
    summaries: Sequence[EntitySummary],
    *,
    order_by: RankingOrder = RankingOrder.POINTS,
    direction: SortDirection = SortDirection.DESC,
    limit: int = DEFAULT_RANKING_LIMIT,
) -> tuple[list[RankingEntry], RankingStatistics]:
    """Order summaries into 1-based positions and compute ranking statistics.

    Statistics cover every ranked entity, not only the entries kept by ``limit``.
    Ties keep entity-id order so positions are deterministic.
    """
    if not 1 <= limit <= MAX_RANKING_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_RANKING_LIMIT}")

    field_name = _ORDER_FIELDS[RankingOrder(order_by)]
    ordered = sorted(summaries, key=lambda summary: summary.entity_id)
    ordered.sort(
        key=lambda summary: getattr(summary, field_name),
        reverse=SortDirection(direction) is SortDirection.DESC,
    )

    entries = [
        RankingEntry(position=index, summary=summary)
        for index, summary in enumerate(ordered[:limit], start=1)
    ]
    return entries, _ranking_statistics(ordered)


def _ranking_statistics(summaries: Sequence[EntitySummary]) -> RankingStatistics:
    if not summaries:
        return RankingStatistics(total_entities=0, mean_points=0, mean_evaluations=0, mean_score=0.0)

    return RankingStatistics(
        total_entities=len(summaries),
        mean_points=round(fmean(summary.points_total for summary in summaries)),
        mean_evaluations=round(fmean(summary.total_evaluations for summary in summaries)),
        mean_score=round(fmean(summary.mean_score for summary in summaries), 2),
    )


def build_comparison(
    summaries: Sequence[EntitySummary],
    metrics: Sequence[ComparisonMetric | str] = DEFAULT_COMPARISON_METRICS,
) -> tuple[dict[str, MetricExtreme], dict[str, MetricExtreme], dict[str, float]]:
    """Best, worst and mean value of each requested metric across ``summaries``."""
    best: dict[str, MetricExtreme] = {}
    worst: dict[str, MetricExtreme] = {}
    mean: dict[str, float] = {}
    if not summaries:
        return best, worst, mean

    ordered = sorted(summaries, key=lambda summary: summary.entity_id)
    for metric in metrics:
        name = ComparisonMetric(metric).value
        values = [(summary.entity_id, float(getattr(summary, name))) for summary in ordered]
        top = max(values, key=lambda pair: pair[1])
        bottom = min(values, key=lambda pair: pair[1])
        best[name] = MetricExtreme(entity_id=top[0], value=top[1])
        worst[name] = MetricExtreme(entity_id=bottom[0], value=bottom[1])
        mean[name] = round(fmean(value for _, value in values), 2)
    return best, worst, mean
