"""Folding of snapshots and evaluations into period summaries.

Everything here is a pure function of its inputs: callers pass records that were
already constrained by the caller's visibility filter.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime, tzinfo
from statistics import fmean

from src.domain.models import (
    MAX_SCORE,
    MIN_SCORE,
    AggregationResult,
    EntitySummary,
    EvaluationRecord,
    GlobalStatistics,
    PerformanceSnapshot,
    ResolvedPeriod,
    TimelineBucket,
)
from src.domain.services.trend import classify_snapshots

# Fixed business constants.
SATISFACTION_MIN_SCORE = 4
POINTS_PER_SCORE = 10
DECIMALS = 2


def _mean_of_positive(values: Iterable[float]) -> float:
    """Mean of the strictly positive values; zero-filled periods add no sample."""
    samples = [value for value in values if value > 0]
    return fmean(samples) if samples else 0.0


def _aware(moment: datetime, zone: tzinfo | None) -> datetime:
    return moment.replace(tzinfo=zone) if moment.tzinfo is None else moment


def _satisfaction_percent(scores: Sequence[int]) -> float:
    if not scores:
        return 0.0
    satisfied = sum(1 for score in scores if score >= SATISFACTION_MIN_SCORE)
    return satisfied / len(scores) * 100


class MetricsAggregator:
    """Builds per-entity summaries and the global statistics block for a window."""

    def aggregate(
        self,
        snapshots: Iterable[PerformanceSnapshot],
        evaluations: Iterable[EvaluationRecord],
        period: ResolvedPeriod,
    ) -> AggregationResult:
        partitions = self._partition(snapshots, period)
        summaries = [
            self._summarize(entity_id, partitions[entity_id]) for entity_id in sorted(partitions)
        ]
        global_stats = self._global_statistics(evaluations, period, total_entities=len(summaries))
        return AggregationResult(entity_summaries=summaries, global_stats=global_stats)

    def _partition(
        self, snapshots: Iterable[PerformanceSnapshot], period: ResolvedPeriod
    ) -> dict[str, list[PerformanceSnapshot]]:
        partitions: dict[str, list[PerformanceSnapshot]] = defaultdict(list)
        for snapshot in snapshots:
            if period.contains(snapshot.period_reference_date):
                partitions[snapshot.entity_id].append(snapshot)

        # Source ordering is not trusted; trend comparison needs oldest -> newest.
        zone = period.start.tzinfo
        for partition in partitions.values():
            partition.sort(key=lambda snapshot: _aware(snapshot.period_reference_date, zone))
        return dict(partitions)

    def _summarize(self, entity_id: str, partition: list[PerformanceSnapshot]) -> EntitySummary:
        total_evaluations = sum(snapshot.total_evaluations for snapshot in partition)
        points_total = sum(snapshot.points_earned for snapshot in partition)
        mean_score = _mean_of_positive(snapshot.mean_score for snapshot in partition)
        satisfaction = _mean_of_positive(snapshot.satisfaction_percent for snapshot in partition)
        best_score = max(snapshot.best_score for snapshot in partition)
        worst_score = min(snapshot.worst_score for snapshot in partition)

        return EntitySummary(
            entity_id=entity_id,
            total_evaluations=total_evaluations,
            mean_score=round(mean_score, DECIMALS),
            satisfaction_percent=round(satisfaction, DECIMALS),
            points_total=points_total,
            best_score=round(best_score, DECIMALS),
            worst_score=round(worst_score, DECIMALS),
            trend=classify_snapshots(partition),
        )

    def _global_statistics(
        self,
        evaluations: Iterable[EvaluationRecord],
        period: ResolvedPeriod,
        *,
        total_entities: int,
    ) -> GlobalStatistics:
        scores = [
            evaluation.score for evaluation in evaluations if period.contains(evaluation.occurred_at)
        ]
        histogram = {score: 0 for score in range(MIN_SCORE, MAX_SCORE + 1)}
        for score in scores:
            histogram[score] += 1

        return GlobalStatistics(
            total_entities=total_entities,
            total_evaluations=len(scores),
            mean_score_overall=round(fmean(scores), DECIMALS) if scores else 0.0,
            satisfaction_percent_overall=round(_satisfaction_percent(scores), DECIMALS),
            score_histogram=histogram,
        )


def build_timeline(
    evaluations: Iterable[EvaluationRecord], buckets: Sequence[ResolvedPeriod]
) -> list[TimelineBucket]:
    """Evaluation activity per bucket, for charting a period over time."""
    records = list(evaluations)
    timeline: list[TimelineBucket] = []
    for bucket in buckets:
        in_bucket = [record for record in records if bucket.contains(record.occurred_at)]
        scores = [record.score for record in in_bucket]
        timeline.append(
            TimelineBucket(
                label=bucket.label,
                start=bucket.start,
                end=bucket.end,
                evaluations=len(scores),
                mean_score=round(fmean(scores), DECIMALS) if scores else 0.0,
                satisfaction_percent=round(_satisfaction_percent(scores), DECIMALS),
                points=sum(score * POINTS_PER_SCORE for score in scores),
                active_entities=len({record.subject_entity_id for record in in_bucket}),
            )
        )
    return timeline
