from __future__ import annotations

from datetime import datetime

import pytest
from src.domain import Trend
from src.domain.services.metrics import MetricsAggregator, build_timeline
from src.domain.services.periods import Granularity, resolve_period, split_period
from tests.utils import at, evaluation, snapshot

MARCH = resolve_period("monthly", now=at(2026, 3, 18))


@pytest.fixture
def aggregator() -> MetricsAggregator:
    return MetricsAggregator()


class TestEntitySummaries:
    """Tests for per-entity folding of snapshots."""

    def test_zero_filled_periods_do_not_drag_the_mean_down(
        self, aggregator: MetricsAggregator
    ) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 1), total=2, mean=4.0, satisfaction=100.0),
            snapshot("att-1", at(2026, 3, 8), total=0, mean=0.0, satisfaction=0.0),
            snapshot("att-1", at(2026, 3, 15), total=2, mean=5.0, satisfaction=50.0),
        ]

        [summary] = aggregator.aggregate(snapshots, [], MARCH).entity_summaries

        assert summary.mean_score == 4.5
        assert summary.satisfaction_percent == 75.0
        assert summary.total_evaluations == 4

    def test_sums_extremes_and_rounding(self, aggregator: MetricsAggregator) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 1), total=3, mean=3.0, points=90, best=4.0, worst=2.0),
            snapshot("att-1", at(2026, 3, 8), total=1, mean=4.0, points=40, best=4.0, worst=4.0),
            snapshot("att-1", at(2026, 3, 15), total=2, mean=4.0, points=80, best=5.0, worst=3.0),
        ]

        [summary] = aggregator.aggregate(snapshots, [], MARCH).entity_summaries

        assert summary.points_total == 210
        assert summary.mean_score == 3.67
        assert summary.best_score == 5.0
        assert summary.worst_score == 2.0

    def test_only_snapshots_inside_the_window_count(self, aggregator: MetricsAggregator) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 2, 28, 23), total=9, mean=1.0, points=90),
            snapshot("att-1", at(2026, 3, 1), total=1, mean=5.0, points=50),
            snapshot("att-1", at(2026, 4, 1), total=9, mean=1.0, points=90),
        ]

        [summary] = aggregator.aggregate(snapshots, [], MARCH).entity_summaries

        assert summary.total_evaluations == 1
        assert summary.points_total == 50

    def test_entities_without_snapshots_in_window_are_omitted(
        self, aggregator: MetricsAggregator
    ) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 2), mean=4.0),
            snapshot("att-2", at(2026, 2, 2), mean=4.0),
        ]

        result = aggregator.aggregate(snapshots, [], MARCH)

        assert [summary.entity_id for summary in result.entity_summaries] == ["att-1"]
        assert result.global_stats.total_entities == 1

    def test_summaries_are_ordered_by_entity_id(self, aggregator: MetricsAggregator) -> None:
        snapshots = [snapshot(entity, at(2026, 3, 2), mean=3.0) for entity in ("c", "a", "b")]

        result = aggregator.aggregate(snapshots, [], MARCH)

        assert [summary.entity_id for summary in result.entity_summaries] == ["a", "b", "c"]

    def test_trend_uses_chronological_order_regardless_of_input_order(
        self, aggregator: MetricsAggregator
    ) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 22), mean=4.5),
            snapshot("att-1", at(2026, 3, 1), mean=3.0),
            snapshot("att-1", at(2026, 3, 8), mean=3.9),
        ]

        [summary] = aggregator.aggregate(snapshots, [], MARCH).entity_summaries

        assert summary.trend is Trend.RISING

    def test_input_is_not_mutated(self, aggregator: MetricsAggregator) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 22), mean=4.5),
            snapshot("att-1", at(2026, 3, 1), mean=3.0),
        ]
        original = list(snapshots)

        aggregator.aggregate(snapshots, [], MARCH)

        assert snapshots == original


class TestGlobalStatistics:
    """Tests for the evaluation-level statistics block."""

    def test_two_subordinates_give_half_satisfaction(self, aggregator: MetricsAggregator) -> None:
        evaluations = [
            evaluation(entity, score, at(2026, 3, day))
            for entity, scores in (("att-1", (5, 5, 4)), ("att-2", (3, 3, 2)))
            for day, score in enumerate(scores, start=2)
        ]
        snapshots = [
            snapshot("att-1", at(2026, 3, 1), total=3, mean=4.67, satisfaction=100.0),
            snapshot("att-2", at(2026, 3, 1), total=3, mean=2.67, satisfaction=0.0),
        ]

        result = aggregator.aggregate(snapshots, evaluations, MARCH)

        assert len(result.entity_summaries) == 2
        assert result.global_stats.total_evaluations == 6
        assert result.global_stats.satisfaction_percent_overall == 50.0
        assert result.global_stats.mean_score_overall == 3.67
        assert result.global_stats.score_histogram == {1: 0, 2: 1, 3: 2, 4: 1, 5: 2}

    def test_histogram_always_sums_to_the_evaluation_count(
        self, aggregator: MetricsAggregator
    ) -> None:
        evaluations = [
            evaluation("att-1", score, at(2026, 3, 1 + index))
            for index, score in enumerate([1, 2, 2, 5, 5, 5, 4])
        ]

        stats = aggregator.aggregate([], evaluations, MARCH).global_stats

        assert sum(stats.score_histogram.values()) == stats.total_evaluations == 7

    def test_evaluations_outside_the_window_are_ignored(
        self, aggregator: MetricsAggregator
    ) -> None:
        evaluations = [
            evaluation("att-1", 5, at(2026, 3, 31, 23)),
            evaluation("att-1", 1, at(2026, 4, 1)),
        ]

        stats = aggregator.aggregate([], evaluations, MARCH).global_stats

        assert stats.total_evaluations == 1
        assert stats.score_histogram[1] == 0

    def test_empty_window_yields_zeroes(self, aggregator: MetricsAggregator) -> None:
        result = aggregator.aggregate([], [], MARCH)

        assert result.entity_summaries == []
        assert result.global_stats.total_entities == 0
        assert result.global_stats.mean_score_overall == 0.0
        assert result.global_stats.satisfaction_percent_overall == 0.0
        assert result.global_stats.score_histogram == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}

    def test_naive_timestamps_are_read_in_the_period_zone(
        self, aggregator: MetricsAggregator
    ) -> None:
        snapshots = [
            snapshot("att-1", at(2026, 3, 15), total=1, mean=3.0, points=30),
            snapshot("att-1", datetime(2026, 3, 1), total=1, mean=5.0, points=50),
            snapshot("att-1", datetime(2026, 2, 28, 23), total=9, mean=1.0, points=90),
        ]
        evaluations = [
            evaluation("att-1", 5, datetime(2026, 3, 31, 23)),
            evaluation("att-1", 1, datetime(2026, 4, 1)),
        ]

        result = aggregator.aggregate(snapshots, evaluations, MARCH)

        [summary] = result.entity_summaries
        assert summary.points_total == 80
        assert summary.trend is Trend.FALLING
        assert result.global_stats.total_evaluations == 1
        assert result.global_stats.score_histogram[5] == 1


class TestTimeline:
    def test_evaluations_land_in_their_bucket(self) -> None:
        buckets = split_period(MARCH, Granularity.WEEKLY)
        evaluations = [
            evaluation("att-1", 5, at(2026, 3, 2)),
            evaluation("att-2", 3, at(2026, 3, 3)),
            evaluation("att-1", 4, at(2026, 3, 8)),
            evaluation("att-1", 2, at(2026, 3, 30)),
        ]

        timeline = build_timeline(evaluations, buckets)

        assert [bucket.evaluations for bucket in timeline] == [2, 1, 0, 0, 1]
        first = timeline[0]
        assert first.mean_score == 4.0
        assert first.satisfaction_percent == 50.0
        assert first.points == 80
        assert first.active_entities == 2
        assert timeline[2].mean_score == 0.0
        assert timeline[2].points == 0

    def test_naive_evaluation_times_still_find_their_bucket(self) -> None:
        buckets = split_period(MARCH, Granularity.WEEKLY)

        timeline = build_timeline([evaluation("att-1", 4, datetime(2026, 3, 8, 6))], buckets)

        assert [bucket.evaluations for bucket in timeline] == [0, 1, 0, 0, 0]
