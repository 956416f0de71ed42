from __future__ import annotations

import pytest
from src.domain import EntitySummary, Trend
from src.domain.services.rankings import (
    MAX_RANKING_LIMIT,
    ComparisonMetric,
    RankingOrder,
    SortDirection,
    build_comparison,
    build_ranking,
)


def summary(entity_id: str, *, points: int, mean: float, total: int) -> EntitySummary:
    return EntitySummary(
        entity_id=entity_id,
        total_evaluations=total,
        mean_score=mean,
        satisfaction_percent=50.0,
        points_total=points,
        best_score=5.0,
        worst_score=1.0,
        trend=Trend.STABLE,
    )


@pytest.fixture
def summaries() -> list[EntitySummary]:
    return [
        summary("att-3", points=80, mean=4.0, total=2),
        summary("att-1", points=140, mean=4.5, total=3),
        summary("att-2", points=80, mean=2.67, total=3),
    ]


class TestBuildRanking:
    def test_default_orders_by_points_descending(self, summaries: list[EntitySummary]) -> None:
        entries, _ = build_ranking(summaries)

        assert [(entry.position, entry.summary.entity_id) for entry in entries] == [
            (1, "att-1"),
            (2, "att-2"),
            (3, "att-3"),
        ]

    def test_ties_fall_back_to_entity_id(self, summaries: list[EntitySummary]) -> None:
        entries, _ = build_ranking(summaries, direction=SortDirection.ASC)

        assert [entry.summary.entity_id for entry in entries] == ["att-2", "att-3", "att-1"]

    def test_order_by_mean_score(self, summaries: list[EntitySummary]) -> None:
        entries, _ = build_ranking(summaries, order_by=RankingOrder.MEAN_SCORE)

        assert [entry.summary.entity_id for entry in entries] == ["att-1", "att-3", "att-2"]

    def test_limit_trims_entries_but_not_statistics(self, summaries: list[EntitySummary]) -> None:
        entries, statistics = build_ranking(summaries, limit=1)

        assert len(entries) == 1
        assert statistics.total_entities == 3
        assert statistics.mean_points == 100
        assert statistics.mean_evaluations == 3
        assert statistics.mean_score == 3.72

    @pytest.mark.parametrize("limit", [0, -1, MAX_RANKING_LIMIT + 1])
    def test_limit_out_of_bounds(self, summaries: list[EntitySummary], limit: int) -> None:
        with pytest.raises(ValueError):
            build_ranking(summaries, limit=limit)

    def test_empty_ranking(self) -> None:
        entries, statistics = build_ranking([])

        assert entries == []
        assert statistics.total_entities == 0
        assert statistics.mean_score == 0.0


class TestBuildComparison:
    def test_best_worst_and_mean_per_metric(self, summaries: list[EntitySummary]) -> None:
        best, worst, mean = build_comparison(
            summaries, [ComparisonMetric.POINTS_TOTAL, "mean_score"]
        )

        assert set(best) == {"points_total", "mean_score"}
        assert (best["points_total"].entity_id, best["points_total"].value) == ("att-1", 140.0)
        assert worst["points_total"].entity_id == "att-2"
        assert worst["mean_score"].entity_id == "att-2"
        assert mean["points_total"] == 100.0
        assert mean["mean_score"] == 3.72

    def test_unknown_metric_is_rejected(self, summaries: list[EntitySummary]) -> None:
        with pytest.raises(ValueError):
            build_comparison(summaries, ["charisma"])

    def test_no_summaries_give_empty_blocks(self) -> None:
        assert build_comparison([]) == ({}, {}, {})
