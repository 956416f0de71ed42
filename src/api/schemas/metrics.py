from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from src.domain.models import Trend
from src.domain.services.rankings import DEFAULT_COMPARISON_METRICS, ComparisonMetric


class _FromDomain(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class PeriodOut(_FromDomain):
    start: datetime
    end: datetime
    label: str


class EntitySummaryOut(_FromDomain):
    entity_id: str
    total_evaluations: int
    mean_score: float
    satisfaction_percent: float
    points_total: int
    best_score: float
    worst_score: float
    trend: Trend


class GlobalStatisticsOut(_FromDomain):
    total_entities: int
    total_evaluations: int
    mean_score_overall: float
    satisfaction_percent_overall: float
    score_histogram: dict[int, int]


class MetricsResponse(_FromDomain):
    period: PeriodOut
    entity_summaries: list[EntitySummaryOut]
    global_stats: GlobalStatisticsOut


class TimelineBucketOut(_FromDomain):
    label: str
    start: datetime
    end: datetime
    evaluations: int
    mean_score: float
    satisfaction_percent: float
    points: int
    active_entities: int


class TimelineResponse(_FromDomain):
    period: PeriodOut
    buckets: list[TimelineBucketOut]


class RankingEntryOut(_FromDomain):
    position: int
    summary: EntitySummaryOut


class RankingStatisticsOut(_FromDomain):
    total_entities: int
    mean_points: int
    mean_evaluations: int
    mean_score: float


class RankingResponse(_FromDomain):
    period: PeriodOut
    entries: list[RankingEntryOut]
    statistics: RankingStatisticsOut


class MetricExtremeOut(_FromDomain):
    entity_id: str
    value: float


class ComparisonRequest(BaseModel):
    entity_ids: list[str] = Field(..., min_length=2, max_length=5)
    metrics: list[ComparisonMetric] = Field(
        default_factory=lambda: list(DEFAULT_COMPARISON_METRICS), min_length=1
    )
    period: str | None = None
    start: datetime | None = None
    end: datetime | None = None


class ComparisonResponse(_FromDomain):
    period: PeriodOut
    summaries: list[EntitySummaryOut]
    best: dict[str, MetricExtremeOut]
    worst: dict[str, MetricExtremeOut]
    mean: dict[str, float]
