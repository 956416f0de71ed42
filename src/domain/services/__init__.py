"""Domain services."""

from src.domain.services.access_scope import AccessScoper, VisibilityFilter, visibility_filter_for
from src.domain.services.gamification import (
    build_job_title_breakdown,
    build_profiles,
    summarize_achievements,
)
from src.domain.services.metrics import MetricsAggregator, build_timeline
from src.domain.services.periods import (
    Granularity,
    PeriodToken,
    resolve_period,
    split_period,
)
from src.domain.services.rankings import (
    ComparisonMetric,
    RankingOrder,
    SortDirection,
    build_comparison,
    build_ranking,
)
from src.domain.services.reporting import MetricsDataSource, ReportingService
from src.domain.services.trend import classify_trend

__all__ = [
    "AccessScoper",
    "ComparisonMetric",
    "Granularity",
    "MetricsAggregator",
    "MetricsDataSource",
    "PeriodToken",
    "RankingOrder",
    "ReportingService",
    "SortDirection",
    "VisibilityFilter",
    "build_comparison",
    "build_job_title_breakdown",
    "build_profiles",
    "build_ranking",
    "build_timeline",
    "classify_trend",
    "resolve_period",
    "split_period",
    "summarize_achievements",
    "visibility_filter_for",
]
