from src.domain.models import (
    Actor,
    DateRange,
    EntitySummary,
    EvaluationRecord,
    GlobalStatistics,
    PerformanceSnapshot,
    ResolvedPeriod,
    Trend,
)

__all__ = [
    "Actor",
    "DateRange",
    "EntitySummary",
    "EvaluationRecord",
    "GlobalStatistics",
    "PerformanceSnapshot",
    "ResolvedPeriod",
    "Trend",
]
