from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from src.core.auth import Role

MIN_SCORE = 1
MAX_SCORE = 5


class Trend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class AchievementCategory(str, Enum):
    VOLUME = "volume"
    QUALITY = "quality"
    CONSISTENCY = "consistency"
    SPECIAL = "special"
    TENURE = "tenure"


class AchievementTier(str, Enum):
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    PLATINUM = "platinum"
    DIAMOND = "diamond"


@dataclass(frozen=True, slots=True)
class Actor:
    """An authenticated caller of the system.

    ``supervisor_id`` is a back-reference from an attendant to the supervisor it
    works under; it never expresses ownership.
    """

    actor_id: str
    role: Role | str
    supervisor_id: str | None = None

    def __post_init__(self) -> None:
        if self.supervisor_id and Role.parse(self.role) is not Role.ATTENDANT:
            raise ValueError(f"Only attendants may reference a supervisor (actor {self.actor_id})")

    def assign_supervisor(self, supervisor: Actor) -> Actor:
        """Return a copy of this attendant linked to ``supervisor``."""
        if Role.parse(supervisor.role) is not Role.SUPERVISOR:
            raise ValueError(f"Actor {supervisor.actor_id} is not a supervisor")
        if supervisor.actor_id == self.actor_id:
            raise ValueError("An actor cannot supervise itself")
        return dataclasses.replace(self, supervisor_id=supervisor.actor_id)


@dataclass(frozen=True, slots=True)
class EvaluationRecord:
    """A single immutable rating of an entity."""

    evaluation_id: str
    subject_entity_id: str
    rater_actor_id: str
    score: int
    occurred_at: datetime
    comment: str | None = None

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(
                f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {self.score}"
            )

    @property
    def owner_id(self) -> str:
        return self.subject_entity_id


@dataclass(frozen=True, slots=True)
class PerformanceSnapshot:
    """Pre-aggregated performance of one entity over one elementary period."""

    entity_id: str
    period_reference_date: datetime
    total_evaluations: int = 0
    mean_score: float = 0.0
    satisfaction_percent: float = 0.0
    points_earned: int = 0
    best_score: float = 0.0
    worst_score: float = 0.0

    @property
    def owner_id(self) -> str:
        return self.entity_id


@dataclass(frozen=True, slots=True)
class AchievementAward:
    """One achievement earned by one entity."""

    achievement_id: str
    entity_id: str
    name: str
    category: AchievementCategory
    tier: AchievementTier
    points_awarded: int
    awarded_at: datetime
    description: str = ""
    icon: str | None = None

    @property
    def owner_id(self) -> str:
        return self.entity_id


@dataclass(frozen=True, slots=True)
class DateRange:
    """Explicit caller-supplied window, used verbatim once validated."""

    start: datetime | None = None
    end: datetime | None = None


@dataclass(frozen=True, slots=True)
class ResolvedPeriod:
    """Half-open ``[start, end)`` interval with a display label."""

    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        """Membership test; a naive ``moment`` is read in the zone of ``start``."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=self.start.tzinfo)
        return self.start <= moment < self.end


@dataclass(slots=True)
class EntitySummary:
    entity_id: str
    total_evaluations: int
    mean_score: float
    satisfaction_percent: float
    points_total: int
    best_score: float
    worst_score: float
    trend: Trend


@dataclass(slots=True)
class GlobalStatistics:
    total_entities: int
    total_evaluations: int
    mean_score_overall: float
    satisfaction_percent_overall: float
    score_histogram: dict[int, int] = field(
        default_factory=lambda: {score: 0 for score in range(MIN_SCORE, MAX_SCORE + 1)}
    )


@dataclass(slots=True)
class AggregationResult:
    entity_summaries: list[EntitySummary]
    global_stats: GlobalStatistics


@dataclass(slots=True)
class ScopedReport:
    """Result of a scoped aggregation handed back to the request layer."""

    period: ResolvedPeriod
    entity_summaries: list[EntitySummary]
    global_stats: GlobalStatistics


@dataclass(slots=True)
class RankingEntry:
    position: int
    summary: EntitySummary


@dataclass(slots=True)
class RankingStatistics:
    total_entities: int
    mean_points: int
    mean_evaluations: int
    mean_score: float


@dataclass(slots=True)
class Ranking:
    period: ResolvedPeriod
    entries: list[RankingEntry]
    statistics: RankingStatistics


@dataclass(slots=True)
class MetricExtreme:
    entity_id: str
    value: float


@dataclass(slots=True)
class Comparison:
    period: ResolvedPeriod
    summaries: list[EntitySummary]
    best: dict[str, MetricExtreme]
    worst: dict[str, MetricExtreme]
    mean: dict[str, float]


@dataclass(slots=True)
class TimelineBucket:
    label: str
    start: datetime
    end: datetime
    evaluations: int
    mean_score: float
    satisfaction_percent: float
    points: int
    active_entities: int


@dataclass(slots=True)
class Timeline:
    period: ResolvedPeriod
    buckets: list[TimelineBucket]


@dataclass(slots=True)
class LevelProgress:
    level: int
    experience: int
    experience_to_next_level: int
    progress_percent: int


@dataclass(slots=True)
class GamificationProfile:
    """Points, streaks and level of one entity over a period."""

    entity_id: str
    evaluations: int
    experience: int
    current_streak: int
    best_streak: int
    streak_bonus: int
    achievement_points: int
    total_points: int
    level: LevelProgress
    position: int = 0


@dataclass(slots=True)
class Gamification:
    period: ResolvedPeriod
    profiles: list[GamificationProfile]


@dataclass(slots=True)
class AchievementsReport:
    period: ResolvedPeriod
    awards: list[AchievementAward]
    total: int
    by_category: dict[str, int]
    by_tier: dict[str, int]


@dataclass(slots=True)
class JobTitleSummary:
    job_title: str
    total_evaluations: int
    mean_score: float
    satisfaction_percent: float
    mean_points: float


@dataclass(slots=True)
class JobTitleBreakdown:
    period: ResolvedPeriod
    rows: list[JobTitleSummary]
