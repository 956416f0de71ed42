from __future__ import annotations

from datetime import datetime

from src.api.schemas.metrics import PeriodOut, _FromDomain
from src.domain.models import AchievementCategory, AchievementTier


class LevelProgressOut(_FromDomain):
    level: int
    experience: int
    experience_to_next_level: int
    progress_percent: int


class GamificationProfileOut(_FromDomain):
    position: int
    entity_id: str
    evaluations: int
    experience: int
    current_streak: int
    best_streak: int
    streak_bonus: int
    achievement_points: int
    total_points: int
    level: LevelProgressOut


class GamificationResponse(_FromDomain):
    period: PeriodOut
    profiles: list[GamificationProfileOut]


class AchievementAwardOut(_FromDomain):
    achievement_id: str
    entity_id: str
    name: str
    description: str
    icon: str | None
    category: AchievementCategory
    tier: AchievementTier
    points_awarded: int
    awarded_at: datetime


class AchievementsResponse(_FromDomain):
    period: PeriodOut
    awards: list[AchievementAwardOut]
    total: int
    by_category: dict[str, int]
    by_tier: dict[str, int]


class JobTitleSummaryOut(_FromDomain):
    job_title: str
    total_evaluations: int
    mean_score: float
    satisfaction_percent: float
    mean_points: float


class JobTitleBreakdownResponse(_FromDomain):
    period: PeriodOut
    rows: list[JobTitleSummaryOut]
