"""Points, streaks, levels and achievements derived from evaluations.

Experience comes only from evaluation points. The streak bonus and achievement
points add to the total score but never to experience, so levels move at the
pace of the evaluations themselves.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, timedelta, tzinfo
from itertools import pairwise
from statistics import fmean
from types import MappingProxyType

from src.domain.models import (
    AchievementAward,
    AchievementCategory,
    AchievementTier,
    EvaluationRecord,
    GamificationProfile,
    JobTitleSummary,
    LevelProgress,
)
from src.domain.services.metrics import (
    DECIMALS,
    POINTS_PER_SCORE,
    SATISFACTION_MIN_SCORE,
)

SCORE_POINTS: Mapping[int, int] = MappingProxyType({1: 10, 2: 20, 3: 30, 4: 50, 5: 100})

# (consecutive days, bonus); the highest threshold reached wins.
STREAK_BONUSES: tuple[tuple[int, int], ...] = (
    (7, 50),
    (14, 100),
    (30, 250),
    (60, 500),
    (90, 1000),
)

# Experience needed to reach level N is LEVEL_THRESHOLDS[N - 1].
LEVEL_THRESHOLDS: tuple[int, ...] = (
    0,
    100,
    300,
    600,
    1000,
    1500,
    2100,
    2800,
    3600,
    4500,
    5500,
    6600,
    7800,
    9100,
    10500,
    12000,
    13600,
    15300,
    17100,
    19000,
)
MAX_LEVEL = len(LEVEL_THRESHOLDS)

DEFAULT_ACHIEVEMENT_LIMIT = 20
MAX_ACHIEVEMENT_LIMIT = 100
UNSPECIFIED_JOB_TITLE = "Not informed"


def points_for_score(score: int) -> int:
    return SCORE_POINTS.get(score, 0)


def streak_bonus(days: int) -> int:
    bonus = 0
    for threshold, points in STREAK_BONUSES:
        if days >= threshold:
            bonus = points
    return bonus


def level_for(experience: int) -> int:
    level = 1
    for index, threshold in enumerate(LEVEL_THRESHOLDS, start=1):
        if experience < threshold:
            break
        level = index
    return level


def level_progress(experience: int) -> LevelProgress:
    """Level reached plus the distance to the next one.

    ``progress_percent`` is measured inside the current level's band and is 100
    once the last level is reached.
    """
    level = level_for(experience)
    if level >= MAX_LEVEL:
        return LevelProgress(
            level=level, experience=experience, experience_to_next_level=0, progress_percent=100
        )
    floor = LEVEL_THRESHOLDS[level - 1]
    ceiling = LEVEL_THRESHOLDS[level]
    return LevelProgress(
        level=level,
        experience=experience,
        experience_to_next_level=ceiling - experience,
        progress_percent=(experience - floor) * 100 // (ceiling - floor),
    )


def _local_day(moment: datetime, tz: tzinfo) -> date:
    # Naive timestamps are already wall-clock time in the operational zone.
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(tz).date()


def streaks(days: Iterable[date]) -> tuple[int, int]:
    """Return ``(current, best)`` runs of consecutive calendar days.

    The current run is the one ending on the latest day given.
    """
    ordered = sorted(set(days))
    if not ordered:
        return 0, 0
    run = best = 1
    for previous, current in pairwise(ordered):
        run = run + 1 if current - previous == timedelta(days=1) else 1
        best = max(best, run)
    return run, best


def build_profiles(
    evaluations: Iterable[EvaluationRecord],
    awards: Iterable[AchievementAward] = (),
    *,
    tz: tzinfo = UTC,
) -> list[GamificationProfile]:
    """One profile per entity with evaluations or awards, best total first.

    Streaks count calendar days in ``tz`` holding at least one positive evaluation.
    """
    experience: dict[str, int] = defaultdict(int)
    counts: Counter[str] = Counter()
    positive_days: dict[str, set[date]] = defaultdict(set)
    for record in evaluations:
        entity_id = record.subject_entity_id
        experience[entity_id] += points_for_score(record.score)
        counts[entity_id] += 1
        if record.score >= SATISFACTION_MIN_SCORE:
            positive_days[entity_id].add(_local_day(record.occurred_at, tz))

    achievement_points: dict[str, int] = defaultdict(int)
    for award in awards:
        achievement_points[award.entity_id] += award.points_awarded

    profiles: list[GamificationProfile] = []
    for entity_id in sorted(experience.keys() | achievement_points.keys()):
        current, best = streaks(positive_days[entity_id])
        bonus = streak_bonus(best)
        xp = experience[entity_id]
        profiles.append(
            GamificationProfile(
                entity_id=entity_id,
                evaluations=counts[entity_id],
                experience=xp,
                current_streak=current,
                best_streak=best,
                streak_bonus=bonus,
                achievement_points=achievement_points[entity_id],
                total_points=xp + bonus + achievement_points[entity_id],
                level=level_progress(xp),
            )
        )

    profiles.sort(key=lambda profile: (-profile.total_points, profile.entity_id))
    for position, profile in enumerate(profiles, start=1):
        profile.position = position
    return profiles


def summarize_achievements(
    awards: Iterable[AchievementAward],
    *,
    category: AchievementCategory | None = None,
    tier: AchievementTier | None = None,
    limit: int = DEFAULT_ACHIEVEMENT_LIMIT,
) -> tuple[list[AchievementAward], int, dict[str, int], dict[str, int]]:
    """Most recent awards first, with counts over every matching award.

    Counts cover all matches, not only the ``limit`` awards returned.
    """
    if not 1 <= limit <= MAX_ACHIEVEMENT_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_ACHIEVEMENT_LIMIT}")

    matching = [
        award
        for award in awards
        if (category is None or award.category is category)
        and (tier is None or award.tier is tier)
    ]
    matching.sort(key=lambda award: (award.awarded_at, award.entity_id), reverse=True)

    by_category = {member.value: 0 for member in AchievementCategory}
    by_tier = {member.value: 0 for member in AchievementTier}
    for award in matching:
        by_category[award.category.value] += 1
        by_tier[award.tier.value] += 1
    return matching[:limit], len(matching), by_category, by_tier


def build_job_title_breakdown(
    evaluations: Iterable[EvaluationRecord], job_titles: Mapping[str, str | None]
) -> list[JobTitleSummary]:
    """Evaluation statistics grouped by the subject's job title, best mean first."""
    scores: dict[str, list[int]] = defaultdict(list)
    for record in evaluations:
        title = job_titles.get(record.subject_entity_id) or UNSPECIFIED_JOB_TITLE
        scores[title].append(record.score)

    rows = [
        JobTitleSummary(
            job_title=title,
            total_evaluations=len(values),
            mean_score=round(fmean(values), DECIMALS),
            satisfaction_percent=round(
                sum(1 for value in values if value >= SATISFACTION_MIN_SCORE) / len(values) * 100,
                DECIMALS,
            ),
            mean_points=round(fmean(value * POINTS_PER_SCORE for value in values), DECIMALS),
        )
        for title, values in scores.items()
    ]
    rows.sort(key=lambda row: (-row.mean_score, row.job_title))
    return rows
