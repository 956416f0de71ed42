from __future__ import annotations

from collections.abc import Sequence

from src.domain.models import PerformanceSnapshot, Trend

# Fixed business constant: smaller moves are treated as single-evaluation noise.
TREND_THRESHOLD = 0.2


def classify_trend(oldest_mean: float, newest_mean: float) -> Trend:
    """Label the move from ``oldest_mean`` to ``newest_mean``."""
    delta = newest_mean - oldest_mean
    if delta > TREND_THRESHOLD:
        return Trend.RISING
    if delta < -TREND_THRESHOLD:
        return Trend.FALLING
    return Trend.STABLE


def classify_snapshots(snapshots: Sequence[PerformanceSnapshot]) -> Trend:
    """Compare the oldest and newest snapshot of an already sorted partition."""
    if len(snapshots) < 2:
        return Trend.STABLE
    return classify_trend(snapshots[0].mean_score, snapshots[-1].mean_score)
