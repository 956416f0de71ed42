"""Period resolution for reporting windows.

All resolved periods are half-open: ``start`` is inclusive and ``end`` exclusive,
so adjacent periods of the same kind share a boundary without overlapping.
"""

from __future__ import annotations

import calendar
from datetime import UTC, datetime, timedelta, tzinfo
from enum import Enum
from typing import assert_never

import structlog
from src.domain.errors import InvalidPeriodError
from src.domain.models import DateRange, ResolvedPeriod

logger = structlog.get_logger(__name__)

CUSTOM_PERIOD_LABEL = "Custom Period"
CURRENT_WEEK_LABEL = "Current Week"


class PeriodToken(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Granularity(str, Enum):
    """Bucket size used when splitting a period into a timeline."""

    WEEKLY = "weekly"
    MONTHLY = "monthly"
    WHOLE = "whole"


DEFAULT_TOKEN = PeriodToken.MONTHLY

PeriodSelection = PeriodToken | DateRange | str | None


def parse_token(value: object) -> PeriodToken:
    """Map a raw token onto :class:`PeriodToken`, falling back to monthly."""
    if isinstance(value, PeriodToken):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_TOKEN
    if not isinstance(value, str):
        logger.warning("period_token_unknown", token=repr(value), fallback=DEFAULT_TOKEN.value)
        return DEFAULT_TOKEN
    try:
        return PeriodToken(value.strip().lower())
    except ValueError:
        logger.warning("period_token_unknown", token=value, fallback=DEFAULT_TOKEN.value)
        return DEFAULT_TOKEN


def resolve_period(
    selection: PeriodSelection = None,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> ResolvedPeriod:
    """Turn a period token or an explicit range into a concrete window.

    Tokens are computed relative to ``now`` (defaults to the current instant) in the
    operational time zone ``tz``. Explicit ranges are validated and used verbatim.
    """
    zone = tz or UTC

    if isinstance(selection, DateRange):
        return _resolve_range(selection, zone)

    token = parse_token(selection)
    reference = _localize(now, zone) if now is not None else datetime.now(zone)

    match token:
        case PeriodToken.WEEKLY:
            return _weekly(reference)
        case PeriodToken.MONTHLY:
            return _monthly(reference)
        case PeriodToken.QUARTERLY:
            return _quarterly(reference)
        case PeriodToken.YEARLY:
            return _yearly(reference)
        case _:
            assert_never(token)


def _localize(moment: datetime, zone: tzinfo) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=zone)
    return moment.astimezone(zone)


def _midnight(year: int, month: int, day: int, zone: tzinfo | None) -> datetime:
    return datetime(year, month, day, tzinfo=zone)


def _month_label(moment: datetime) -> str:
    return f"{calendar.month_name[moment.month]} {moment.year}"


def _next_month(moment: datetime) -> datetime:
    if moment.month == 12:
        return _midnight(moment.year + 1, 1, 1, moment.tzinfo)
    return _midnight(moment.year, moment.month + 1, 1, moment.tzinfo)


def _weekly(reference: datetime) -> ResolvedPeriod:
    # Operational weeks start on Sunday; weekday() counts from Monday == 0.
    days_since_sunday = (reference.weekday() + 1) % 7
    sunday = reference - timedelta(days=days_since_sunday)
    start = _midnight(sunday.year, sunday.month, sunday.day, reference.tzinfo)
    return ResolvedPeriod(start=start, end=start + timedelta(days=7), label=CURRENT_WEEK_LABEL)


def _monthly(reference: datetime) -> ResolvedPeriod:
    start = _midnight(reference.year, reference.month, 1, reference.tzinfo)
    return ResolvedPeriod(start=start, end=_next_month(start), label=_month_label(start))


def _quarterly(reference: datetime) -> ResolvedPeriod:
    quarter = (reference.month - 1) // 3
    start = _midnight(reference.year, quarter * 3 + 1, 1, reference.tzinfo)
    if quarter == 3:
        end = _midnight(reference.year + 1, 1, 1, reference.tzinfo)
    else:
        end = _midnight(reference.year, quarter * 3 + 4, 1, reference.tzinfo)
    return ResolvedPeriod(start=start, end=end, label=f"Q{quarter + 1} {reference.year}")


def _yearly(reference: datetime) -> ResolvedPeriod:
    start = _midnight(reference.year, 1, 1, reference.tzinfo)
    end = _midnight(reference.year + 1, 1, 1, reference.tzinfo)
    return ResolvedPeriod(start=start, end=end, label=f"Year {reference.year}")


def _resolve_range(selection: DateRange, zone: tzinfo) -> ResolvedPeriod:
    if selection.start is None or selection.end is None:
        raise InvalidPeriodError("An explicit period needs both start and end")

    start = selection.start if selection.start.tzinfo else selection.start.replace(tzinfo=zone)
    end = selection.end if selection.end.tzinfo else selection.end.replace(tzinfo=zone)
    if start >= end:
        raise InvalidPeriodError(
            f"Period start {start.isoformat()} must be before end {end.isoformat()}"
        )
    return ResolvedPeriod(start=start, end=end, label=CUSTOM_PERIOD_LABEL)


def split_period(
    period: ResolvedPeriod, granularity: Granularity | str = Granularity.WHOLE
) -> list[ResolvedPeriod]:
    """Cut ``period`` into consecutive half-open buckets.

    Weekly buckets are 7-day slices counted from the period start ("Week 1", ...),
    monthly buckets follow calendar months; the last bucket is clipped to ``end``.
    """
    granularity = Granularity(granularity)
    if granularity is Granularity.WHOLE:
        return [period]

    buckets: list[ResolvedPeriod] = []
    cursor = period.start
    index = 1
    while cursor < period.end:
        if granularity is Granularity.WEEKLY:
            boundary = cursor + timedelta(days=7)
            label = f"Week {index}"
        else:
            boundary = _next_month(cursor)
            label = f"{calendar.month_abbr[cursor.month]} {cursor.year}"
        bucket_end = min(boundary, period.end)
        buckets.append(ResolvedPeriod(start=cursor, end=bucket_end, label=label))
        cursor = bucket_end
        index += 1
    return buckets
