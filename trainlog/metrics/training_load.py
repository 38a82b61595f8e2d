"""Training load series (CTL, ATL, TSB).

This module defines the daily training-load observation consumed by the
projector and the incremental computation that produces it from activities.

Metrics:
- CTL (Chronic Training Load): 42-day exponentially weighted moving average of daily TSS
- ATL (Acute Training Load): 7-day exponentially weighted moving average of daily TSS
- TSB (Training Stress Balance): CTL - ATL

Properties:
- Deterministic: Same input always produces same output
- Gap handling: Days without activities are rest days (TSS = 0), never skipped
- Calendar days only: callers normalise timestamps to a consistent timezone first
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from loguru import logger

from trainlog.metrics.sport_mode import SportMode, normalize_sport_mode

# Canonical time constants (industry defaults)
CTL_TIME_CONSTANT_DAYS = 42
ATL_TIME_CONSTANT_DAYS = 7


@dataclass(frozen=True)
class TrainingLoadPoint:
    """One day of the PMC series.

    For real data the values are produced upstream and passed through
    untouched; ``tsb`` equals ``ctl - atl`` by construction.
    """

    date: date
    tss: float
    ctl: float
    atl: float
    tsb: float


@dataclass(frozen=True)
class ActivityRecord:
    """Activity-level input for daily and weekly roll-ups.

    Numeric fields are optional; a missing value contributes zero.
    """

    date: date
    tss: float | None = None
    duration_seconds: float | None = None
    distance_meters: float | None = None
    avg_power: float | None = None
    elevation_gain_meters: float | None = None
    sport: str | None = None

    @property
    def day(self) -> date:
        """Calendar day of the activity (datetimes are truncated)."""
        if isinstance(self.date, datetime):
            return self.date.date()
        return self.date


@dataclass(frozen=True)
class DailyLoad:
    """Summed load for one calendar day."""

    date: date
    tss: float
    duration_seconds: float


def next_ctl(previous_ctl: float, tss: float) -> float:
    """Advance CTL by one day."""
    return previous_ctl + (tss - previous_ctl) * (1 / CTL_TIME_CONSTANT_DAYS)


def next_atl(previous_atl: float, tss: float) -> float:
    """Advance ATL by one day."""
    return previous_atl + (tss - previous_atl) * (1 / ATL_TIME_CONSTANT_DAYS)


def aggregate_daily_tss(records: Iterable[ActivityRecord]) -> dict[date, DailyLoad]:
    """Sum TSS and duration of all activities per calendar day.

    Args:
        records: Activities in any order

    Returns:
        Mapping of day -> DailyLoad, ordered by day
    """
    totals: dict[date, tuple[float, float]] = {}
    for record in records:
        tss, duration = totals.get(record.day, (0.0, 0.0))
        totals[record.day] = (tss + (record.tss or 0.0), duration + (record.duration_seconds or 0.0))

    return {
        day: DailyLoad(date=day, tss=tss, duration_seconds=duration)
        for day, (tss, duration) in sorted(totals.items())
    }


def build_training_load_series(
    daily_tss: Mapping[date, float],
    end_date: date | None = None,
) -> list[TrainingLoadPoint]:
    """Compute the PMC series from daily TSS.

    The series starts at the first day with a TSS entry (CTL = ATL = 0 before
    it) and runs through ``end_date`` so the final days carry proper decay.
    Missing days are filled with TSS = 0.

    Args:
        daily_tss: Mapping of day -> total TSS for that day
        end_date: Last day of the series (default: last day in ``daily_tss``)

    Returns:
        One TrainingLoadPoint per calendar day, ascending. Empty when there is
        no TSS data or ``end_date`` precedes the first day.
    """
    if not daily_tss:
        return []

    start = min(daily_tss)
    end = end_date if end_date is not None else max(daily_tss)
    if end < start:
        logger.debug(f"[LOAD] end_date={end.isoformat()} precedes first day {start.isoformat()}, empty series")
        return []

    series: list[TrainingLoadPoint] = []
    ctl = 0.0
    atl = 0.0
    current = start
    while current <= end:
        tss = daily_tss.get(current) or 0.0
        ctl = next_ctl(ctl, tss)
        atl = next_atl(atl, tss)
        series.append(TrainingLoadPoint(date=current, tss=tss, ctl=ctl, atl=atl, tsb=ctl - atl))
        current += timedelta(days=1)

    logger.debug(f"[LOAD] Built series of {len(series)} days from {start.isoformat()} to {end.isoformat()}")
    return series


def build_sport_series(
    records: Iterable[ActivityRecord],
    end_date: date | None = None,
) -> dict[SportMode, list[TrainingLoadPoint]]:
    """Compute one independent PMC series per primary sport group.

    Each group's series starts at its own first activity. Without an explicit
    ``end_date`` every group runs through the latest activity day across all
    groups, so the series end together.
    """
    by_sport: dict[SportMode, list[ActivityRecord]] = {}
    for record in records:
        by_sport.setdefault(normalize_sport_mode(record.sport), []).append(record)

    if not by_sport:
        return {}

    if end_date is None:
        end_date = max(record.day for group in by_sport.values() for record in group)

    result: dict[SportMode, list[TrainingLoadPoint]] = {}
    for sport in sorted(by_sport):
        daily = aggregate_daily_tss(by_sport[sport])
        result[sport] = build_training_load_series({day: load.tss for day, load in daily.items()}, end_date)

    logger.debug(f"[LOAD] Built per-sport series for {', '.join(s.value for s in result)}")
    return result


def build_combined_series(
    records: Iterable[ActivityRecord],
    end_date: date | None = None,
) -> list[TrainingLoadPoint]:
    """Compute a single PMC series over all sports from the summed daily TSS."""
    daily = aggregate_daily_tss(records)
    return build_training_load_series({day: load.tss for day, load in daily.items()}, end_date)
