"""Weekly and daily training roll-ups for calendar views.

Groups activities into Monday-aligned weeks (or single days) and attaches the
PMC snapshot for the end of each period. Sums run in input order so the same
records always produce bit-identical totals.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from loguru import logger

from trainlog.metrics.errors import InvalidWindowError
from trainlog.metrics.projection import BeforeHistory, PMCProjector
from trainlog.metrics.training_load import ActivityRecord, TrainingLoadPoint


@dataclass(frozen=True)
class WeekSummary:
    """Totals for one week window plus the PMC values as of its last day.

    Distance and duration are kept in base units (meters, seconds); use the
    convenience properties for display units.
    """

    week_start: date
    week_end: date
    total_tss: float
    total_duration_seconds: float
    total_distance_meters: float
    total_work_kj: float
    total_elevation_meters: float
    activity_count: int
    ctl: float
    atl: float
    tsb: float
    projected: bool

    @property
    def total_distance_km(self) -> float:
        return self.total_distance_meters / 1000

    @property
    def total_duration_hours(self) -> float:
        return self.total_duration_seconds / 3600


@dataclass(frozen=True)
class DaySummary:
    """Totals for a single calendar day plus that day's PMC values."""

    date: date
    total_tss: float
    total_duration_seconds: float
    total_distance_meters: float
    activity_count: int
    ctl: float
    atl: float
    tsb: float
    projected: bool


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def iter_weeks(start_date: date, end_date: date) -> Iterator[tuple[date, date]]:
    """Consecutive Monday-aligned weeks covering ``start_date`` through ``end_date``."""
    if start_date > end_date:
        raise InvalidWindowError(start_date, end_date)

    week_start, week_end = week_bounds(start_date)
    while week_start <= end_date:
        yield week_start, week_end
        week_start += timedelta(days=7)
        week_end += timedelta(days=7)


def _work_kj(record: ActivityRecord) -> float:
    """Mechanical work estimate: average power x duration, in kilojoules."""
    if not record.avg_power or not record.duration_seconds:
        return 0.0
    return record.avg_power * record.duration_seconds / 1000


def _in_window(records: Sequence[ActivityRecord], start: date, end: date) -> list[ActivityRecord]:
    return [record for record in records if start <= record.day <= end]


def _summarize_week(
    records: Sequence[ActivityRecord],
    week_start: date,
    week_end: date,
    projector: PMCProjector,
) -> WeekSummary:
    week_records = _in_window(records, week_start, week_end)

    total_tss = 0.0
    total_duration = 0.0
    total_distance = 0.0
    total_work = 0.0
    total_elevation = 0.0
    for record in week_records:
        total_tss += record.tss or 0.0
        total_duration += record.duration_seconds or 0.0
        total_distance += record.distance_meters or 0.0
        total_work += _work_kj(record)
        total_elevation += record.elevation_gain_meters or 0.0

    pmc = projector.project(week_end)

    return WeekSummary(
        week_start=week_start,
        week_end=week_end,
        total_tss=total_tss,
        total_duration_seconds=total_duration,
        total_distance_meters=total_distance,
        total_work_kj=total_work,
        total_elevation_meters=total_elevation,
        activity_count=len(week_records),
        ctl=pmc.ctl,
        atl=pmc.atl,
        tsb=pmc.tsb,
        projected=pmc.projected,
    )


def aggregate_week(
    records: Sequence[ActivityRecord],
    week_start: date,
    week_end: date,
    series: Sequence[TrainingLoadPoint] = (),
    *,
    before_history: BeforeHistory = "last_known",
    max_days: int | None = None,
) -> WeekSummary:
    """Summarise activities within ``[week_start, week_end]`` (both inclusive).

    Args:
        records: Activities in any date range; only those inside the window count
        week_start: First day of the window (normally a Monday)
        week_end: Last day of the window (normally the following Sunday)
        series: Daily PMC series used for the week's CTL / ATL / TSB snapshot
        before_history: Anchor policy for weeks ending before the series starts
        max_days: Optional cap on decay days from the anchor to ``week_end``

    Returns:
        WeekSummary with totals and the PMC values as of ``week_end``

    Raises:
        InvalidWindowError: If ``week_start`` is after ``week_end``
        ProjectionHorizonError: If ``max_days`` is set and exceeded
    """
    if week_start > week_end:
        raise InvalidWindowError(week_start, week_end)

    projector = PMCProjector(series, before_history=before_history, max_days=max_days)
    return _summarize_week(records, week_start, week_end, projector)


def aggregate_weeks(
    records: Sequence[ActivityRecord],
    start_date: date,
    end_date: date,
    series: Sequence[TrainingLoadPoint] = (),
    *,
    before_history: BeforeHistory = "last_known",
    max_days: int | None = None,
) -> list[WeekSummary]:
    """Summaries for every Monday-aligned week overlapping ``[start_date, end_date]``.

    All weeks share one projector, so weeks past the last known point extend a
    single decay walk instead of restarting it from the anchor each time.
    """
    projector = PMCProjector(series, before_history=before_history, max_days=max_days)
    summaries = [
        _summarize_week(records, week_start, week_end, projector)
        for week_start, week_end in iter_weeks(start_date, end_date)
    ]
    logger.debug(
        f"[WEEKLY] Aggregated {len(records)} activities into {len(summaries)} weeks "
        f"from {start_date.isoformat()} to {end_date.isoformat()}"
    )
    return summaries


def summarize_days(
    records: Sequence[ActivityRecord],
    start_date: date,
    end_date: date,
    series: Sequence[TrainingLoadPoint] = (),
    *,
    before_history: BeforeHistory = "last_known",
    max_days: int | None = None,
) -> list[DaySummary]:
    """Per-day totals and PMC values for every day in ``[start_date, end_date]``."""
    projector = PMCProjector(series, before_history=before_history, max_days=max_days)
    days = projector.project_range(start_date, end_date)

    by_day: dict[date, list[ActivityRecord]] = {}
    for record in _in_window(records, start_date, end_date):
        by_day.setdefault(record.day, []).append(record)

    summaries: list[DaySummary] = []
    for daily in days:
        day_records = by_day.get(daily.date, [])
        summaries.append(
            DaySummary(
                date=daily.date,
                total_tss=sum((record.tss or 0.0 for record in day_records), 0.0),
                total_duration_seconds=sum((record.duration_seconds or 0.0 for record in day_records), 0.0),
                total_distance_meters=sum((record.distance_meters or 0.0 for record in day_records), 0.0),
                activity_count=len(day_records),
                ctl=daily.values.ctl,
                atl=daily.values.atl,
                tsb=daily.values.tsb,
                projected=daily.values.projected,
            )
        )
    return summaries
