"""PMC projection.

Resolves CTL / ATL / TSB for any calendar day from a known daily series:

- A day with its own point returns the stored values unchanged.
- A day after the last known point decays the anchor's values one simulated
  rest day at a time (detraining). CTL falls slowly (42-day constant), ATL
  falls fast (7-day constant), so TSB rises towards CTL during a gap.

Decay is applied per calendar day, matching the incremental definition used
to build the series: a rest day (TSS = 0) multiplies CTL by (1 - 1/42) and ATL
by (1 - 1/7).

All functions are pure. ``PMCProjector`` adds a memo that lives exactly as
long as the series snapshot it was built from.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal

from loguru import logger

from trainlog.metrics.errors import InvalidWindowError, ProjectionHorizonError
from trainlog.metrics.training_load import (
    ATL_TIME_CONSTANT_DAYS,
    CTL_TIME_CONSTANT_DAYS,
    TrainingLoadPoint,
)

CTL_DAILY_DECAY = 1 - 1 / CTL_TIME_CONSTANT_DAYS
ATL_DAILY_DECAY = 1 - 1 / ATL_TIME_CONSTANT_DAYS

BeforeHistory = Literal["last_known", "zero"]


@dataclass(frozen=True)
class PMCValues:
    """CTL / ATL / TSB for one day, real or projected.

    Attributes:
        ctl: Chronic Training Load (fitness)
        atl: Acute Training Load (fatigue)
        tsb: Training Stress Balance (form), always ctl - atl
        projected: False when the values are a stored point (or the empty-series zero)
        anchor_date: Date of the point the values were derived from
    """

    ctl: float
    atl: float
    tsb: float
    projected: bool = False
    anchor_date: date | None = None


@dataclass(frozen=True)
class DailyPMC:
    """PMC values attached to a calendar day."""

    date: date
    values: PMCValues


ZERO = PMCValues(ctl=0.0, atl=0.0, tsb=0.0)


def decay(ctl: float, atl: float, days: int) -> tuple[float, float, float]:
    """Apply ``days`` rest days of decay to CTL and ATL.

    Args:
        ctl: Starting CTL
        atl: Starting ATL
        days: Number of rest days (>= 0)

    Returns:
        ``(ctl, atl, tsb)`` after the decay
    """
    if days < 0:
        raise ValueError(f"days must be >= 0, got {days}")

    for _ in range(days):
        ctl *= CTL_DAILY_DECAY
        atl *= ATL_DAILY_DECAY
    return ctl, atl, ctl - atl


class _DecayMemo:
    """Decayed values per anchor, keyed by target date.

    A new target resumes the walk from the nearest earlier target already
    resolved for the same anchor, so a strip of adjacent weeks walks each gap
    day once. Decay is a plain sequence of multiplications, so resuming yields
    the same floats as walking from the anchor.
    """

    def __init__(self):
        self._targets: dict[date, list[date]] = {}
        self._values: dict[tuple[date, date], tuple[float, float, float]] = {}

    def resolve(self, anchor: TrainingLoadPoint, target_date: date) -> tuple[float, float, float]:
        key = (anchor.date, target_date)
        if key in self._values:
            return self._values[key]

        targets = self._targets.setdefault(anchor.date, [])
        index = bisect_left(targets, target_date)
        if index:
            start_date = targets[index - 1]
            ctl, atl, _ = self._values[(anchor.date, start_date)]
        else:
            start_date = anchor.date
            ctl, atl = anchor.ctl, anchor.atl

        values = decay(ctl, atl, (target_date - start_date).days)
        targets.insert(index, target_date)
        self._values[key] = values
        return values


def _stored(point: TrainingLoadPoint, *, projected: bool) -> PMCValues:
    return PMCValues(ctl=point.ctl, atl=point.atl, tsb=point.tsb, projected=projected, anchor_date=point.date)


def _find_anchor(
    series: Sequence[TrainingLoadPoint],
    dates: Sequence[date],
    target_date: date,
) -> TrainingLoadPoint | None:
    """Latest point dated on or before ``target_date``, None if the target precedes all history."""
    index = bisect_right(dates, target_date)
    if index == 0:
        return None
    return series[index - 1]


def _resolve(
    series: Sequence[TrainingLoadPoint],
    dates: Sequence[date],
    target_date: date,
    before_history: BeforeHistory,
    max_days: int | None,
    memo: _DecayMemo | None = None,
) -> PMCValues:
    if not series:
        return ZERO

    anchor = _find_anchor(series, dates, target_date)

    if anchor is None:
        if before_history == "zero":
            logger.debug(f"[PMC] {target_date.isoformat()} precedes history, returning zeros")
            return ZERO
        anchor = series[-1]

    if anchor.date == target_date:
        return _stored(anchor, projected=False)

    days_since = (target_date - anchor.date).days
    if days_since <= 0:
        # Target precedes the fallback anchor: no backward decay, reuse last known values
        return _stored(anchor, projected=True)

    if max_days is not None and days_since > max_days:
        raise ProjectionHorizonError(days_since, max_days)

    if memo is not None:
        ctl, atl, tsb = memo.resolve(anchor, target_date)
    else:
        ctl, atl, tsb = decay(anchor.ctl, anchor.atl, days_since)

    return PMCValues(ctl=ctl, atl=atl, tsb=tsb, projected=True, anchor_date=anchor.date)


def _sorted_snapshot(series: Sequence[TrainingLoadPoint]) -> tuple[TrainingLoadPoint, ...]:
    # Stable sort keeps the later of two same-day points last, so it wins the lookup
    return tuple(sorted(series, key=lambda point: point.date))


def project(
    series: Sequence[TrainingLoadPoint],
    target_date: date,
    *,
    before_history: BeforeHistory = "last_known",
    max_days: int | None = None,
) -> PMCValues:
    """Resolve CTL / ATL / TSB for ``target_date``.

    Args:
        series: Daily points ordered ascending by date (may be empty)
        target_date: Day to resolve
        before_history: What to do when ``target_date`` precedes every point:
            ``"last_known"`` reuses the final point's values, ``"zero"`` returns zeros
        max_days: Optional cap on the number of decay days

    Returns:
        PMCValues for the day. Empty series resolve to zeros.

    Raises:
        ProjectionHorizonError: If ``max_days`` is set and exceeded
    """
    snapshot = _sorted_snapshot(series)
    dates = [point.date for point in snapshot]
    return _resolve(snapshot, dates, target_date, before_history, max_days)


class PMCProjector:
    """Projector bound to one snapshot of the series.

    Lookups share a memo keyed by ``(anchor_date, target_date)``; a new target
    continues the walk from the closest earlier target resolved against the
    same anchor, so eight adjacent calendar weeks past the last point cost one
    walk in total. Build a new projector whenever the series changes; the memo
    is never shared across snapshots.
    """

    def __init__(
        self,
        series: Sequence[TrainingLoadPoint],
        *,
        before_history: BeforeHistory = "last_known",
        max_days: int | None = None,
    ):
        self._series = _sorted_snapshot(series)
        self._dates = [point.date for point in self._series]
        self._before_history: BeforeHistory = before_history
        self._max_days = max_days
        self._memo = _DecayMemo()

    @property
    def series(self) -> tuple[TrainingLoadPoint, ...]:
        return self._series

    def project(self, target_date: date) -> PMCValues:
        return _resolve(
            self._series,
            self._dates,
            target_date,
            self._before_history,
            self._max_days,
            self._memo,
        )

    def project_range(self, start_date: date, end_date: date) -> list[DailyPMC]:
        """Values for every calendar day from ``start_date`` to ``end_date`` inclusive."""
        if start_date > end_date:
            raise InvalidWindowError(start_date, end_date)

        days = (end_date - start_date).days + 1
        logger.debug(f"[PMC] Projecting {days} days from {start_date.isoformat()} to {end_date.isoformat()}")
        return [
            DailyPMC(date=day, values=self.project(day))
            for day in (start_date + timedelta(days=offset) for offset in range(days))
        ]

    def latest(self) -> TrainingLoadPoint | None:
        """Most recent known point, None for an empty series."""
        return self._series[-1] if self._series else None
