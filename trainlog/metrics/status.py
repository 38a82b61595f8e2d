"""Training status bands.

Maps a TSB (form) value onto one of five ordered bands. Bands are evaluated
top-down with inclusive lower bounds; the first match wins:

    tsb > 25            Very Fresh
    5 < tsb <= 25       Fresh
    -10 <= tsb <= 5     Optimal
    -30 <= tsb < -10    Fatigued
    tsb < -30           Very Fatigued

The classification is total: every float maps to exactly one band. NaN fails
every comparison and lands in the last band.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

TrendDirection = Literal["up", "down", "flat"]

# Changes smaller than this are reported as flat
TREND_DEAD_BAND = 1.0


class TrainingStatus(StrEnum):
    VERY_FRESH = "very_fresh"
    FRESH = "fresh"
    OPTIMAL = "optimal"
    FATIGUED = "fatigued"
    VERY_FATIGUED = "very_fatigued"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS: dict[TrainingStatus, str] = {
    TrainingStatus.VERY_FRESH: "Very Fresh",
    TrainingStatus.FRESH: "Fresh",
    TrainingStatus.OPTIMAL: "Optimal",
    TrainingStatus.FATIGUED: "Fatigued",
    TrainingStatus.VERY_FATIGUED: "Very Fatigued",
}

# (status, lower bound, bound is inclusive), evaluated in order
_BANDS: list[tuple[TrainingStatus, float, bool]] = [
    (TrainingStatus.VERY_FRESH, 25.0, False),
    (TrainingStatus.FRESH, 5.0, False),
    (TrainingStatus.OPTIMAL, -10.0, True),
    (TrainingStatus.FATIGUED, -30.0, True),
]


def classify(tsb: float) -> TrainingStatus:
    """Map a TSB value to its training status band."""
    for status, lower, inclusive in _BANDS:
        if tsb > lower or (inclusive and tsb == lower):
            return status
    return TrainingStatus.VERY_FATIGUED


def metric_trend(current: float, previous: float | None) -> TrendDirection | None:
    """Direction of a metric compared with its previous value.

    Returns:
        "up" / "down" for changes of at least one unit, "flat" otherwise,
        None when there is no previous value to compare against
    """
    if previous is None:
        return None
    diff = current - previous
    if abs(diff) < TREND_DEAD_BAND:
        return "flat"
    return "up" if diff > 0 else "down"
