"""Sport mode mapping.

Every activity type variation maps onto one of three primary sport groups.
PMC series are kept per group, so walks count towards running load and
virtual rides towards cycling load.
"""

from __future__ import annotations

from enum import StrEnum


class SportMode(StrEnum):
    """Primary sport groups."""

    RUNNING = "running"
    CYCLING = "cycling"
    SWIMMING = "swimming"


DEFAULT_SPORT_MODE = SportMode.CYCLING

_SPORT_GROUPS: dict[SportMode, tuple[str, ...]] = {
    SportMode.RUNNING: (
        "running",
        "run",
        "walk",
        "walking",
        "hike",
        "hiking",
        "trail_run",
        "trailrun",
        "virtual_run",
        "virtualrun",
        "treadmill",
        "treadmill_running",
        "train_running",
    ),
    SportMode.CYCLING: (
        "cycling",
        "ride",
        "virtual_ride",
        "virtualride",
        "e_bike_ride",
        "ebikeride",
        "e_mountain_bike_ride",
        "mountain_bike_ride",
        "mountainbikeride",
        "gravel_ride",
        "gravelride",
        "handcycle",
    ),
    SportMode.SWIMMING: (
        "swimming",
        "swim",
        "pool_swim",
        "open_water_swim",
        "lap_swimming",
    ),
}

_SPORT_MODE_MAP: dict[str, SportMode] = {
    variation: mode for mode, variations in _SPORT_GROUPS.items() for variation in variations
}


def normalize_sport_mode(sport: str | None) -> SportMode:
    """Map an activity type to its primary sport group.

    Args:
        sport: Activity type as reported by the source (e.g. "VirtualRide", "walk")

    Returns:
        The primary sport group. Missing or unknown types fall back to cycling.
    """
    if not sport:
        return DEFAULT_SPORT_MODE
    return _SPORT_MODE_MAP.get(sport.strip().lower(), DEFAULT_SPORT_MODE)


def sport_variations(mode: SportMode) -> list[str]:
    """All activity type strings that belong to a sport group."""
    return list(_SPORT_GROUPS.get(mode, ()))


def belongs_to_sport_group(sport: str | None, mode: SportMode) -> bool:
    if not sport:
        return False
    return normalize_sport_mode(sport) == mode
