"""Training load metrics: PMC projection, roll-ups and status bands."""

from trainlog.metrics.projection import PMCProjector, PMCValues, project
from trainlog.metrics.status import TrainingStatus, classify
from trainlog.metrics.training_load import ActivityRecord, TrainingLoadPoint
from trainlog.metrics.weekly_aggregation import WeekSummary, aggregate_week

__all__ = [
    "ActivityRecord",
    "PMCProjector",
    "PMCValues",
    "TrainingLoadPoint",
    "TrainingStatus",
    "WeekSummary",
    "aggregate_week",
    "classify",
    "project",
]
