"""Error types for PMC precondition violations.

Missing or empty data is never an error in the metrics core: empty series
project to zeros and missing numeric fields contribute nothing. These types
cover caller mistakes only.
"""

from datetime import date


class InvalidWindowError(ValueError):
    """Raised when a date window starts after it ends."""

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(f"Window start {start.isoformat()} is after window end {end.isoformat()}")


class ProjectionHorizonError(ValueError):
    """Raised when a projection reaches further past its anchor than allowed.

    Attributes:
        days: Requested number of decay days
        limit: Configured maximum
    """

    def __init__(self, days: int, limit: int):
        self.days = days
        self.limit = limit
        super().__init__(f"Projection of {days} days exceeds the maximum of {limit} days")
