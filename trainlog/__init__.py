"""trainlog: Performance Management Chart core for endurance training logs."""

__version__ = "0.1.0"
