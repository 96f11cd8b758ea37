"""Timer scheduling for creature breeding trackers."""

__version__ = "0.1.0"
