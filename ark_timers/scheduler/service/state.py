"""State management for the timer scheduler.

Contains dependency injection and runtime state management.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from ..models import TimerEntry
from ..thresholds import AlertThresholds

# Default half-width of the match window around each threshold, in seconds
DEFAULT_ALERT_WINDOW = 0.8

SubjectLookup = Callable[[str], Any]


@dataclass
class TimerSchedulerDeps:
    """Dependencies for the timer scheduler.

    ``subject_lookup`` resolves an entry's ``subject_id`` to the host's
    domain object (e.g. a creature); it may return None.
    """
    subject_lookup: SubjectLookup | None = None


@dataclass
class TimerSchedulerState:
    """Runtime state of the timer scheduler."""
    # Always sorted ascending by target_time, ties in insertion order
    entries: list[TimerEntry] = field(default_factory=list)
    thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    alert_window: float = DEFAULT_ALERT_WINDOW
    last_tick_at: datetime | None = None
