"""Core type definitions for the timer scheduler.

This module defines:
- Timer groups (Starving/Wakeup/Birth/Custom)
- Timer status values for the per-entry state machine
- Event and result types passed to notification sinks
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ============== Timer Groups ==============

class TimerGroup(str, Enum):
    """Category of a timer, used for the default alert sound and list grouping."""
    STARVING = "Starving"
    WAKEUP = "Wakeup"
    BIRTH = "Birth"
    CUSTOM = "Custom"

    @classmethod
    def parse(cls, value: "str | TimerGroup") -> "TimerGroup | None":
        """Return the matching group, or None for free-text groups."""
        if isinstance(value, TimerGroup):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def group_label(group: "str | TimerGroup") -> str:
    """Display label of a group, whether it is a known tag or free text."""
    if isinstance(group, TimerGroup):
        return group.value
    return str(group)


# ============== Timer Status ==============

class TimerStatus(str, Enum):
    """Status of a single timer entry."""
    SCHEDULED = "scheduled"   # Counting down, no threshold fired yet
    ALERTING = "alerting"     # At least one threshold has fired
    EXPIRED = "expired"       # Target time has passed
    REMOVED = "removed"       # Explicitly removed from the scheduler


class Urgency(str, Enum):
    """How close a timer is to expiry, for presentation layers."""
    NORMAL = "normal"
    SOON = "soon"
    IMMINENT = "imminent"
    FINISHED = "finished"


# ============== Event Types ==============

@dataclass
class TimerEvent:
    """Event emitted by the scheduler."""
    type: str
    entry_id: str
    timestamp: datetime | None
    payload: dict[str, Any] = field(default_factory=dict)


# ============== Result Types ==============

@dataclass
class TimerDisplay:
    """Per-entry presentation value produced by a tick."""
    entry_id: str
    remaining_seconds: float
    remaining_text: str
    urgency: Urgency

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_id": self.entry_id,
            "remaining_seconds": self.remaining_seconds,
            "remaining_text": self.remaining_text,
            "urgency": self.urgency.value,
        }


@dataclass
class SchedulerStatus:
    """Status snapshot of the timer scheduler."""
    timers_total: int
    timers_scheduled: int
    timers_alerting: int
    timers_expired: int
    thresholds: tuple[int, ...]
    next_target_time: datetime | None = None
    last_tick_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timers_total": self.timers_total,
            "timers_scheduled": self.timers_scheduled,
            "timers_alerting": self.timers_alerting,
            "timers_expired": self.timers_expired,
            "thresholds": list(self.thresholds),
            "next_target_time": self.next_target_time.isoformat() if self.next_target_time else None,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
        }
