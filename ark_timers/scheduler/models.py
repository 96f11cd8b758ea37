"""Data models for timer entries."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
import uuid

from .types import TimerGroup, TimerStatus, group_label


@dataclass
class TimerEntry:
    """A single scheduled alert.

    ``subject_id`` is an opaque key of an external object (e.g. a tracked
    creature). The scheduler never owns that object; hosts resolve it through
    the lookup injected into the scheduler.
    """
    # Identity
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    group: str = TimerGroup.CUSTOM.value

    # Schedule
    target_time: datetime = field(default_factory=datetime.now)

    # Presentation
    subject_id: str | None = None
    custom_sound: str | None = None
    visible_in_overlay: bool = False

    # Runtime state
    fired_thresholds: set[int] = field(default_factory=set)
    status: TimerStatus = TimerStatus.SCHEDULED

    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        self.group = group_label(self.group)

    @property
    def timer_group(self) -> TimerGroup | None:
        """Known group tag, or None for free-text groups."""
        return TimerGroup.parse(self.group)

    @property
    def is_active(self) -> bool:
        return self.status in (TimerStatus.SCHEDULED, TimerStatus.ALERTING)

    def remaining_seconds(self, now: datetime) -> float:
        return (self.target_time - now).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "group": self.group,
            "target_time": self.target_time.isoformat(),
            "subject_id": self.subject_id,
            "custom_sound": self.custom_sound,
            "visible_in_overlay": self.visible_in_overlay,
            "fired_thresholds": sorted(self.fired_thresholds),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TimerEntry":
        """Create from dictionary.

        Raises:
            ValueError: if ``target_time`` is missing or malformed, or the
                status is unknown.
        """
        if not data.get("target_time"):
            raise ValueError("Timer entry has no target_time")

        entry = cls(
            id=data.get("id") or str(uuid.uuid4()),
            name=data.get("name", ""),
            group=data.get("group") or TimerGroup.CUSTOM.value,
            target_time=datetime.fromisoformat(data["target_time"]),
            subject_id=data.get("subject_id"),
            custom_sound=data.get("custom_sound"),
            visible_in_overlay=bool(data.get("visible_in_overlay", False)),
            fired_thresholds={int(i) for i in data.get("fired_thresholds", [])},
            status=TimerStatus(data.get("status", "scheduled")),
        )

        if data.get("created_at"):
            entry.created_at = datetime.fromisoformat(data["created_at"])

        return entry


@dataclass
class TimerCreate:
    """Request to create a new timer."""
    name: str
    target_time: datetime
    subject_id: str | None = None
    group: str = TimerGroup.CUSTOM.value
    custom_sound: str | None = None
