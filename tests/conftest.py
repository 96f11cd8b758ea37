"""Shared fixtures for timer scheduler tests."""
from datetime import datetime

import pytest

from ark_timers.scheduler import TimerScheduler


T0 = datetime(2024, 5, 1, 12, 0, 0)


class RecordingSink:
    """NotificationSink that records every call."""

    def __init__(self):
        self.changes = 0
        self.alerts: list[tuple[str, int]] = []
        self.expired: list[str] = []

    def on_collection_changed(self) -> None:
        self.changes += 1

    def on_alert_fired(self, entry, threshold_index: int) -> None:
        self.alerts.append((entry.id, threshold_index))

    def on_timer_expired(self, entry) -> None:
        self.expired.append(entry.id)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def scheduler(sink) -> TimerScheduler:
    s = TimerScheduler(thresholds=[30, 10])
    s.add_sink(sink)
    return s
