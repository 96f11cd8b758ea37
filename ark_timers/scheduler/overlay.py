"""Overlay surface fed by scheduler notifications.

The overlay shows the subset of timers flagged ``visible_in_overlay``. It
pulls its own filtered, time-sorted view from the scheduler on every
notification instead of sharing a mutable list with it.
"""
from typing import TYPE_CHECKING, Callable

from loguru import logger

from .models import TimerEntry

if TYPE_CHECKING:
    from .service import TimerScheduler

logger = logger.bind(module="scheduler.overlay")


class OverlaySink:
    """NotificationSink keeping the overlay's timer list in sync."""

    def __init__(
        self,
        scheduler: "TimerScheduler",
        on_refresh: Callable[[list[TimerEntry]], None] | None = None,
    ):
        self.scheduler = scheduler
        self.on_refresh = on_refresh
        self.timers: list[TimerEntry] = []
        self.last_alert: tuple[TimerEntry, int] | None = None
        self.refresh()

    def refresh(self) -> None:
        """Re-pull the overlay subset from the scheduler."""
        self.timers = sorted(self.scheduler.overlay_entries(), key=lambda e: e.target_time)
        if self.on_refresh is not None:
            self.on_refresh(self.timers)

    def on_collection_changed(self) -> None:
        self.refresh()

    def on_alert_fired(self, entry: TimerEntry, threshold_index: int) -> None:
        if entry.visible_in_overlay:
            self.last_alert = (entry, threshold_index)
            logger.debug(f"Overlay alert for {entry.name} (threshold {threshold_index})")
        self.refresh()
