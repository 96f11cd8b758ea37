"""Main TimerScheduler class.

This is the unified entry point for all timer operations. It keeps the
timers in ascending time order, advances them on an externally driven tick
and notifies subscribed sinks. It never reads the system clock by itself and
provides no internal locking: all calls are expected from one thread of
control (e.g. the UI thread or a single asyncio loop).
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Iterable

from loguru import logger

from ..models import TimerEntry, TimerCreate
from ..thresholds import AlertThresholds, remap_fired
from ..types import TimerDisplay, TimerEvent, TimerGroup, SchedulerStatus
from .state import DEFAULT_ALERT_WINDOW, SubjectLookup, TimerSchedulerDeps, TimerSchedulerState
from .events import EventEmitter, NotificationSink, SinkHandler
from . import ops
from . import timer

logger = logger.bind(module="scheduler.service")


class TimerScheduler:
    """Time-ordered collection of timers with threshold alerts.

    Example:
        scheduler = TimerScheduler(thresholds=[30, 10])
        scheduler.add_sink(overlay)
        entry_id = scheduler.add_timer("Rex wakeup", now + timedelta(minutes=5), group="Wakeup")
        scheduler.tick(datetime.now())  # called about once per second by the host
    """

    def __init__(
        self,
        thresholds: Iterable[int] | AlertThresholds | None = None,
        alert_window: float = DEFAULT_ALERT_WINDOW,
        subject_lookup: SubjectLookup | None = None,
    ):
        """Initialize the scheduler.

        Args:
            thresholds: Seconds before expiry to alert at (sanitized)
            alert_window: Half-width in seconds of the match window around
                each threshold
            subject_lookup: Resolves an entry's subject_id to a host object
        """
        if alert_window <= 0:
            raise ValueError(f"Alert window must be positive, got {alert_window}")

        self.events = EventEmitter()
        self.deps = TimerSchedulerDeps(subject_lookup=subject_lookup)
        self.state = TimerSchedulerState(alert_window=alert_window)
        self._sink_handlers: dict[int, SinkHandler] = {}

        if thresholds is not None:
            self.set_thresholds(thresholds)

    # ============== Timer Management ==============

    def add_timer(
        self,
        name: str,
        target_time: datetime,
        subject_id: str | None = None,
        group: str | TimerGroup = TimerGroup.CUSTOM,
        custom_sound: str | None = None,
    ) -> str:
        """Add a new timer.

        Args:
            name: Display label
            target_time: Time the timer expires
            subject_id: Optional identity of an external object
            group: Timer group, selects the default sound
            custom_sound: Optional sound file overriding the group default

        Returns:
            ID of the created timer
        """
        entry = ops.add_timer(
            self.state,
            self.events,
            TimerCreate(
                name=name,
                target_time=target_time,
                subject_id=subject_id,
                group=group,
                custom_sound=custom_sound,
            ),
        )
        return entry.id

    def remove_timer(self, entry_id: str) -> bool:
        """Remove a timer. Unknown ids are a no-op.

        Returns:
            True if the timer was removed
        """
        return ops.remove_timers(self.state, self.events, [entry_id]) > 0

    def remove_timers(self, entry_ids: Iterable[str]) -> int:
        """Remove several timers with a single collection-changed event.

        Returns:
            Number of timers removed
        """
        return ops.remove_timers(self.state, self.events, entry_ids)

    def remove_expired(self, now: datetime) -> int:
        """Remove all timers with a target time before ``now``.

        Returns:
            Number of timers removed
        """
        return ops.remove_expired(self.state, self.events, now)

    def adjust_all_by_offset(self, offset: timedelta) -> int:
        """Shift every timer's target time by ``offset``.

        Returns:
            Number of timers shifted
        """
        return ops.adjust_all_by_offset(self.state, self.events, offset)

    def set_overlay_visibility(self, entry_ids: list[str]) -> bool | None:
        """Toggle overlay visibility of the selected timers.

        Returns:
            The flag applied, or None if no id was known
        """
        return ops.toggle_overlay(self.state, self.events, entry_ids)

    # ============== Ticking ==============

    def tick(self, now: datetime) -> list[TimerDisplay]:
        """Advance all timers to ``now``, firing alerts and expiries.

        Returns:
            Display values for every timer, in time order
        """
        return timer.run_tick(self, now)

    # ============== Thresholds ==============

    @property
    def thresholds(self) -> AlertThresholds:
        return self.state.thresholds

    def set_thresholds(self, values: Iterable[int] | AlertThresholds) -> AlertThresholds:
        """Replace the alert thresholds.

        Negative values are dropped, duplicates collapse, the order becomes
        descending and an empty list becomes ``(0,)``. Fired-threshold marks
        follow their seconds value into the new list, so a threshold that
        already fired for a timer never fires again. Marks for seconds that
        are no longer configured are dropped.

        Returns:
            Effective thresholds
        """
        if not isinstance(values, AlertThresholds):
            values = AlertThresholds.from_values(values)
        return self._apply_thresholds(values)

    def set_thresholds_csv(self, text: str) -> AlertThresholds:
        """Replace the alert thresholds from free text such as ``"60, 10, 0"``.

        Text without a parseable number keeps the current thresholds.
        """
        return self._apply_thresholds(AlertThresholds.from_csv(text, self.state.thresholds))

    @property
    def thresholds_csv(self) -> str:
        return self.state.thresholds.to_csv()

    def _apply_thresholds(self, thresholds: AlertThresholds) -> AlertThresholds:
        previous = self.state.thresholds
        if thresholds != previous:
            for entry in self.state.entries:
                entry.fired_thresholds = remap_fired(entry.fired_thresholds, previous, thresholds)
            logger.info(f"Alert thresholds set to {thresholds.to_csv()}")
        self.state.thresholds = thresholds
        return thresholds

    # ============== Queries ==============

    @property
    def entries(self) -> list[TimerEntry]:
        """Timers in ascending time order (a copy of the list)."""
        return list(self.state.entries)

    def __len__(self) -> int:
        return len(self.state.entries)

    def get(self, entry_id: str) -> TimerEntry | None:
        """Get a timer by ID."""
        index = ops.find_index(self.state.entries, entry_id)
        return self.state.entries[index] if index is not None else None

    def overlay_entries(self) -> list[TimerEntry]:
        """Timers flagged for the overlay, in time order."""
        return [e for e in self.state.entries if e.visible_in_overlay]

    def resolve_subject(self, entry: TimerEntry) -> Any:
        """Resolve the entry's subject through the injected lookup.

        Returns:
            The host object, or None without subject or lookup
        """
        if entry.subject_id is None or self.deps.subject_lookup is None:
            return None
        return self.deps.subject_lookup(entry.subject_id)

    def status(self) -> SchedulerStatus:
        """Get scheduler status."""
        return ops.get_status(self.state)

    # ============== Bulk Load / Export ==============

    def load_entries(self, entries: Iterable[TimerEntry | dict[str, Any]]) -> int:
        """Replace all timers with a previously exported collection.

        Returns:
            Number of timers loaded
        """
        loaded = [e if isinstance(e, TimerEntry) else TimerEntry.from_dict(e) for e in entries]
        return ops.load_entries(self.state, self.events, loaded)

    def export_entries(self) -> list[dict[str, Any]]:
        """Snapshot all timers as dicts, in time order."""
        return [entry.to_dict() for entry in self.state.entries]

    # ============== Event Handling ==============

    def on_event(self, handler: Callable[[TimerEvent], None]) -> None:
        """Register a raw event handler."""
        self.events.add_handler(handler)

    def off_event(self, handler: Callable[[TimerEvent], None]) -> None:
        """Unregister a raw event handler."""
        self.events.remove_handler(handler)

    def add_sink(self, sink: NotificationSink) -> None:
        """Subscribe a NotificationSink. Sinks are notified in subscription order."""
        if id(sink) in self._sink_handlers:
            return
        handler = SinkHandler(sink, self.get)
        self._sink_handlers[id(sink)] = handler
        self.events.add_handler(handler)

    def remove_sink(self, sink: NotificationSink) -> None:
        """Unsubscribe a NotificationSink."""
        handler = self._sink_handlers.pop(id(sink), None)
        if handler is not None:
            self.events.remove_handler(handler)
