"""Event system for the timer scheduler.

Emits events for collection changes, threshold alerts and expiry, and
adapts NotificationSink objects into event handlers.
"""
from datetime import datetime
from typing import Any, Callable, Protocol, runtime_checkable

from loguru import logger

from ..models import TimerEntry
from ..types import TimerEvent

logger = logger.bind(module="scheduler.events")


# Type alias for event handlers
EventHandler = Callable[[TimerEvent], None]


# Event type constants
class EventTypes:
    """Constants for event types."""

    COLLECTION_CHANGED = "timers.changed"
    ALERT_FIRED = "timer.alert"
    TIMER_EXPIRED = "timer.expired"


@runtime_checkable
class NotificationSink(Protocol):
    """Consumer of scheduler notifications (UI list, overlay, sound player).

    ``on_timer_expired(entry)`` is optional and called when present.
    """

    def on_collection_changed(self) -> None:
        ...

    def on_alert_fired(self, entry: TimerEntry, threshold_index: int) -> None:
        ...


class EventEmitter:
    """Event emitter for scheduler events.

    Handlers run synchronously in subscription order.
    """

    def __init__(self):
        self._handlers: list[EventHandler] = []

    def add_handler(self, handler: EventHandler) -> None:
        """Add an event handler."""
        self._handlers.append(handler)

    def remove_handler(self, handler: EventHandler) -> None:
        """Remove an event handler."""
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: TimerEvent) -> None:
        """Emit an event to all handlers."""
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Event handler error on {event.type}: {e}")

    def __len__(self) -> int:
        return len(self._handlers)


class SinkHandler:
    """Event handler dispatching scheduler events to a NotificationSink."""

    def __init__(self, sink: NotificationSink, lookup: Callable[[str], TimerEntry | None]):
        self.sink = sink
        self._lookup = lookup

    def __call__(self, event: TimerEvent) -> None:
        if event.type == EventTypes.COLLECTION_CHANGED:
            self.sink.on_collection_changed()
            return

        entry = event.payload.get("entry") or self._lookup(event.entry_id)
        if entry is None:
            return

        if event.type == EventTypes.ALERT_FIRED:
            self.sink.on_alert_fired(entry, event.payload["threshold_index"])
        elif event.type == EventTypes.TIMER_EXPIRED:
            on_expired = getattr(self.sink, "on_timer_expired", None)
            if on_expired is not None:
                on_expired(entry)


def emit_collection_changed(
    emitter: EventEmitter,
    timestamp: datetime | None,
    payload: dict[str, Any] | None = None,
) -> None:
    """Emit a collection-changed event.

    Args:
        emitter: Event emitter instance
        timestamp: Time of the change, None before the first tick
        payload: Additional event payload (e.g. {"added": id})
    """
    emitter.emit(TimerEvent(
        type=EventTypes.COLLECTION_CHANGED,
        entry_id="",
        timestamp=timestamp,
        payload=payload or {},
    ))


def emit_alert_fired(
    emitter: EventEmitter,
    entry: TimerEntry,
    threshold_index: int,
    threshold_seconds: int,
    timestamp: datetime,
) -> None:
    """Emit a threshold alert for an entry.

    The payload carries the group and custom sound so sinks can pick a
    sound without the scheduler knowing about audio.
    """
    emitter.emit(TimerEvent(
        type=EventTypes.ALERT_FIRED,
        entry_id=entry.id,
        timestamp=timestamp,
        payload={
            "entry": entry,
            "threshold_index": threshold_index,
            "threshold_seconds": threshold_seconds,
            "group": entry.group,
            "custom_sound": entry.custom_sound,
        },
    ))


def emit_timer_expired(
    emitter: EventEmitter,
    entry: TimerEntry,
    timestamp: datetime,
) -> None:
    """Emit an expiry event for an entry."""
    emitter.emit(TimerEvent(
        type=EventTypes.TIMER_EXPIRED,
        entry_id=entry.id,
        timestamp=timestamp,
        payload={"entry": entry, "group": entry.group},
    ))
