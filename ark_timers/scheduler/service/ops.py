"""Core operations for the timer scheduler.

Contains the business logic for maintaining the time-ordered entry list.
Every function mutates ``state.entries`` in place and keeps it sorted.
Events are stamped with caller supplied time (the last tick when no time
is passed), never the system clock.
"""
import bisect
from datetime import datetime, timedelta
from typing import Iterable

from loguru import logger

from ..models import TimerEntry, TimerCreate
from ..types import TimerStatus, SchedulerStatus
from .events import EventEmitter, emit_collection_changed
from .state import TimerSchedulerState

logger = logger.bind(module="scheduler.ops")


def _sort_key(entry: TimerEntry) -> datetime:
    return entry.target_time


def insert_ordered(entries: list[TimerEntry], entry: TimerEntry) -> int:
    """Insert after every entry with the same or an earlier target time.

    Returns:
        Index the entry was inserted at
    """
    index = bisect.bisect_right(entries, entry.target_time, key=_sort_key)
    entries.insert(index, entry)
    return index


def find_index(entries: list[TimerEntry], entry_id: str) -> int | None:
    for i, entry in enumerate(entries):
        if entry.id == entry_id:
            return i
    return None


def add_timer(
    state: TimerSchedulerState,
    events: EventEmitter,
    timer_create: TimerCreate,
) -> TimerEntry:
    """Add a new timer in time order.

    Args:
        state: Scheduler state
        events: Event emitter
        timer_create: Timer creation request

    Returns:
        Created entry
    """
    entry = TimerEntry(
        name=timer_create.name,
        group=timer_create.group,
        target_time=timer_create.target_time,
        subject_id=timer_create.subject_id,
        custom_sound=timer_create.custom_sound,
    )

    position = insert_ordered(state.entries, entry)

    emit_collection_changed(events, state.last_tick_at, {"added": entry.id})

    logger.info(f"Added timer {entry.id} '{entry.name}' at position {position}")
    return entry


def remove_timers(
    state: TimerSchedulerState,
    events: EventEmitter,
    entry_ids: Iterable[str],
    now: datetime | None = None,
) -> int:
    """Remove timers by id. Unknown ids are ignored.

    Emits a single collection-changed event if anything was removed,
    stamped with ``now`` or else the time of the last tick.

    Returns:
        Number of timers removed
    """
    wanted = set(entry_ids)
    kept: list[TimerEntry] = []
    removed: list[TimerEntry] = []
    for entry in state.entries:
        if entry.id in wanted:
            entry.status = TimerStatus.REMOVED
            removed.append(entry)
        else:
            kept.append(entry)

    if not removed:
        return 0

    state.entries[:] = kept
    emit_collection_changed(events, now or state.last_tick_at, {"removed": [e.id for e in removed]})

    logger.info(f"Removed {len(removed)} timer(s)")
    return len(removed)


def remove_expired(
    state: TimerSchedulerState,
    events: EventEmitter,
    now: datetime,
) -> int:
    """Remove every timer whose target time is strictly before ``now``.

    Returns:
        Number of timers removed
    """
    expired_ids = [e.id for e in state.entries if e.target_time < now]
    if not expired_ids:
        return 0
    return remove_timers(state, events, expired_ids, now)


def adjust_all_by_offset(
    state: TimerSchedulerState,
    events: EventEmitter,
    offset: timedelta,
) -> int:
    """Shift every timer by ``offset``.

    Fired thresholds are kept, so nothing fires again retroactively.

    Returns:
        Number of timers shifted
    """
    if not state.entries:
        return 0

    for entry in state.entries:
        entry.target_time += offset

    # Stable sort keeps FIFO order among equal times
    state.entries.sort(key=_sort_key)

    emit_collection_changed(events, state.last_tick_at, {"offset_seconds": offset.total_seconds()})

    logger.info(f"Shifted {len(state.entries)} timer(s) by {offset}")
    return len(state.entries)


def load_entries(
    state: TimerSchedulerState,
    events: EventEmitter,
    entries: Iterable[TimerEntry],
) -> int:
    """Replace the collection with pre-populated entries.

    Returns:
        Number of timers loaded
    """
    loaded = [e for e in entries if e.status != TimerStatus.REMOVED]
    loaded.sort(key=_sort_key)
    state.entries[:] = loaded

    emit_collection_changed(events, state.last_tick_at, {"loaded": len(loaded)})

    logger.info(f"Loaded {len(loaded)} timer(s)")
    return len(loaded)


def toggle_overlay(
    state: TimerSchedulerState,
    events: EventEmitter,
    entry_ids: list[str],
) -> bool | None:
    """Toggle overlay visibility of the given timers together.

    The new flag is the negation of the first known timer's flag.

    Returns:
        The flag applied, or None if no id was known
    """
    by_id = {entry.id: entry for entry in state.entries}
    selected = [by_id[entry_id] for entry_id in entry_ids if entry_id in by_id]
    if not selected:
        return None

    show = not selected[0].visible_in_overlay
    for entry in selected:
        entry.visible_in_overlay = show

    emit_collection_changed(events, state.last_tick_at, {"overlay": show})
    return show


def get_status(state: TimerSchedulerState) -> SchedulerStatus:
    """Get scheduler status.

    Args:
        state: Scheduler state

    Returns:
        Scheduler status
    """
    counts = {status: 0 for status in TimerStatus}
    for entry in state.entries:
        counts[entry.status] += 1

    upcoming = next((e.target_time for e in state.entries if e.is_active), None)

    return SchedulerStatus(
        timers_total=len(state.entries),
        timers_scheduled=counts[TimerStatus.SCHEDULED],
        timers_alerting=counts[TimerStatus.ALERTING],
        timers_expired=counts[TimerStatus.EXPIRED],
        thresholds=state.thresholds.values,
        next_target_time=upcoming,
        last_tick_at=state.last_tick_at,
    )
