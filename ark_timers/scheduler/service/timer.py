"""Tick handling for the timer scheduler.

Compares the current time with every timer, fires threshold alerts and
marks timers expired. Also provides an asyncio ticker for hosts that do not
drive ``tick`` from their own UI timer.
"""
import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Callable

from loguru import logger

from ..models import TimerEntry
from ..schedule import format_remaining, now, urgency
from ..thresholds import AlertThresholds
from ..types import TimerDisplay, TimerStatus
from .events import emit_alert_fired, emit_timer_expired

if TYPE_CHECKING:
    from .service import TimerScheduler

logger = logger.bind(module="scheduler.timer")


def match_threshold(
    entry: TimerEntry,
    remaining: float,
    thresholds: AlertThresholds,
    window: float,
) -> int | None:
    """Find the threshold index to fire for ``entry`` on this tick.

    Scans unfired thresholds from furthest to nearest expiry and returns the
    first whose value is within ``window`` seconds of ``remaining``.
    """
    if remaining < 0:
        return None
    for index, seconds in enumerate(thresholds):
        if index in entry.fired_thresholds:
            continue
        if abs(remaining - seconds) <= window:
            return index
    return None


def tick_entry(
    service: "TimerScheduler",
    entry: TimerEntry,
    current: datetime,
) -> TimerDisplay:
    """Advance a single timer to ``current``."""
    remaining = entry.remaining_seconds(current)

    if remaining < 0:
        if entry.is_active:
            entry.status = TimerStatus.EXPIRED
            logger.info(f"Timer {entry.id} '{entry.name}' expired")
            emit_timer_expired(service.events, entry, current)
    elif entry.is_active:
        thresholds = service.state.thresholds
        index = match_threshold(entry, remaining, thresholds, service.state.alert_window)
        if index is not None:
            entry.fired_thresholds.add(index)
            entry.status = TimerStatus.ALERTING
            logger.debug(
                f"Timer {entry.id} alert {index} ({thresholds[index]}s), "
                f"remaining {remaining:.2f}s"
            )
            emit_alert_fired(service.events, entry, index, thresholds[index], current)

    return TimerDisplay(
        entry_id=entry.id,
        remaining_seconds=remaining,
        remaining_text=format_remaining(remaining),
        urgency=urgency(remaining),
    )


def run_tick(service: "TimerScheduler", current: datetime) -> list[TimerDisplay]:
    """Advance every timer to ``current``.

    Returns:
        Display values in collection order
    """
    service.state.last_tick_at = current
    # Sinks may remove timers while handling an alert
    return [tick_entry(service, entry, current) for entry in list(service.state.entries)]


class Ticker:
    """Calls ``scheduler.tick(clock())`` every ``interval`` seconds on the event loop."""

    def __init__(
        self,
        scheduler: "TimerScheduler",
        interval: float = 1.0,
        clock: Callable[[], datetime] = now,
        on_tick: Callable[[list[TimerDisplay]], None] | None = None,
    ):
        if interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {interval}")
        self.scheduler = scheduler
        self.interval = interval
        self.clock = clock
        self.on_tick = on_tick
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.running:
            logger.warning("Ticker already running")
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Stop ticking and wait for the loop to exit."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _loop(self) -> None:
        logger.info(f"Ticker started, interval {self.interval}s")
        try:
            while True:
                try:
                    displays = self.scheduler.tick(self.clock())
                    self.ticks += 1
                    if self.on_tick is not None:
                        self.on_tick(displays)
                except Exception as e:
                    logger.error(f"Tick error: {e}")
                await asyncio.sleep(self.interval)
        except asyncio.CancelledError:
            logger.info("Ticker stopped")
            raise
