"""Headless timer host.

Loads the saved timers, ticks them once per interval, logs alerts and saves
the collection whenever it changes.

Run:
    python -m ark_timers.main
"""
import asyncio
import signal
from datetime import datetime

from loguru import logger

from .config import Settings
from .logging_setup import configure_logging
from .scheduler import (
    AlertSoundSink,
    JsonTimerStore,
    OverlaySink,
    SoundSelector,
    Ticker,
    TimerEntry,
    TimerScheduler,
)

logger = logger.bind(module="main")


class PersistSink:
    """Saves the collection after every change."""

    def __init__(self, scheduler: TimerScheduler, store: JsonTimerStore):
        self.scheduler = scheduler
        self.store = store
        self._pending: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def on_collection_changed(self) -> None:
        task = asyncio.create_task(
            self.store.save(self.scheduler.export_entries(), self.scheduler.thresholds)
        )
        self._pending.add(task)
        task.add_done_callback(self._save_done)

    def on_alert_fired(self, entry: TimerEntry, threshold_index: int) -> None:
        pass

    def _save_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Failed to save timers to {self.store.json_path}: {error}")

    async def flush(self) -> None:
        """Wait for background saves, then write the current collection."""
        if self._pending:
            # Failures were already logged by the done callback
            await asyncio.gather(*self._pending, return_exceptions=True)
        await self.store.save(self.scheduler.export_entries(), self.scheduler.thresholds)


def log_sound(sound: str) -> None:
    logger.info(f"Playing alert sound: {sound}")


def log_overlay(timers: list[TimerEntry]) -> None:
    logger.debug(f"Overlay shows {len(timers)} timer(s)")


async def build_scheduler(settings: Settings, store: JsonTimerStore) -> TimerScheduler:
    """Create a scheduler from settings and the saved collection."""
    thresholds = await store.load_thresholds() or settings.alert_thresholds
    scheduler = TimerScheduler(
        thresholds=thresholds,
        alert_window=settings.effective_alert_window,
    )
    scheduler.load_entries(await store.load())
    return scheduler


async def run(settings: Settings) -> None:
    """Run the host until interrupted."""
    store = JsonTimerStore(settings.timers_path)
    scheduler = await build_scheduler(settings, store)

    selector = SoundSelector(settings.sounds_dir, settings.group_sounds)
    scheduler.add_sink(AlertSoundSink(selector, player=log_sound))
    scheduler.add_sink(OverlaySink(scheduler, on_refresh=log_overlay))
    persist = PersistSink(scheduler, store)
    scheduler.add_sink(persist)

    removed = scheduler.remove_expired(datetime.now())
    if removed:
        logger.info(f"Dropped {removed} expired timer(s) on startup")

    ticker = Ticker(scheduler, interval=settings.tick_interval)
    ticker.start()
    logger.info(
        f"Tracking {len(scheduler)} timer(s), alerts at {scheduler.thresholds_csv}s "
        f"before expiry"
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            pass

    try:
        await stop.wait()
    finally:
        await ticker.stop()
        await persist.flush()
        logger.info("Timer host stopped")


def main() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
