"""Timer scheduler demo.

This example demonstrates:
- Adding timers with groups, subjects and custom sounds
- Threshold alerts while ticking with a simulated clock
- Overlay and sound sinks
- Bulk export and reload of the collection
"""
from datetime import timedelta

from loguru import logger

from ark_timers.logging_setup import configure_logging
from ark_timers.scheduler import (
    AlertSoundSink,
    OverlaySink,
    SoundSelector,
    TimerEntry,
    TimerGroup,
    TimerScheduler,
    now,
    target_from_now,
)

creatures = {"c-17": "Rex (female, lvl 150)"}


def play(sound: str) -> None:
    logger.info(f"Alert sound: {sound}")


def main() -> None:
    configure_logging("DEBUG")
    start = now()

    scheduler = TimerScheduler(thresholds=[30, 10, 0], subject_lookup=creatures.get)
    selector = SoundSelector("~/.ark_timers/sounds", {TimerGroup.BIRTH: "birth.wav"})
    scheduler.add_sink(AlertSoundSink(selector, player=play))
    overlay = OverlaySink(scheduler)
    scheduler.add_sink(overlay)

    birth = scheduler.add_timer("Rex birth", start + timedelta(seconds=35),
                                subject_id="c-17", group=TimerGroup.BIRTH)
    scheduler.add_timer("Check the fridge", target_from_now(start, "+1 m"))
    scheduler.set_overlay_visibility([birth])

    entry = scheduler.get(birth)
    logger.info(f"{entry.name} belongs to {scheduler.resolve_subject(entry)}")

    # Simulate a one-second UI tick
    for second in range(40):
        displays = scheduler.tick(start + timedelta(seconds=second))
        logger.debug(" | ".join(d.remaining_text for d in displays))

    logger.info(f"Overlay shows: {[t.name for t in overlay.timers]}")

    snapshot = scheduler.export_entries()
    restored = TimerScheduler(thresholds=scheduler.thresholds)
    restored.load_entries(TimerEntry.from_dict(d) for d in snapshot)
    logger.info(f"Restored status: {restored.status().to_dict()}")

    removed = restored.remove_expired(start + timedelta(seconds=40))
    logger.info(f"Removed {removed} expired timer(s), {len(restored)} left")


if __name__ == "__main__":
    main()
