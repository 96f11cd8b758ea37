"""Time utilities for timers.

Remaining-time formatting, urgency levels and the quick-add presets of the
timer panel.
"""
from datetime import datetime, timedelta

from .types import Urgency


def now() -> datetime:
    """Get the current local time."""
    return datetime.now()


# Quick-add buttons: each click extends the pending duration
QUICK_ADD_PRESETS: dict[str, timedelta] = {
    "+1 m": timedelta(minutes=1),
    "+5 m": timedelta(minutes=5),
    "+20 m": timedelta(minutes=20),
    "+1 h": timedelta(hours=1),
    "+5 h": timedelta(hours=5),
    "+1 d": timedelta(days=1),
}


def target_from_now(current: datetime, *offsets: "timedelta | str") -> datetime:
    """Compute a target time from ``current`` plus durations or preset labels.

    Args:
        current: Reference time
        offsets: timedelta values or keys of QUICK_ADD_PRESETS

    Raises:
        KeyError: if a preset label is unknown
    """
    total = timedelta()
    for offset in offsets:
        if isinstance(offset, str):
            offset = QUICK_ADD_PRESETS[offset]
        total += offset
    return current + total


def format_remaining(seconds: float) -> str:
    """Format remaining seconds as ``d:hh:mm:ss``, or ``Finished``."""
    if seconds <= 0:
        return "Finished"
    whole = int(seconds)
    days, rest = divmod(whole, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{days}:{hours:02d}:{minutes:02d}:{secs:02d}"


def urgency(seconds: float) -> Urgency:
    """Classify remaining seconds for highlighting."""
    if seconds < 0:
        return Urgency.FINISHED
    if 10 < seconds < 60:
        return Urgency.SOON
    if seconds < 11:
        return Urgency.IMMINENT
    return Urgency.NORMAL
