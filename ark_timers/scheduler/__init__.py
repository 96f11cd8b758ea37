"""Timer scheduling core.

This module provides a UI-independent timer scheduler with:
- Time-ordered timer entries grouped by category
- Threshold alerts before each timer's expiry
- Notification sinks for list views, overlays and sound playback
- JSON file persistence for host applications
"""
# Core types
from .types import (
    TimerGroup,
    TimerStatus,
    Urgency,
    TimerEvent,
    TimerDisplay,
    SchedulerStatus,
)

# Models
from .models import TimerEntry, TimerCreate

# Thresholds
from .thresholds import (
    AlertThresholds,
    DEFAULT_THRESHOLDS,
    sanitize_thresholds,
    parse_thresholds_csv,
)

# Time utilities
from .schedule import (
    QUICK_ADD_PRESETS,
    format_remaining,
    target_from_now,
    urgency,
    now,
)

# Service
from .service import TimerScheduler
from .service.events import EventEmitter, EventTypes, NotificationSink
from .service.json_store import JsonTimerStore
from .service.timer import Ticker

# Sinks
from .overlay import OverlaySink
from .sounds import (
    AlertSoundSink,
    SoundSelector,
    DEFAULT_SOUND_NAME,
    GENERIC_ALERT,
    list_custom_sounds,
)

__all__ = [
    # Core types
    "TimerGroup",
    "TimerStatus",
    "Urgency",
    "TimerEvent",
    "TimerDisplay",
    "SchedulerStatus",
    # Models
    "TimerEntry",
    "TimerCreate",
    # Thresholds
    "AlertThresholds",
    "DEFAULT_THRESHOLDS",
    "sanitize_thresholds",
    "parse_thresholds_csv",
    # Time utilities
    "QUICK_ADD_PRESETS",
    "format_remaining",
    "target_from_now",
    "urgency",
    "now",
    # Service
    "TimerScheduler",
    "EventEmitter",
    "EventTypes",
    "NotificationSink",
    "JsonTimerStore",
    "Ticker",
    # Sinks
    "OverlaySink",
    "AlertSoundSink",
    "SoundSelector",
    "DEFAULT_SOUND_NAME",
    "GENERIC_ALERT",
    "list_custom_sounds",
]
