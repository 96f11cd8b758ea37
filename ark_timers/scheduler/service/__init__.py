"""Timer scheduler service package.

This package contains the core scheduler components:
- state.py: State management and dependencies
- ops.py: Collection operations (add, remove, shift, load)
- timer.py: Tick handling and the asyncio ticker
- events.py: Event system and notification sinks
- json_store.py: JSON file persistence for hosts
"""
from .service import TimerScheduler

__all__ = ["TimerScheduler"]
