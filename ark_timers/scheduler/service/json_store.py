"""JSON file persistence for timer collections.

Host-side adapter for the scheduler's bulk load/export boundary. Stores the
timers in a human-readable JSON file that users can view and edit.
"""
import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from loguru import logger

from ..models import TimerEntry
from ..thresholds import AlertThresholds

logger = logger.bind(module="scheduler.json_store")


class JsonTimerStore:
    """JSON file-based timer persistence."""

    def __init__(self, json_path: str | Path):
        """Initialize JSON timer store.

        Args:
            json_path: Path to JSON file for storage
        """
        self.json_path = Path(json_path).expanduser()
        self._lock = asyncio.Lock()

    async def load(self) -> list[TimerEntry]:
        """Load timers from the JSON file.

        A missing file is created empty. An unreadable file is logged and
        yields no timers; single malformed records are skipped.
        """
        data = await self._read()
        if data is None:
            return []

        entries: list[TimerEntry] = []
        for position, timer_data in enumerate(data.get("timers") or []):
            try:
                timer_data.pop("target_time_human", None)
                entries.append(TimerEntry.from_dict(timer_data))
            except (AttributeError, ValueError, TypeError) as e:
                logger.warning(f"Skipping malformed timer record #{position}: {e}")

        logger.info(f"Loaded {len(entries)} timers from {self.json_path}")
        return entries

    async def load_thresholds(self) -> AlertThresholds | None:
        """Load the saved alert thresholds, if any."""
        data = await self._read()
        if not data or not data.get("alert_thresholds"):
            return None
        return AlertThresholds.from_csv(data["alert_thresholds"])

    async def save(
        self,
        entries: Iterable[TimerEntry | dict[str, Any]],
        thresholds: AlertThresholds | None = None,
    ) -> None:
        """Write the whole timer collection to the JSON file."""
        timers = [self._to_export_dict(e) for e in entries]
        export_data = {
            "exported_at": datetime.now().isoformat(),
            "total_timers": len(timers),
            "alert_thresholds": thresholds.to_csv() if thresholds else None,
            "timers": timers,
        }

        async with self._lock:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.json_path.with_suffix(self.json_path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(export_data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self.json_path)

        logger.debug(f"Saved {len(timers)} timers to {self.json_path}")

    async def _read(self) -> dict[str, Any] | None:
        async with self._lock:
            if not self.json_path.exists():
                self.json_path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.json_path, "w", encoding="utf-8") as f:
                    json.dump({"total_timers": 0, "timers": []}, f, indent=2)
                return None
            try:
                with open(self.json_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Failed to load timers from {self.json_path}: {e}")
                return None
        if not isinstance(data, dict):
            logger.error(f"Unexpected content in {self.json_path}")
            return None
        return data

    @staticmethod
    def _to_export_dict(entry: TimerEntry | dict[str, Any]) -> dict[str, Any]:
        data = entry.to_dict() if isinstance(entry, TimerEntry) else dict(entry)
        # Human-readable time for people editing the file
        target = datetime.fromisoformat(data["target_time"])
        data["target_time_human"] = target.strftime("%Y-%m-%d %H:%M:%S")
        return data
