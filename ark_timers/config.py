"""Configuration for the timer host, loaded from the environment."""
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .scheduler.service.state import DEFAULT_ALERT_WINDOW
from .scheduler.thresholds import AlertThresholds
from .scheduler.types import TimerGroup

load_dotenv()


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


@dataclass
class Settings:
    """Host settings."""

    debug: bool = False
    log_level: str = "INFO"

    # Paths
    data_dir: Path = field(default_factory=lambda: Path.home() / ".ark_timers")
    sounds_dir: Path = field(default_factory=lambda: Path.home() / ".ark_timers" / "sounds")

    # Alerts
    alert_thresholds: AlertThresholds = field(default_factory=AlertThresholds)
    alert_window: float = DEFAULT_ALERT_WINDOW
    tick_interval: float = 1.0

    # Default sound file per group, relative to sounds_dir
    group_sounds: dict[TimerGroup, str | None] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.tick_interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {self.tick_interval}")
        if self.alert_window <= 0:
            raise ValueError(f"Alert window must be positive, got {self.alert_window}")

    @property
    def timers_path(self) -> Path:
        return self.data_dir / "timers.json"

    @property
    def effective_alert_window(self) -> float:
        """Alert window widened so a slower tick cannot step over a threshold."""
        return max(self.alert_window, self.tick_interval * 0.8)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        data_dir = Path(os.getenv(
            "ARK_TIMERS_DATA_DIR", str(Path.home() / ".ark_timers")
        )).expanduser()
        debug = os.getenv("DEBUG", "").lower() in ("1", "true")

        group_sounds: dict[TimerGroup, str | None] = {}
        for group in TimerGroup:
            sound = os.getenv(f"ARK_TIMERS_SOUND_{group.name}")
            if sound:
                group_sounds[group] = sound

        return cls(
            debug=debug,
            log_level=os.getenv("ARK_TIMERS_LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),

            # Paths
            data_dir=data_dir,
            sounds_dir=Path(os.getenv(
                "ARK_TIMERS_SOUNDS_DIR", str(data_dir / "sounds")
            )).expanduser(),

            # Alerts
            alert_thresholds=AlertThresholds.from_csv(os.getenv("ARK_TIMERS_ALERTS", "")),
            alert_window=_float_env("ARK_TIMERS_ALERT_WINDOW", DEFAULT_ALERT_WINDOW),
            tick_interval=_float_env("ARK_TIMERS_TICK_INTERVAL", 1.0),
            group_sounds=group_sounds,
        )
