"""Alert sound selection.

Maps a timer alert to a sound identifier and hands it to an injected player.
Audio output itself belongs to the host; a sound id is either the path of a
sound file or GENERIC_ALERT for the system's default alert sound.
"""
from pathlib import Path
from typing import Callable

from loguru import logger

from .models import TimerEntry
from .types import TimerGroup

logger = logger.bind(module="scheduler.sounds")

# Pseudo sound meaning "use the group default"
DEFAULT_SOUND_NAME = "default"
# System alert used when a group has no sound of its own
GENERIC_ALERT = "system_hand"

SOUND_EXTENSION = ".wav"

SoundPlayer = Callable[[str], None]
Speaker = Callable[[str], None]


def list_custom_sounds(sounds_dir: str | Path) -> list[str]:
    """List selectable sounds: DEFAULT_SOUND_NAME followed by the .wav files found."""
    names = [DEFAULT_SOUND_NAME]
    path = Path(sounds_dir).expanduser()
    if path.is_dir():
        names.extend(sorted(p.name for p in path.iterdir()
                            if p.is_file() and p.suffix == SOUND_EXTENSION))
    return names


def custom_sound_from_selection(selection: str | None) -> str | None:
    """Map a sound list selection to an entry's custom_sound value."""
    if not selection or selection == DEFAULT_SOUND_NAME:
        return None
    return selection


class SoundSelector:
    """Resolves the sound for a timer alert.

    Args:
        sounds_dir: Folder holding custom sound files
        group_sounds: Default sound file per group; missing or None entries
            fall back to GENERIC_ALERT
    """

    def __init__(
        self,
        sounds_dir: str | Path,
        group_sounds: dict[TimerGroup, str | None] | None = None,
    ):
        self.sounds_dir = Path(sounds_dir).expanduser()
        self.group_sounds = dict(group_sounds or {})

    def custom_sound_path(self, file_name: str | None) -> Path | None:
        """Path of a custom sound file, or None if it does not exist."""
        if not file_name:
            return None
        path = self.sounds_dir / file_name
        if not path.is_file():
            logger.warning(f"Custom sound not found: {path}")
            return None
        return path

    def group_default(self, group: str) -> str:
        timer_group = TimerGroup.parse(group)
        if timer_group is None:
            return GENERIC_ALERT
        return self.group_sounds.get(timer_group) or GENERIC_ALERT

    def select(self, group: str, custom_sound: str | None = None) -> str:
        """Sound id for an alert: existing custom file, else the group default."""
        path = self.custom_sound_path(custom_sound)
        if path is not None:
            return str(path)
        return self.group_default(group)


class AlertSoundSink:
    """NotificationSink that plays a sound for every threshold alert.

    If a ``speaker`` is given, alerts without a playable custom sound are
    spoken instead of playing the group default.
    """

    def __init__(
        self,
        selector: SoundSelector,
        player: SoundPlayer,
        speaker: Speaker | None = None,
    ):
        self.selector = selector
        self.player = player
        self.speaker = speaker

    def on_collection_changed(self) -> None:
        pass

    def on_alert_fired(self, entry: TimerEntry, threshold_index: int) -> None:
        custom = self.selector.custom_sound_path(entry.custom_sound)
        if custom is not None:
            self.player(str(custom))
        elif self.speaker is not None:
            self.speaker(alert_text(entry))
        else:
            self.player(self.selector.group_default(entry.group))

    def preview(self, selection: str | None) -> str:
        """Play a sound from the sound list and return the id played."""
        custom = self.selector.custom_sound_path(custom_sound_from_selection(selection))
        sound = str(custom) if custom is not None else GENERIC_ALERT
        self.player(sound)
        return sound


def alert_text(entry: TimerEntry) -> str:
    """Short spoken text for an alert."""
    return f"{entry.name}, {entry.group}"
