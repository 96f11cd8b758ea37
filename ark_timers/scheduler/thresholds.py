"""Alert threshold configuration.

Thresholds are seconds before expiry at which a timer alerts. The host
presents them as free text, so bad input is sanitized instead of rejected.
"""
import math
from dataclasses import dataclass
from typing import Any, Iterable

from loguru import logger

logger = logger.bind(module="scheduler.thresholds")

DEFAULT_THRESHOLDS: tuple[int, ...] = (60, 10, 0)


def sanitize_thresholds(values: Iterable[Any] | None) -> tuple[int, ...]:
    """Drop negatives and non-numbers, collapse duplicates and sort descending.

    Fractional seconds are truncated after the sign check, so ``-0.5`` is
    dropped rather than becoming ``0``. An empty result collapses to a
    single threshold at expiry, ``(0,)``.
    """
    cleaned: set[int] = set()
    for value in values or []:
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.debug(f"Ignoring invalid threshold value {value!r}")
            continue
        if not math.isfinite(number) or number < 0:
            logger.debug(f"Ignoring out of range threshold value {value!r}")
            continue
        cleaned.add(int(number))
    if not cleaned:
        return (0,)
    return tuple(sorted(cleaned, reverse=True))


def parse_thresholds_csv(text: str) -> list[int]:
    """Parse a comma separated list of seconds, skipping unparseable items."""
    values: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            values.append(int(part))
        except ValueError:
            logger.debug(f"Ignoring invalid threshold value {part!r}")
    return values


@dataclass(frozen=True)
class AlertThresholds:
    """Ordered, distinct, non-negative alert offsets (largest first)."""
    values: tuple[int, ...] = DEFAULT_THRESHOLDS

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", sanitize_thresholds(self.values))

    @classmethod
    def from_values(cls, values: Iterable[int] | None) -> "AlertThresholds":
        return cls(values=tuple(values or ()))

    @classmethod
    def from_csv(cls, text: str, current: "AlertThresholds | None" = None) -> "AlertThresholds":
        """Build thresholds from CSV text.

        Empty text, or text without a single parseable number, keeps
        ``current`` (or the defaults when there is none).
        """
        fallback = current or cls()
        if not text or not text.strip():
            return fallback
        parsed = parse_thresholds_csv(text)
        if not parsed:
            return fallback
        return cls.from_values(parsed)

    def to_csv(self) -> str:
        return ",".join(str(v) for v in self.values)

    def __iter__(self):
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def __getitem__(self, index: int) -> int:
        return self.values[index]


def remap_fired(fired: set[int], old: AlertThresholds, new: AlertThresholds) -> set[int]:
    """Translate fired threshold indices from ``old`` to ``new`` by seconds value."""
    fired_seconds = {old[i] for i in fired if 0 <= i < len(old)}
    return {i for i, seconds in enumerate(new) if seconds in fired_seconds}
