"""
Rotation configuration (the config.json document).

Holds the raw options and interval bounds exactly as the user wrote them.
Sanitizing happens later in options.py.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .options import (
    DEFAULT_INTERVAL_MAX_MINUTES,
    DEFAULT_INTERVAL_MIN_MINUTES,
    DEFAULT_OPTIONS,
    IntervalRange,
    Option,
    sanitize_interval_range,
    sanitize_options,
)


class ConfigInvalid(ValueError):
    """config.json is missing fields or has the wrong shape."""


def _default_options() -> List[Option]:
    return list(DEFAULT_OPTIONS)


@dataclass
class AppConfig:
    """
    User configuration for the rotation.

    Field names follow Python style; to_dict()/from_dict() map them to the
    camelCase keys stored on disk.
    """
    options: List[Option] = field(default_factory=_default_options)
    interval_min_minutes: int = DEFAULT_INTERVAL_MIN_MINUTES
    interval_max_minutes: int = DEFAULT_INTERVAL_MAX_MINUTES

    def sanitized_options(self) -> List[Option]:
        return sanitize_options(self.options)

    def interval_range(self) -> IntervalRange:
        return sanitize_interval_range(self.interval_min_minutes, self.interval_max_minutes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk document."""
        return {
            "options": [option.to_dict() for option in self.options],
            "intervalMinMinutes": self.interval_min_minutes,
            "intervalMaxMinutes": self.interval_max_minutes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppConfig':
        """
        Create from the on-disk document.

        Raises:
            ConfigInvalid: if a required key is missing or mistyped
        """
        if not isinstance(data, dict):
            raise ConfigInvalid(f"config must be an object, got {type(data).__name__}")

        try:
            raw_options = data["options"]
            interval_min = data["intervalMinMinutes"]
            interval_max = data["intervalMaxMinutes"]
        except KeyError as e:
            raise ConfigInvalid(f"missing key {e}") from e

        if not isinstance(raw_options, list):
            raise ConfigInvalid("options must be a list")
        for value in (interval_min, interval_max):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigInvalid(f"interval bounds must be integers, got {value!r}")

        options = []
        for entry in raw_options:
            if not isinstance(entry, dict):
                raise ConfigInvalid(f"option must be an object, got {entry!r}")
            label = entry.get("label")
            icon = entry.get("icon", "")
            if not isinstance(label, str) or not isinstance(icon, str):
                raise ConfigInvalid(f"option label/icon must be strings: {entry!r}")
            # Kept raw: sanitize_options() normalizes at use time
            options.append(Option(label=label, icon=icon))

        return cls(
            options=options,
            interval_min_minutes=interval_min,
            interval_max_minutes=interval_max,
        )
