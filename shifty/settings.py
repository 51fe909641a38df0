"""
Process-level settings for the runner.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .platform import default_storage_dir


@dataclass
class ShiftySettings:
    """
    Runner settings (not part of config.json).

    All durations in seconds.
    """
    # Tick cadence; only bounds how late a due switch is noticed
    tick_interval_sec: float = 30.0

    # Where config.json, state.json and events.jsonl live
    storage_dir: Path = field(default_factory=default_storage_dir)

    # Notifications
    notification_backend: str = "osascript"
    dry_run: bool = False  # Print notifications instead of posting

    @property
    def config_path(self) -> Path:
        return self.storage_dir / "config.json"

    @property
    def event_log_path(self) -> Path:
        return self.storage_dir / "events.jsonl"

    @classmethod
    def from_env(cls, storage_dir: Optional[str] = None) -> 'ShiftySettings':
        """
        Settings with environment overrides applied.

        SHIFTY_TICK_SEC and SHIFTY_NOTIFY_BACKEND override the defaults;
        the storage directory honors SHIFTY_STORAGE_ROOT through
        default_storage_dir() unless given explicitly.
        """
        settings = cls()

        if storage_dir:
            settings.storage_dir = Path(storage_dir).expanduser()

        tick = os.environ.get("SHIFTY_TICK_SEC")
        if tick:
            try:
                settings.tick_interval_sec = max(1.0, float(tick))
            except ValueError:
                print(f"[SHIFTY] WARNING: Ignoring invalid SHIFTY_TICK_SEC={tick!r}")

        backend = os.environ.get("SHIFTY_NOTIFY_BACKEND")
        if backend:
            settings.notification_backend = backend

        return settings
