import os
import sys
from pathlib import Path


def is_macos() -> bool:
    return sys.platform == "darwin"


def is_windows() -> bool:
    return sys.platform.startswith("win")


def default_storage_dir() -> Path:
    """
    Per-user storage directory for config.json, state.json and events.jsonl.

    SHIFTY_STORAGE_ROOT overrides the platform default:
        macOS:   ~/Library/Application Support/Shifty
        Windows: %APPDATA%/Shifty (falls back to ~/ShiftyData)
        other:   ~/.shifty
    """
    override = os.environ.get("SHIFTY_STORAGE_ROOT")
    if override:
        return Path(override).expanduser()

    if is_macos():
        return Path.home() / "Library" / "Application Support" / "Shifty"

    if is_windows():
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata) / "Shifty"
        return Path.home() / "ShiftyData"

    return Path.home() / ".shifty"
