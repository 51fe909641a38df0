"""
Local storage for the rotation state.

Writes <storage_dir>/state.json atomically (temp file + os.replace) after
every rotation and reads it once at startup. Any problem reading the file
means "no prior state"; any problem writing it is reported and dropped, the
in-memory state stays authoritative.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from .persisted_state import PersistedState, StateInvalid
from .scheduler import SchedulerState


def write_json_atomic(path: Path, data) -> None:
    """Write JSON to a uniquely named temp file next to `path`, then swap it in."""
    json_str = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)

    temp_file = tempfile.NamedTemporaryFile(
        'w', encoding='utf-8', dir=path.parent, prefix=f".{path.name}.", suffix='.tmp', delete=False
    )
    try:
        with temp_file as f:
            f.write(json_str)
        os.replace(temp_file.name, path)
    except Exception:
        # Never leave a stray temp file behind
        Path(temp_file.name).unlink(missing_ok=True)
        raise


class StateStore:
    """
    Manages state.json.

    Storage location: <storage_dir>/state.json
    """

    def __init__(self, storage_dir: str = "./storage"):
        """
        Initialize state storage.

        Args:
            storage_dir: Directory for storage files
        """
        self.storage_dir = Path(storage_dir)
        self.state_file = self.storage_dir / "state.json"

    def save(self, state: SchedulerState) -> bool:
        """
        Save rotation state to disk.

        Args:
            state: Live scheduler state

        Returns:
            True if saved successfully
        """
        if state.current_label is None or state.next_change_at is None:
            return False

        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            persisted = PersistedState.from_state(state)
            write_json_atomic(self.state_file, persisted.to_dict())
            return True

        except (OSError, TypeError, ValueError) as e:
            print(f"[STATE] ERROR: Failed to save state: {e}")
            return False

    def load(self) -> Optional[PersistedState]:
        """
        Load rotation state from disk.

        Returns:
            PersistedState if a valid file exists, None otherwise
        """
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, 'r', encoding='utf-8') as f:
                data = json.load(f)

            return PersistedState.from_dict(data)

        except (OSError, UnicodeDecodeError, json.JSONDecodeError, StateInvalid) as e:
            print(f"[STATE] WARNING: Ignoring unreadable state file: {e}")
            return None

    def delete(self) -> bool:
        """
        Delete the state file (next start initializes fresh).

        Returns:
            True if deleted successfully
        """
        try:
            if self.state_file.exists():
                self.state_file.unlink()
            return True
        except OSError as e:
            print(f"[STATE] ERROR: Failed to delete state: {e}")
            return False

    def exists(self) -> bool:
        """Check if a state file exists."""
        return self.state_file.exists()
