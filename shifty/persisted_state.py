"""
On-disk mirror of the rotation state (the state.json document).

Only labels are durable; icons are re-resolved against the current options
when the state is resumed.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List


class StateInvalid(ValueError):
    """state.json is malformed or uses an unknown schema."""


def format_timestamp(value: datetime) -> str:
    """UTC ISO-8601 with a Z suffix, seconds precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc).replace(microsecond=0)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(raw: str) -> datetime:
    """
    Parse an ISO-8601 timestamp.

    Accepts a trailing Z; naive timestamps are taken as UTC.

    Raises:
        StateInvalid: if the value is not a parseable timestamp
    """
    if not isinstance(raw, str):
        raise StateInvalid(f"timestamp must be a string, got {raw!r}")

    text = raw.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"

    try:
        value = datetime.fromisoformat(text)
    except ValueError as e:
        raise StateInvalid(f"bad timestamp {raw!r}") from e

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


@dataclass
class PersistedState:
    """Rotation state as written to state.json."""
    current_label: str
    queue_labels: List[str] = field(default_factory=list)
    next_change_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_state(cls, state) -> 'PersistedState':
        """Snapshot a live SchedulerState (current_label must be set)."""
        return cls(
            current_label=state.current_label,
            queue_labels=list(state.queue_labels),
            next_change_at=state.next_change_at
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the on-disk document."""
        return {
            "currentLabel": self.current_label,
            "queueLabels": list(self.queue_labels),
            "nextChange": format_timestamp(self.next_change_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PersistedState':
        """
        Create from the on-disk document.

        Raises:
            StateInvalid: on missing keys, wrong types or a bad timestamp
        """
        if not isinstance(data, dict):
            raise StateInvalid(f"state must be an object, got {type(data).__name__}")

        try:
            current_label = data["currentLabel"]
            queue_labels = data["queueLabels"]
            next_change = data["nextChange"]
        except KeyError as e:
            raise StateInvalid(f"missing key {e}") from e

        if not isinstance(current_label, str):
            raise StateInvalid("currentLabel must be a string")
        if not isinstance(queue_labels, list) or not all(isinstance(label, str) for label in queue_labels):
            raise StateInvalid("queueLabels must be a list of strings")

        return cls(
            current_label=current_label,
            queue_labels=queue_labels,
            next_change_at=parse_timestamp(next_change)
        )
