"""
Event logger for rotation decisions.

Logs initial assignments, resumes, catch-ups, switches and option changes.
"""

import json
import time
from pathlib import Path
from typing import Dict, Any, List, Optional
from datetime import datetime


class EventLogger:
    """
    Logger for rotation events.

    Logs to JSONL format (one JSON object per line).
    """

    def __init__(self, log_path: Optional[str] = None):
        """
        Initialize event logger.

        Args:
            log_path: Path to log file (default: storage/events.jsonl)
        """
        if log_path is None:
            log_path = "storage/events.jsonl"

        self.log_path = Path(log_path)

    def log_event(
        self,
        event_type: str,
        label: Optional[str],
        reason: str,
        metadata: Optional[Dict[str, Any]] = None
    ):
        """
        Log a rotation event.

        Args:
            event_type: Type of event (switched, caught_up, option_added, etc.)
            label: Active posture label at time of event
            reason: Brief reason string
            metadata: Additional metadata (next change, queue, etc.)
        """
        event = {
            "timestamp": datetime.now().isoformat(),
            "unix_time": time.time(),
            "event_type": event_type,
            "label": label,
            "reason": reason,
            "metadata": metadata or {}
        }

        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event, ensure_ascii=False) + "\n")
        except OSError as e:
            print(f"[EVENTS] WARNING: Could not write event log: {e}")

    def log_switch(
        self,
        event_type: str,
        label: str,
        next_change: str,
        queue_labels: List[str],
        notified: Optional[bool] = None
    ):
        """Log an advance (initialized, switched, caught_up)."""
        reasons = {
            "initialized": "No prior state, first posture assigned",
            "switched": "Scheduled change reached",
            "resumed": "Restored saved state",
            "caught_up": "Scheduled change passed while not running",
        }
        metadata = {
            "next_change": next_change,
            "queue": queue_labels
        }
        if notified is not None:
            metadata["notified"] = notified

        self.log_event(
            event_type=event_type,
            label=label,
            reason=reasons.get(event_type, event_type),
            metadata=metadata
        )

    def log_option(
        self,
        event_type: str,
        label: str,
        reason: str,
        current_label: Optional[str] = None
    ):
        """Log an option addition or rejection."""
        self.log_event(
            event_type=event_type,
            label=current_label,
            reason=reason,
            metadata={"option": label}
        )

    def get_recent_events(self, limit: int = 100) -> list:
        """
        Get recent events from log.

        Args:
            limit: Maximum number of events to return

        Returns:
            List of event dictionaries
        """
        if not self.log_path.exists():
            return []

        events = []
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                try:
                    events.append(json.loads(line.strip()))
                except json.JSONDecodeError:
                    continue

        return events[-limit:]
