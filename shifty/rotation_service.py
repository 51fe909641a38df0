"""
Rotation service: the layer the runner and UI talk to.

Wires config, scheduler, state storage, notifications and the event log:
- initialize_or_resume() on startup (with catch-up)
- on_tick() on a fixed cadence
- add_option() for user-driven additions
- sync_config() to pick up config.json edits made while running

Single-threaded: one caller drives every method, so no locking.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .config_manager import ConfigManager
from .event_logger import EventLogger
from .notifications import NotificationEngine
from .options import FALLBACK_ICON, IntervalRange, Option, find_option
from .persisted_state import format_timestamp
from .scheduler import AddOptionResult, AdvanceResult, RotationScheduler, SchedulerState
from .state_store import StateStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class StatusView:
    """Snapshot of the rotation for presentation."""
    label: str
    icon: str
    next_change_at: datetime
    queue_labels: List[str] = field(default_factory=list)
    options: List[Option] = field(default_factory=list)

    @property
    def display_title(self) -> str:
        return f"{self.icon} {self.label}"

    def minutes_remaining(self, now: Optional[datetime] = None) -> float:
        now = now or utc_now()
        return max(0.0, (self.next_change_at - now).total_seconds() / 60.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "icon": self.icon,
            "next_change": format_timestamp(self.next_change_at),
            "queue": list(self.queue_labels),
            "options": [option.to_dict() for option in self.options]
        }


class RotationService:
    """
    Owns the live SchedulerState for the lifetime of the process.

    State is written back through the StateStore after every mutation.
    Notification and persistence failures are reported but never raised.
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        state_store: StateStore,
        scheduler: Optional[RotationScheduler] = None,
        notification_engine: Optional[NotificationEngine] = None,
        event_logger: Optional[EventLogger] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize rotation service.

        Args:
            config_manager: Source of config.json
            state_store: Persistence for state.json
            scheduler: Rotation engine (seed its rng for reproducible runs)
            notification_engine: Notification engine (None disables notifications)
            event_logger: Event logger (None disables the event log)
            clock: Returns the current aware datetime (default: UTC now)
        """
        self.config_manager = config_manager
        self.state_store = state_store
        self.scheduler = scheduler or RotationScheduler()
        self.notification_engine = notification_engine
        self.event_logger = event_logger
        self.clock = clock or utc_now

        self.options: List[Option] = []
        self.interval_range: Optional[IntervalRange] = None
        self.state: Optional[SchedulerState] = None

    def _load_config(self):
        config = self.config_manager.load_config()
        self.options = config.sanitized_options()
        self.interval_range = config.interval_range()

    def initialize_or_resume(self, now: Optional[datetime] = None) -> StatusView:
        """
        Restore the rotation from disk, or start a fresh one.

        A persisted state whose current posture is no longer configured is
        discarded. If the persisted change time already passed, the rotation
        advances once immediately (with a notification).

        Returns:
            StatusView of the active posture
        """
        now = now or self.clock()
        self._load_config()

        persisted = self.state_store.load()
        resumed = None
        if persisted is not None:
            resumed = self.scheduler.resume(persisted, self.options, now)
            if resumed is None:
                print(f"[SHIFTY] Saved posture {persisted.current_label!r} is no longer configured, starting fresh")

        if resumed is None:
            self.state = self.scheduler.initialize(self.options, self.interval_range, now)
            self.state_store.save(self.state)
            self._log_switch("initialized", notified=None)
            return self.status()

        self.state = resumed.state
        if resumed.catch_up_needed:
            result = self.scheduler.advance(self.state, self.options, self.interval_range, now, notify=True)
            self._after_advance(result, "caught_up")
        else:
            self.state_store.save(self.state)
            self._log_switch("resumed", notified=None)

        return self.status()

    def on_tick(self, now: Optional[datetime] = None) -> Optional[StatusView]:
        """
        Periodic driver.

        Re-reads config, then advances if the scheduled change is due.

        Returns:
            StatusView if the posture changed, None otherwise
        """
        now = now or self.clock()
        if self.state is None:
            self.initialize_or_resume(now)
            return None

        changed = self.sync_config(now)

        result = self.scheduler.on_tick(self.state, self.options, self.interval_range, now)
        if result.advanced:
            self._after_advance(result, "switched")
            changed = True

        return self.status() if changed else None

    def sync_config(self, now: Optional[datetime] = None) -> bool:
        """
        Apply config.json edits to the running rotation.

        The interval range applies from the next advance on; the pending
        change time is never redrawn. New options join the queue, removed
        ones leave it. If the active posture was removed, the rotation
        advances right away.

        Returns:
            True if the posture changed
        """
        now = now or self.clock()
        if self.state is None:
            self.initialize_or_resume(now)
            return False

        config = self.config_manager.load_config()
        self.interval_range = config.interval_range()

        options = config.sanitized_options()
        if options == self.options:
            return False

        previous = self.options
        self.options = options
        sync = self.scheduler.sync_options(self.state, previous, options)

        if sync.changed and self.event_logger:
            self.event_logger.log_event(
                event_type="config_synced",
                label=self.state.current_label,
                reason="config.json options changed",
                metadata={
                    "added": [option.label for option in sync.added],
                    "removed": sync.removed
                }
            )

        if sync.current_removed:
            result = self.scheduler.advance(self.state, self.options, self.interval_range, now, notify=True)
            self._after_advance(result, "switched")
            return True

        self.state_store.save(self.state)
        return False

    def add_option(self, label: Optional[str], icon: Optional[str] = None) -> AddOptionResult:
        """
        Add a user-supplied option.

        The label is trimmed and uppercased; an empty icon gets the fallback
        glyph. Empty and duplicate labels are rejected without any change.

        Returns:
            AddOptionResult
        """
        if self.state is None:
            self.initialize_or_resume()
        else:
            # Don't overwrite options another writer added to config.json
            self.sync_config()

        result, option = self.scheduler.add_option(self.state, self.options, label, icon)

        if result is not AddOptionResult.ADDED:
            if self.event_logger:
                self.event_logger.log_option(
                    event_type="option_rejected",
                    label=(label or "").strip(),
                    reason=result.value,
                    current_label=self.state.current_label
                )
            return result

        config = self.config_manager.load_config()
        config.options = list(self.options)
        self.config_manager.save_config(config)
        self.state_store.save(self.state)

        print(f"[SHIFTY] Added option {option.display_title}")
        if self.event_logger:
            self.event_logger.log_option(
                event_type="option_added",
                label=option.label,
                reason="User added option",
                current_label=self.state.current_label
            )
        return result

    def status(self) -> StatusView:
        """Current rotation snapshot."""
        if self.state is None:
            raise RuntimeError("Rotation not started; call initialize_or_resume() first")

        current = find_option(self.options, self.state.current_label)
        return StatusView(
            label=self.state.current_label,
            icon=current.icon if current else FALLBACK_ICON,
            next_change_at=self.state.next_change_at,
            queue_labels=self.state.queue_labels,
            options=list(self.options)
        )

    def _after_advance(self, result: AdvanceResult, event_type: str):
        self.state_store.save(self.state)

        notified = None
        if result.notify and self.notification_engine:
            notified = self.notification_engine.notify_shift(result.option.display_title)

        self._log_switch(event_type, notified=notified)

    def _log_switch(self, event_type: str, notified: Optional[bool]):
        if not self.event_logger:
            return
        self.event_logger.log_switch(
            event_type=event_type,
            label=self.state.current_label,
            next_change=format_timestamp(self.state.next_change_at),
            queue_labels=self.state.queue_labels,
            notified=notified
        )
