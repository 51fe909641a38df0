"""
Posture rotation scheduler.

Implements the randomized non-repeating queue:
- Refill: shuffle every option, swapping the first two if the head would
  repeat the current posture
- Advance: pop the queue head, draw a whole-minute interval in range
- Resume: rebuild live state from the persisted labels, with catch-up when
  the scheduled change already passed
- Option additions and config re-syncs that keep the queue consistent

All randomness goes through an injectable random.Random, so a seeded
scheduler replays the same rotation.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Tuple

from .options import IntervalRange, Option, find_option, make_option
from .persisted_state import PersistedState


@dataclass
class SchedulerState:
    """
    Live rotation state, mutated in place by every advance.

    Invariants:
    - current_label (when set) names one of the configured options
    - queue labels are unique and never equal current_label
    """
    current_label: Optional[str]
    queue: List[Option] = field(default_factory=list)
    next_change_at: Optional[datetime] = None

    @property
    def queue_labels(self) -> List[str]:
        return [option.label for option in self.queue]


@dataclass
class AdvanceResult:
    """Outcome of an advance (or of a tick that did not advance)."""
    state: SchedulerState
    notify: bool
    option: Optional[Option] = None  # newly active option, None if unchanged

    @property
    def advanced(self) -> bool:
        return self.option is not None


@dataclass
class ResumeResult:
    """Outcome of rebuilding state from disk."""
    state: SchedulerState
    catch_up_needed: bool


@dataclass
class SyncResult:
    """Options that appeared or disappeared on a config re-read."""
    added: List[Option] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    current_removed: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class AddOptionResult(Enum):
    """Outcome of a user-driven option addition."""
    ADDED = "added"
    EMPTY_LABEL = "empty_label"
    DUPLICATE = "duplicate"


class RotationScheduler:
    """
    Value-transforming rotation engine.

    Owns no I/O and no clock: callers pass `now` and the option set on
    every call.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize scheduler.

        Args:
            rng: Random source for shuffles and interval draws
                 (seed it for reproducible rotations)
        """
        self.rng = rng or random.Random()

    def refill(self, state: SchedulerState, options: List[Option]):
        """Replace the queue with a fresh random permutation of all options."""
        items = list(options)
        self.rng.shuffle(items)

        # Anti-repeat guard, only for the head of the new queue
        if state.current_label is not None and len(items) > 1 and items[0].label == state.current_label:
            items[0], items[1] = items[1], items[0]

        state.queue = items

    def draw_interval(self, interval_range: IntervalRange) -> timedelta:
        """Uniform whole-minute interval within the range (inclusive)."""
        minutes = self.rng.randint(interval_range.min_minutes, interval_range.max_minutes)
        return timedelta(minutes=minutes)

    def advance(
        self,
        state: SchedulerState,
        options: List[Option],
        interval_range: IntervalRange,
        now: datetime,
        notify: bool = True
    ) -> AdvanceResult:
        """
        Retire the current posture and promote the next queued one.

        Args:
            state: Live state (mutated in place)
            options: Current option set (used for refills)
            interval_range: Allowed interval for the next change
            now: Current time
            notify: False only for the silent first assignment after a
                    cold start

        Returns:
            AdvanceResult with the newly active option
        """
        if not state.queue:
            self.refill(state, options)

        option = state.queue.pop(0)
        state.current_label = option.label
        state.next_change_at = now + self.draw_interval(interval_range)

        return AdvanceResult(state=state, notify=notify, option=option)

    def initialize(
        self,
        options: List[Option],
        interval_range: IntervalRange,
        now: datetime
    ) -> SchedulerState:
        """Fresh state with a silently assigned first posture."""
        state = SchedulerState(current_label=None, queue=[], next_change_at=now)
        self.advance(state, options, interval_range, now, notify=False)
        return state

    def resume(
        self,
        persisted: PersistedState,
        options: List[Option],
        now: datetime
    ) -> Optional[ResumeResult]:
        """
        Rebuild live state from persisted labels.

        Persisted queue labels are kept in order when they still name a
        configured option (duplicates and the current label dropped); every
        other configured option is appended in random order.

        Returns:
            ResumeResult, or None if the persisted current label is no longer
            configured (caller should initialize instead)
        """
        current = find_option(options, persisted.current_label)
        if current is None:
            return None

        used = {current.label}
        queue: List[Option] = []
        for label in persisted.queue_labels:
            option = find_option(options, label)
            if option is None or option.label in used:
                continue
            used.add(option.label)
            queue.append(option)

        missing = [option for option in options if option.label not in used]
        self.rng.shuffle(missing)

        state = SchedulerState(
            current_label=current.label,
            queue=queue + missing,
            next_change_at=persisted.next_change_at
        )
        return ResumeResult(state=state, catch_up_needed=now >= persisted.next_change_at)

    def on_tick(
        self,
        state: SchedulerState,
        options: List[Option],
        interval_range: IntervalRange,
        now: datetime
    ) -> AdvanceResult:
        """Advance (with notification) once the scheduled change is due."""
        if state.next_change_at is None or now >= state.next_change_at:
            return self.advance(state, options, interval_range, now, notify=True)
        return AdvanceResult(state=state, notify=False, option=None)

    def add_option(
        self,
        state: SchedulerState,
        options: List[Option],
        label: Optional[str],
        icon: Optional[str]
    ) -> Tuple[AddOptionResult, Optional[Option]]:
        """
        Append a user-supplied option to the option set and the live queue.

        The current posture and the scheduled change time are untouched.
        Rejections leave both lists unchanged.
        """
        option = make_option(label, icon)
        if not option.label:
            return AddOptionResult.EMPTY_LABEL, None
        if find_option(options, option.label) is not None:
            return AddOptionResult.DUPLICATE, None

        options.append(option)
        state.queue.append(option)
        return AddOptionResult.ADDED, option

    def sync_options(
        self,
        state: SchedulerState,
        previous: List[Option],
        options: List[Option]
    ) -> SyncResult:
        """
        Reconcile live state with a re-read option set.

        Queue entries for options that vanished are dropped and icons are
        refreshed. Options that were not configured before are appended in
        random order. If the current posture itself vanished, the result
        says so and the caller should advance.
        """
        previous_labels = {option.label for option in previous}
        current_labels = {option.label for option in options}

        queue: List[Option] = []
        for queued in state.queue:
            fresh = find_option(options, queued.label)
            if fresh is None or fresh.label == state.current_label:
                continue
            queue.append(fresh)

        queued_labels = {option.label for option in queue}
        added = [
            option for option in options
            if option.label not in previous_labels
            and option.label not in queued_labels
            and option.label != state.current_label
        ]
        self.rng.shuffle(added)
        state.queue = queue + added

        return SyncResult(
            added=added,
            removed=sorted(previous_labels - current_labels),
            current_removed=(
                state.current_label is not None
                and state.current_label not in current_labels
            )
        )
