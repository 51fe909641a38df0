"""
Shifty Core Module
Posture rotation scheduling with persistent state.
"""

from .options import (
    Option,
    IntervalRange,
    FALLBACK_ICON,
    DEFAULT_OPTIONS,
    MAX_INTERVAL_MINUTES,
    normalize_label,
    make_option,
    sanitize_options,
    sanitize_interval_range,
    find_option
)
from .app_config import AppConfig, ConfigInvalid
from .persisted_state import PersistedState, StateInvalid
from .scheduler import (
    RotationScheduler,
    SchedulerState,
    AdvanceResult,
    ResumeResult,
    SyncResult,
    AddOptionResult
)
from .state_store import StateStore
from .config_manager import ConfigManager
from .notifications import NotificationEngine
from .event_logger import EventLogger
from .settings import ShiftySettings
from .rotation_service import RotationService, StatusView
from .tick_timer import TickTimer

__all__ = [
    "Option",
    "IntervalRange",
    "FALLBACK_ICON",
    "DEFAULT_OPTIONS",
    "MAX_INTERVAL_MINUTES",
    "normalize_label",
    "make_option",
    "sanitize_options",
    "sanitize_interval_range",
    "find_option",
    "AppConfig",
    "ConfigInvalid",
    "PersistedState",
    "StateInvalid",
    "RotationScheduler",
    "SchedulerState",
    "AdvanceResult",
    "ResumeResult",
    "SyncResult",
    "AddOptionResult",
    "StateStore",
    "ConfigManager",
    "NotificationEngine",
    "EventLogger",
    "ShiftySettings",
    "RotationService",
    "StatusView",
    "TickTimer"
]
