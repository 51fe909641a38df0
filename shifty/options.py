"""
Option registry: posture options and interval range.

Sanitizes the raw option list and interval bounds coming from config.json.
Everything here is pure; the same config always yields the same options.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional


FALLBACK_ICON = "🔁"

DEFAULT_INTERVAL_MIN_MINUTES = 50
DEFAULT_INTERVAL_MAX_MINUTES = 70

# Upper bound for either interval bound (one year), keeps now + interval
# inside the datetime range
MAX_INTERVAL_MINUTES = 366 * 24 * 60


@dataclass(frozen=True)
class Option:
    """A posture the user rotates through (e.g. STAND, SIT)."""
    label: str  # normalized: trimmed, uppercase
    icon: str

    @property
    def display_title(self) -> str:
        """Title shown in the status line, e.g. '🧍 STAND'."""
        return f"{self.icon} {self.label}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


DEFAULT_OPTIONS = (
    Option(label="STAND", icon="🧍"),
    Option(label="SIT", icon="💺"),
)


@dataclass(frozen=True)
class IntervalRange:
    """
    Allowed rotation interval in whole minutes.

    Always satisfies 1 <= min_minutes <= max_minutes once built through
    sanitize_interval_range().
    """
    min_minutes: int
    max_minutes: int

    def contains(self, minutes: int) -> bool:
        return self.min_minutes <= minutes <= self.max_minutes


def normalize_label(raw: Optional[str]) -> str:
    """Trim whitespace and uppercase a label."""
    return (raw or "").strip().upper()


def normalize_icon(raw: Optional[str]) -> str:
    """Trim an icon, substituting the fallback glyph when empty."""
    icon = (raw or "").strip()
    return icon or FALLBACK_ICON


def make_option(label: Optional[str], icon: Optional[str]) -> Option:
    """Build an Option from raw user input (label may end up empty)."""
    return Option(label=normalize_label(label), icon=normalize_icon(icon))


def _raw_pair(raw: Any):
    # Accepts Option, {"label", "icon"} dicts and (label, icon) tuples
    if isinstance(raw, Option):
        return raw.label, raw.icon
    if isinstance(raw, dict):
        return raw.get("label"), raw.get("icon")
    label, icon = raw
    return label, icon


def sanitize_options(raw_options: Iterable[Any]) -> List[Option]:
    """
    Validate and de-duplicate the configured options.

    Labels are trimmed and uppercased; empty labels and duplicates are
    dropped (first occurrence wins, input order kept). Empty icons become
    the fallback glyph.

    Args:
        raw_options: Raw (label, icon) pairs, dicts or Options

    Returns:
        Non-empty list of unique-labeled options. Falls back to the
        built-in STAND/SIT pair when nothing valid remains.
    """
    seen = set()
    options: List[Option] = []

    for raw in raw_options or []:
        label, icon = _raw_pair(raw)
        if label is not None and not isinstance(label, str):
            continue
        if icon is not None and not isinstance(icon, str):
            icon = None

        option = make_option(label, icon)
        if not option.label or option.label in seen:
            continue

        seen.add(option.label)
        options.append(option)

    if not options:
        return list(DEFAULT_OPTIONS)

    return options


def _coerce_minutes(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def sanitize_interval_range(raw_min: Any, raw_max: Any) -> IntervalRange:
    """
    Clamp the configured interval bounds.

    The minimum is raised to at least 1 minute and the maximum to at least
    the clamped minimum, so inverted or negative ranges are still usable.
    Both bounds are capped at MAX_INTERVAL_MINUTES.
    """
    min_minutes = min(MAX_INTERVAL_MINUTES, max(1, _coerce_minutes(raw_min, DEFAULT_INTERVAL_MIN_MINUTES)))
    max_minutes = min(MAX_INTERVAL_MINUTES, max(min_minutes, _coerce_minutes(raw_max, DEFAULT_INTERVAL_MAX_MINUTES)))
    return IntervalRange(min_minutes=min_minutes, max_minutes=max_minutes)


def find_option(options: Iterable[Option], label: Optional[str]) -> Optional[Option]:
    """Look up an option by label (case- and whitespace-insensitive)."""
    wanted = normalize_label(label)
    if not wanted:
        return None
    for option in options:
        if option.label == wanted:
            return option
    return None
