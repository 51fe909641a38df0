"""
Tests for the rotation service (startup, catch-up, ticks, option changes).
"""

import json
import random
from datetime import datetime, timedelta, timezone

import pytest

from shifty import (
    AddOptionResult,
    AppConfig,
    ConfigManager,
    EventLogger,
    FALLBACK_ICON,
    MAX_INTERVAL_MINUTES,
    Option,
    RotationScheduler,
    RotationService,
    StateStore,
)


T0 = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingNotifier:
    """Stands in for NotificationEngine; records every posted title."""

    def __init__(self, succeed: bool = True):
        self.titles = []
        self.succeed = succeed

    def notify_shift(self, display_title: str) -> bool:
        self.titles.append(display_title)
        return self.succeed


@pytest.fixture
def clock():
    return FakeClock(T0)


@pytest.fixture
def notifier():
    return RecordingNotifier()


def make_service(storage_dir, clock, notifier, seed=0) -> RotationService:
    return RotationService(
        config_manager=ConfigManager(str(storage_dir / "config.json")),
        state_store=StateStore(str(storage_dir)),
        scheduler=RotationScheduler(rng=random.Random(seed)),
        notification_engine=notifier,
        event_logger=EventLogger(str(storage_dir / "events.jsonl")),
        clock=clock
    )


def event_types(storage_dir):
    return [event["event_type"] for event in EventLogger(str(storage_dir / "events.jsonl")).get_recent_events()]


def write_state(storage_dir, document):
    storage_dir.mkdir(parents=True, exist_ok=True)
    (storage_dir / "state.json").write_text(json.dumps(document), encoding="utf-8")


def test_fresh_start_is_silent(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)

    view = service.initialize_or_resume()

    assert view.label in {"STAND", "SIT"}
    assert view.icon in {"🧍", "💺"}
    assert T0 + timedelta(minutes=50) <= view.next_change_at <= T0 + timedelta(minutes=70)
    assert notifier.titles == []
    assert (tmp_path / "config.json").exists()
    assert StateStore(str(tmp_path)).load().current_label == view.label
    assert event_types(tmp_path) == ["initialized"]


def test_restart_resumes_saved_rotation(tmp_path, clock, notifier):
    first = make_service(tmp_path, clock, notifier).initialize_or_resume()

    clock.now = T0 + timedelta(minutes=10)
    second = make_service(tmp_path, clock, notifier, seed=1).initialize_or_resume()

    assert second.label == first.label
    assert second.next_change_at == first.next_change_at
    assert notifier.titles == []
    assert event_types(tmp_path) == ["initialized", "resumed"]


def test_catch_up_scenario(tmp_path, clock, notifier):
    write_state(tmp_path, {
        "currentLabel": "SIT",
        "queueLabels": ["STAND"],
        "nextChange": "2026-01-05T08:59:00Z",
    })
    service = make_service(tmp_path, clock, notifier)

    view = service.initialize_or_resume()

    assert view.label == "STAND"
    assert view.next_change_at >= T0 + timedelta(minutes=50)
    assert notifier.titles == ["🧍 STAND"]
    assert StateStore(str(tmp_path)).load().current_label == "STAND"
    assert event_types(tmp_path) == ["caught_up"]


def test_unknown_saved_posture_starts_fresh(tmp_path, clock, notifier):
    write_state(tmp_path, {
        "currentLabel": "NAP",
        "queueLabels": ["SIT"],
        "nextChange": "2026-01-05T08:00:00Z",
    })
    service = make_service(tmp_path, clock, notifier)

    view = service.initialize_or_resume()

    assert view.label in {"STAND", "SIT"}
    assert notifier.titles == []
    assert event_types(tmp_path) == ["initialized"]


def test_corrupt_state_starts_fresh(tmp_path, clock, notifier):
    tmp_path.mkdir(exist_ok=True)
    (tmp_path / "state.json").write_text("{garbage", encoding="utf-8")

    view = make_service(tmp_path, clock, notifier).initialize_or_resume()

    assert view.label in {"STAND", "SIT"}
    assert StateStore(str(tmp_path)).load() is not None


def test_tick_before_deadline(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    view = service.initialize_or_resume()

    clock.now = view.next_change_at - timedelta(seconds=30)

    assert service.on_tick() is None
    assert service.status().label == view.label
    assert notifier.titles == []


def test_tick_after_deadline_switches_and_persists(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    view = service.initialize_or_resume()

    clock.now = view.next_change_at + timedelta(seconds=10)
    switched = service.on_tick()

    assert switched is not None
    assert switched.label != view.label
    assert notifier.titles == [switched.display_title]
    assert switched.next_change_at >= clock.now + timedelta(minutes=50)
    assert StateStore(str(tmp_path)).load().current_label == switched.label
    assert event_types(tmp_path)[-1] == "switched"


def test_notification_failure_does_not_stop_rotation(tmp_path, clock):
    service = make_service(tmp_path, clock, RecordingNotifier(succeed=False))
    view = service.initialize_or_resume()

    clock.now = view.next_change_at
    switched = service.on_tick()

    assert switched.label != view.label
    events = EventLogger(str(tmp_path / "events.jsonl")).get_recent_events()
    assert events[-1]["metadata"]["notified"] is False


def test_add_option_scenario(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    view = service.initialize_or_resume()

    result = service.add_option(" walk ", "")

    assert result is AddOptionResult.ADDED
    status = service.status()
    assert status.label == view.label
    assert status.next_change_at == view.next_change_at
    assert status.queue_labels[-1] == "WALK"
    assert Option(label="WALK", icon=FALLBACK_ICON) in status.options

    config = ConfigManager(str(tmp_path / "config.json")).load_config()
    assert config.sanitized_options()[-1] == Option(label="WALK", icon=FALLBACK_ICON)
    assert StateStore(str(tmp_path)).load().queue_labels[-1] == "WALK"
    assert event_types(tmp_path)[-1] == "option_added"


@pytest.mark.parametrize("label, expected", [
    ("stand", AddOptionResult.DUPLICATE),
    ("  ", AddOptionResult.EMPTY_LABEL),
])
def test_add_option_rejected(tmp_path, clock, notifier, label, expected):
    service = make_service(tmp_path, clock, notifier)
    service.initialize_or_resume()
    config_before = (tmp_path / "config.json").read_text(encoding="utf-8")
    queue_before = service.status().queue_labels

    assert service.add_option(label, "x") is expected

    assert (tmp_path / "config.json").read_text(encoding="utf-8") == config_before
    assert service.status().queue_labels == queue_before
    assert event_types(tmp_path)[-1] == "option_rejected"


def test_added_option_is_reached_within_the_cycle(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    service.initialize_or_resume()
    service.add_option("walk", "🚶")

    seen = set()
    for _ in range(3):
        clock.now = service.status().next_change_at
        seen.add(service.on_tick().label)

    assert "WALK" in seen


def test_config_edits_are_picked_up_on_tick(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    view = service.initialize_or_resume()

    manager = ConfigManager(str(tmp_path / "config.json"))
    config = manager.load_config()
    config.options = config.options + [Option(label="run", icon="🏃")]
    config.interval_min_minutes = 5
    config.interval_max_minutes = 5
    manager.save_config(config)

    clock.now = T0 + timedelta(minutes=1)
    assert service.on_tick() is None

    status = service.status()
    assert status.queue_labels[-1] == "RUN"
    # Pending change time is not redrawn
    assert status.next_change_at == view.next_change_at
    assert event_types(tmp_path)[-1] == "config_synced"

    clock.now = view.next_change_at
    switched = service.on_tick()
    assert switched.next_change_at == clock.now + timedelta(minutes=5)


def test_removing_active_posture_from_config_switches(tmp_path, clock, notifier):
    service = make_service(tmp_path, clock, notifier)
    view = service.initialize_or_resume()

    remaining = [option for option in service.options if option.label != view.label]
    ConfigManager(str(tmp_path / "config.json")).save_config(
        AppConfig(options=remaining + [Option(label="WALK", icon="🚶")])
    )

    clock.now = T0 + timedelta(minutes=1)
    switched = service.on_tick()

    assert switched is not None
    assert switched.label != view.label
    assert switched.label in {option.label for option in remaining} | {"WALK"}
    assert notifier.titles == [switched.display_title]


def test_state_write_failure_keeps_rotation_alive(tmp_path, clock, notifier):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    service = RotationService(
        config_manager=ConfigManager(str(tmp_path / "config.json")),
        state_store=StateStore(str(blocker)),
        scheduler=RotationScheduler(rng=random.Random(0)),
        notification_engine=notifier,
        clock=clock
    )

    view = service.initialize_or_resume()
    clock.now = view.next_change_at
    switched = service.on_tick()

    assert switched.label != view.label


def test_status_before_start_raises(tmp_path, clock, notifier):
    with pytest.raises(RuntimeError):
        make_service(tmp_path, clock, notifier).status()


def test_huge_interval_bounds_still_start_and_tick(tmp_path, clock, notifier):
    ConfigManager(str(tmp_path / "config.json")).save_config(
        AppConfig(options=[], interval_min_minutes=10**10, interval_max_minutes=10**12)
    )
    service = make_service(tmp_path, clock, notifier)

    view = service.initialize_or_resume()
    assert view.next_change_at == T0 + timedelta(minutes=MAX_INTERVAL_MINUTES)

    clock.now = view.next_change_at
    switched = service.on_tick()
    assert switched.label != view.label
    assert StateStore(str(tmp_path)).load().next_change_at == clock.now + timedelta(minutes=MAX_INTERVAL_MINUTES)
