#!/usr/bin/env python3
"""
Shifty Runner
Keeps the posture rotation going and posts a notification on every switch.

Usage:
    python shifty_runner.py run [--tick-seconds 30] [--storage-dir DIR] [--backend osascript] [--dry-run]
    python shifty_runner.py status [--storage-dir DIR]
    python shifty_runner.py add LABEL [ICON] [--storage-dir DIR]
"""

import argparse
import sys
from datetime import datetime

from shifty import (
    ConfigManager,
    EventLogger,
    NotificationEngine,
    RotationService,
    ShiftySettings,
    StateStore,
    StatusView,
    TickTimer,
    find_option,
    make_option,
)
from shifty.notifications import BACKENDS


def format_local_time(value: datetime) -> str:
    """Local wall-clock time, e.g. '03:45 PM'."""
    return value.astimezone().strftime("%I:%M %p")


def format_status_line(view: StatusView) -> str:
    """Format a single status line."""
    return (
        f"[{view.label}] {view.display_title} | "
        f"Next change: {format_local_time(view.next_change_at)} "
        f"(in {view.minutes_remaining():.0f} min) | "
        f"Queue: {', '.join(view.queue_labels) or '-'}"
    )


def build_service(settings: ShiftySettings, with_notifications: bool = True) -> RotationService:
    """Wire the rotation service for a storage directory."""
    notification_engine = None
    if with_notifications:
        notification_engine = NotificationEngine(
            backend=settings.notification_backend,
            dry_run=settings.dry_run
        )

    return RotationService(
        config_manager=ConfigManager(str(settings.config_path)),
        state_store=StateStore(str(settings.storage_dir)),
        notification_engine=notification_engine,
        event_logger=EventLogger(str(settings.event_log_path))
    )


def cmd_run(settings: ShiftySettings) -> int:
    service = build_service(settings)

    print("=" * 80)
    print("Shifty - Posture Rotation")
    print("=" * 80)
    print(f"Storage: {settings.storage_dir}")
    print(f"Tick interval: {settings.tick_interval_sec:.0f}s")
    print(f"Notifications: {settings.notification_backend}{' (dry run)' if settings.dry_run else ''}")
    print()

    view = service.initialize_or_resume()
    interval = service.interval_range
    print(f"Options: {', '.join(option.display_title for option in view.options)}")
    print(f"Interval: {interval.min_minutes}-{interval.max_minutes} min")
    print()
    print(format_status_line(view))
    print()
    print("Press Ctrl+C to stop")
    print("=" * 80)

    def tick():
        switched = service.on_tick()
        if switched:
            print()
            print(f"⏰ {switched.label} - time to shift")
            print(format_status_line(switched))

    timer = TickTimer(settings.tick_interval_sec, tick)
    timer.start()

    try:
        timer.run_forever()
    except KeyboardInterrupt:
        timer.cancel()
        print()
        print("=" * 80)
        print(f"Stopped. Current posture: {service.status().display_title}")
        print("=" * 80)

    return 0


def cmd_status(settings: ShiftySettings) -> int:
    state = StateStore(str(settings.storage_dir)).load()
    config = ConfigManager(str(settings.config_path)).load_config()
    interval = config.interval_range()

    print(f"Options: {', '.join(option.display_title for option in config.sanitized_options())}")
    print(f"Interval: {interval.min_minutes}-{interval.max_minutes} min")

    if state is None:
        print("No saved rotation yet. Start one with: python shifty_runner.py run")
        return 0

    print(f"Current: {state.current_label}")
    print(f"Next change: {format_local_time(state.next_change_at)}")
    print(f"Queue: {', '.join(state.queue_labels) or '-'}")
    return 0


def cmd_add(settings: ShiftySettings, label: str, icon: str) -> int:
    # Writes config.json only; a running instance merges it on its next tick
    config_manager = ConfigManager(str(settings.config_path))
    config = config_manager.load_config()
    options = config.sanitized_options()

    option = make_option(label, icon)
    if not option.label:
        print("Rejected: label is empty")
        return 1
    if find_option(options, option.label) is not None:
        print(f"Rejected: {option.label} already exists")
        return 1

    config.options = list(options) + [option]
    if not config_manager.save_config(config):
        print("ERROR: Could not write config.json")
        return 1

    print(f"Added {option.label}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Shifty posture rotation")
    parser.add_argument("--storage-dir", type=str, default=None,
                        help="Directory for config.json/state.json (default: per-user app data)")
    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Run the rotation loop")
    run_parser.add_argument("--tick-seconds", type=float, default=None,
                            help="Tick interval in seconds (default: 30)")
    run_parser.add_argument("--backend", type=str, choices=BACKENDS, default=None,
                            help="Notification backend (default: osascript)")
    run_parser.add_argument("--dry-run", action="store_true",
                            help="Print notifications instead of posting them")

    subparsers.add_parser("status", help="Show the saved rotation")

    add_parser = subparsers.add_parser("add", help="Add a posture option")
    add_parser.add_argument("label", type=str, help="Option label (e.g. WALK)")
    add_parser.add_argument("icon", type=str, nargs="?", default="", help="Option icon (e.g. 🚶)")

    args = parser.parse_args(argv)
    settings = ShiftySettings.from_env(storage_dir=args.storage_dir)

    if args.command == "add":
        return cmd_add(settings, args.label, args.icon)
    if args.command == "status":
        return cmd_status(settings)

    if getattr(args, "tick_seconds", None):
        if args.tick_seconds <= 0:
            print("ERROR: --tick-seconds must be positive")
            return 1
        settings.tick_interval_sec = args.tick_seconds
    if getattr(args, "backend", None):
        settings.notification_backend = args.backend
    if getattr(args, "dry_run", False):
        settings.dry_run = True

    if settings.notification_backend not in BACKENDS:
        print(f"ERROR: Unknown notification backend: {settings.notification_backend}")
        return 1

    return cmd_run(settings)


if __name__ == "__main__":
    sys.exit(main())
