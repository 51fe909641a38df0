"""
macOS notification engine for posture switches.

Posts "Time to shift" notifications through osascript, terminal-notifier
or pync. Delivery is best-effort: failures are printed and reported as
False, never raised.
"""

import time
import subprocess
from typing import Optional

from .platform import is_macos


BACKENDS = ("osascript", "terminal-notifier", "pync")


def _escape_applescript(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class NotificationEngine:
    """
    Notification engine for rotation advances.

    One backend per engine; no fallback chain between backends.
    """

    def __init__(
        self,
        app_name: str = "Shifty",
        backend: str = "osascript",
        dry_run: bool = False
    ):
        """
        Initialize notification engine.

        Args:
            app_name: Application name (notification title)
            backend: One of "osascript", "terminal-notifier", "pync"
            dry_run: If True, print instead of posting
        """
        if backend not in BACKENDS:
            raise ValueError(f"Unknown notification backend: {backend}")

        self.app_name = app_name
        self.backend = backend
        self.dry_run = dry_run
        self.last_notification = None

    def notify_shift(self, display_title: str) -> bool:
        """Post the standard 'Time to shift' notification."""
        return self.post_notification(
            title=self.app_name,
            message=display_title,
            subtitle="Time to shift"
        )

    def post_notification(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None
    ) -> bool:
        """
        Post a notification with the configured backend.

        Returns:
            True if the notification was handed to the OS
        """
        if self.dry_run:
            print(f"  [NOTIFICATION] (dry run) {title}: {message}")
            self._remember(title, message)
            return True

        if not is_macos():
            print("  [NOTIFICATION] Skipped: notifications are only supported on macOS")
            return False

        if self.backend == "terminal-notifier":
            posted = self._post_via_terminal_notifier(title, message, subtitle)
        elif self.backend == "pync":
            posted = self._post_via_pync(title, message, subtitle)
        else:
            posted = self._post_via_osascript(title, message, subtitle)

        if posted:
            self._remember(title, message)
        return posted

    def _remember(self, title: str, message: str):
        self.last_notification = {
            "title": title,
            "message": message,
            "posted_at": time.time()
        }

    def _post_via_osascript(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None
    ) -> bool:
        """Post notification using osascript (AppleScript)."""
        script = f'display notification "{_escape_applescript(message)}" with title "{_escape_applescript(title)}"'
        if subtitle:
            script += f' subtitle "{_escape_applescript(subtitle)}"'

        try:
            subprocess.run(
                ["osascript", "-e", script],
                capture_output=True,
                timeout=2.0
            )
            return True
        except (subprocess.TimeoutExpired, OSError) as e:
            print(f"  [NOTIFICATION] Warning: osascript failed: {e}")
            return False

    def _post_via_terminal_notifier(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None
    ) -> bool:
        """
        Post notification using terminal-notifier.

        Non-blocking: the process is left running.
        Install: brew install terminal-notifier
        """
        cmd = [
            "terminal-notifier",
            "-title", title,
            "-message", message,
            "-sound", "default",
            "-group", self.app_name
        ]
        if subtitle:
            cmd.extend(["-subtitle", subtitle])

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True
            )

            # Give it 0.1 seconds to surface immediate failures
            try:
                _, stderr = proc.communicate(timeout=0.1)
                if stderr:
                    print(f"  [NOTIFICATION] Warning: {stderr.strip()}")
            except subprocess.TimeoutExpired:
                pass

            return True

        except OSError as e:
            print(f"  [NOTIFICATION] Error: terminal-notifier unavailable: {e}")
            return False

    def _post_via_pync(
        self,
        title: str,
        message: str,
        subtitle: Optional[str] = None
    ) -> bool:
        """Post notification using pync (wraps terminal-notifier)."""
        try:
            import pync

            pync.notify(
                message,
                title=title,
                subtitle=subtitle or "",
                group=self.app_name
            )
            return True

        except Exception as e:
            print(f"  [NOTIFICATION] Error: pync failed: {e}")
            return False
