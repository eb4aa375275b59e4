"""Desktop notifications for connection changes."""

import logging
import subprocess
import sys

from PyQt6.QtWidgets import QSystemTrayIcon

from mullvad_status.constants import APP_NAME
from mullvad_status.models import ConnectionStatus

log = logging.getLogger(__name__)

IS_MAC = sys.platform == "darwin"

NATIVE_SCRIPT = [
    "-e", "on run argv",
    "-e", "display notification (item 2 of argv) with title (item 1 of argv)",
    "-e", "end run",
]


class NotificationManager:
    """Shows notifications via the system tray or natively on macOS."""

    def __init__(self, tray_icon: QSystemTrayIcon):
        """Initialize the notification manager.

        Args:
            tray_icon: System tray icon to use for notifications
        """
        self.tray = tray_icon
        self._use_native = IS_MAC

    def _show_native(self, title: str, message: str) -> bool:
        """Show a native macOS notification using osascript.

        The texts are passed as script arguments, never spliced into the
        AppleScript source.

        Returns:
            True if successful
        """
        try:
            subprocess.run(
                ["osascript", *NATIVE_SCRIPT, title, message],
                capture_output=True,
                timeout=5,
                check=True
            )
            return True
        except (OSError, subprocess.SubprocessError) as e:
            log.debug("Native notification failed: %s", e)
            return False

    def show(
        self,
        title: str,
        message: str,
        critical: bool = False,
        duration_ms: int = 5000
    ) -> None:
        """Show a desktop notification.

        Args:
            title: Notification title
            message: Notification message
            critical: If True, show as a warning notification
            duration_ms: How long to show the notification (milliseconds)
        """
        if self._use_native and self._show_native(title, message):
            return

        icon = (
            QSystemTrayIcon.MessageIcon.Warning if critical
            else QSystemTrayIcon.MessageIcon.Information
        )
        self.tray.showMessage(title, message, icon, duration_ms)

    def connection_changed(self, status: ConnectionStatus) -> None:
        """Announce a connect or disconnect.

        Args:
            status: The snapshot whose connected flag changed
        """
        if status.connected:
            self.show(APP_NAME, f"Connected to {status.country or 'Mullvad'} server")
        else:
            self.show(APP_NAME, "VPN connection lost", critical=True)
