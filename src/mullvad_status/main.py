"""Main application controller for the Mullvad status indicator."""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import qasync
from PyQt6.QtCore import QSettings
from PyQt6.QtWidgets import QApplication

from mullvad_status.autostart import is_autostart_enabled, set_autostart
from mullvad_status.bridge import CommandBridge
from mullvad_status.constants import (
    APP_ID,
    APP_NAME,
    CMD_CHECK_AUTOSTART,
    CMD_GET_VPN_STATUS,
    CMD_TOGGLE_AUTOSTART,
    LOG_FILE,
    ORG_NAME,
    POLL_INTERVAL,
    VERSION,
)
from mullvad_status.monitor import StatusMonitor
from mullvad_status.notifications import NotificationManager
from mullvad_status.preferences import OptimisticToggle
from mullvad_status.sync import StatusSync
from mullvad_status.tray import StatusTrayIcon
from mullvad_status.window import StatusWindow

log = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """Log to stderr and to the per-user log file."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    try:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(LOG_FILE))
    except OSError as e:
        print(f"Cannot write log file {LOG_FILE}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
    )


def register_commands(bridge: CommandBridge, monitor: StatusMonitor) -> None:
    """Expose the monitor and the autostart helpers as commands."""
    bridge.register(CMD_GET_VPN_STATUS, monitor.get_status)
    bridge.register(CMD_CHECK_AUTOSTART, is_autostart_enabled)
    bridge.register(CMD_TOGGLE_AUTOSTART, set_autostart)


class StatusApplication:
    """Wires the monitor, the status window and the tray icon together."""

    def __init__(
        self,
        app: QApplication,
        interval: float = POLL_INTERVAL,
        hidden: bool = False
    ):
        """Initialize the application.

        Args:
            app: The running QApplication
            interval: Seconds between status polls
            hidden: Start with only the tray icon visible
        """
        self.app = app
        self._hidden = hidden
        self._quit_future: Optional[asyncio.Future] = None
        self._tasks: set[asyncio.Task] = set()

        self.bridge = CommandBridge()
        self.monitor = StatusMonitor(self.bridge, interval=interval)
        register_commands(self.bridge, self.monitor)

        self.sync = StatusSync(self.bridge)
        self.autostart = OptimisticToggle(
            self.bridge,
            CMD_CHECK_AUTOSTART,
            CMD_TOGGLE_AUTOSTART,
            name="auto-start",
        )
        self.settings = QSettings(ORG_NAME, APP_NAME)

        self.window = StatusWindow(self.sync, self.autostart, self.settings)

        if not StatusTrayIcon.is_system_tray_available():
            log.warning("System tray is not available; showing the window instead")
            self._hidden = False

        self.tray = StatusTrayIcon()
        self.notifications = NotificationManager(self.tray.tray)

        # Connect signals
        self.monitor.connection_changed.connect(self.notifications.connection_changed)
        self.monitor.status_updated.connect(
            lambda status: self.tray.set_connected(status.connected)
        )
        self.sync.error.connect(self._on_sync_error)
        self.tray.show_requested.connect(self.window.show_and_raise)
        self.tray.toggle_window_requested.connect(self.window.toggle_visible)
        self.tray.quit_requested.connect(self.quit)

    async def run(self) -> int:
        """Run until the user quits.

        Returns:
            Exit code
        """
        self._quit_future = asyncio.get_running_loop().create_future()

        self.tray.show()
        self.monitor.start()
        self.sync.start()
        task = asyncio.ensure_future(self.autostart.initialize())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        if not self._hidden:
            self.window.show_and_raise()

        log.info("%s %s started", APP_NAME, VERSION)
        return await self._quit_future

    def _on_sync_error(self, message: str) -> None:
        log.warning(message)

    def quit(self) -> None:
        """Tear down and leave the event loop."""
        log.info("Shutting down")
        self.sync.stop()
        self.autostart.stop()
        self.monitor.stop()
        self.tray.hide()
        if self._quit_future is not None and not self._quit_future.done():
            self._quit_future.set_result(0)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mullvad-status",
        description="Tray indicator showing whether traffic goes through Mullvad VPN",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--interval",
        type=float,
        default=POLL_INTERVAL,
        metavar="SECONDS",
        help=f"Seconds between status checks (default: {POLL_INTERVAL})",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        help="Start with only the tray icon (used when launched at login)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    args = parser.parse_args(argv)
    if args.interval <= 0:
        parser.error("--interval must be positive")
    return args


def main() -> int:
    """Main entry point.

    Returns:
        Exit code
    """
    args = parse_args()
    setup_logging(args.debug)

    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_NAME)
    app.setDesktopFileName(APP_ID)
    app.setQuitOnLastWindowClosed(False)  # Keep running in tray

    loop = qasync.QEventLoop(app)
    asyncio.set_event_loop(loop)

    status_app = StatusApplication(app, interval=args.interval, hidden=args.hidden)
    with loop:
        return loop.run_until_complete(status_app.run())


if __name__ == "__main__":
    sys.exit(main())
