"""Background VPN status monitor.

Polls the connection check API, remembers the last result for the
``get_vpn_status`` command and pushes every fresh snapshot on the
``vpn-status-changed`` channel. Both carry the plain mapping from
``ConnectionStatus.to_payload()``.
"""

import asyncio
import logging
from typing import Callable, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from mullvad_status.bridge import CommandBridge
from mullvad_status.checker import StatusCheckError, check_vpn_status
from mullvad_status.constants import EVENT_STATUS_CHANGED, POLL_INTERVAL
from mullvad_status.models import ConnectionStatus

log = logging.getLogger(__name__)


class StatusUnavailable(Exception):
    """No poll has completed yet."""


class StatusMonitor(QObject):
    """Periodic status poller."""

    # Signals
    status_updated = pyqtSignal(object)  # every successful poll
    connection_changed = pyqtSignal(object)  # connected flag flipped

    def __init__(
        self,
        bridge: CommandBridge,
        checker: Callable[[], ConnectionStatus] = check_vpn_status,
        interval: float = POLL_INTERVAL,
        parent: Optional[QObject] = None
    ):
        """Initialize the monitor.

        Args:
            bridge: Channel the snapshots are pushed on
            checker: Blocking probe returning a ConnectionStatus
            interval: Seconds between polls
            parent: Parent QObject
        """
        super().__init__(parent)
        self._bridge = bridge
        self._checker = checker
        self._interval = interval
        self._last_status: Optional[ConnectionStatus] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def last_status(self) -> Optional[ConnectionStatus]:
        return self._last_status

    async def get_status(self) -> dict:
        """Handler for the ``get_vpn_status`` command.

        Returns:
            The last status as a plain mapping

        Raises:
            StatusUnavailable: Before the first successful poll
        """
        if self._last_status is None:
            raise StatusUnavailable("Status not available yet")
        return self._last_status.to_payload()

    async def poll_once(self) -> Optional[ConnectionStatus]:
        """Run one probe and publish the result.

        Returns:
            The new status, or None if the probe failed
        """
        try:
            status = await asyncio.to_thread(self._checker)
        except StatusCheckError as e:
            log.error("Failed to check VPN status: %s", e)
            return None

        previous = self._last_status
        changed = previous is None or previous.connected != status.connected
        self._last_status = status

        log.debug("VPN status: connected=%s ip=%s", status.connected, status.ip)
        self.status_updated.emit(status)
        self._bridge.emit(EVENT_STATUS_CHANGED, status.to_payload())

        if changed:
            log.info("VPN %s", "connected" if status.connected else "disconnected")
            self.connection_changed.emit(status)

        return status

    def start(self) -> None:
        """Start polling; the first probe runs immediately."""
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.ensure_future(self._run())

    def stop(self) -> None:
        """Stop polling."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                log.exception("Unexpected error while polling VPN status")
            await asyncio.sleep(self._interval)
