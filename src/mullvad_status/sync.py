"""Keeps the displayed connection status in step with the background monitor."""

import asyncio
import logging
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from mullvad_status.bridge import CommandBridge, CommandError, Unlisten
from mullvad_status.constants import CMD_GET_VPN_STATUS, EVENT_STATUS_CHANGED
from mullvad_status.models import ConnectionStatus

log = logging.getLogger(__name__)


class StatusSync(QObject):
    """Owner of the current ``ConnectionStatus`` shown by the window.

    ``start()`` runs the initial fetch and opens the push subscription
    concurrently. Neither producer is ordered against the other: an event
    that lands before a slow fetch is overwritten by the fetch result.
    """

    # Signals
    status_changed = pyqtSignal(object)  # ConnectionStatus or None
    loading_changed = pyqtSignal(bool)
    error = pyqtSignal(str)

    def __init__(self, bridge: CommandBridge, parent: Optional[QObject] = None):
        """Initialize the status sync.

        Args:
            bridge: Command/event boundary
            parent: Parent QObject
        """
        super().__init__(parent)
        self._bridge = bridge
        self._status: Optional[ConnectionStatus] = None
        self._loading = True
        self._started = False
        self._stopped = False
        self._unlisten: Optional[Unlisten] = None
        self._tasks: list[asyncio.Task] = []

    @property
    def status(self) -> Optional[ConnectionStatus]:
        return self._status

    @property
    def loading(self) -> bool:
        return self._loading

    def start(self) -> None:
        """Fetch the initial status and subscribe to updates.

        Raises:
            RuntimeError: If called more than once
        """
        if self._started:
            raise RuntimeError("StatusSync.start() called twice")
        self._started = True

        self._tasks = [
            asyncio.ensure_future(self._fetch_initial()),
            asyncio.ensure_future(self._subscribe()),
        ]

    def stop(self) -> None:
        """Stop receiving updates.

        If the subscription is still opening, it is closed as soon as it
        opens. Results that arrive after this call are dropped.
        """
        if self._stopped:
            return
        self._stopped = True

        if self._unlisten is not None:
            self._unlisten()
            self._unlisten = None

    async def wait_started(self) -> None:
        """Wait until the initial fetch and the subscription have settled."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _fetch_initial(self) -> None:
        try:
            payload = await self._bridge.invoke(CMD_GET_VPN_STATUS)
            status = ConnectionStatus.from_payload(payload)
        except CommandError as e:
            log.error("Failed to fetch VPN status: %s", e)
        except (KeyError, TypeError) as e:
            log.error("Malformed VPN status %r: %s", payload, e)
        else:
            if not self._stopped:
                self._set_status(status)
        finally:
            if not self._stopped:
                self._set_loading(False)

    async def _subscribe(self) -> None:
        try:
            unlisten = await self._bridge.listen(EVENT_STATUS_CHANGED, self._on_event)
        except Exception as e:
            log.error("Failed to subscribe to %s: %s", EVENT_STATUS_CHANGED, e)
            if not self._stopped:
                self.error.emit(f"Status updates unavailable: {e}")
            return

        if self._stopped:
            # Teardown happened while the subscription was opening
            unlisten()
            return
        self._unlisten = unlisten

    def _on_event(self, payload: dict) -> None:
        if self._stopped:
            return
        try:
            status = ConnectionStatus.from_payload(payload)
        except (KeyError, TypeError) as e:
            log.error("Ignoring malformed %s payload %r: %s", EVENT_STATUS_CHANGED, payload, e)
            return
        self._set_status(status)

    def _set_status(self, status: ConnectionStatus) -> None:
        self._status = status
        self.status_changed.emit(status)

    def _set_loading(self, loading: bool) -> None:
        if self._loading == loading:
            return
        self._loading = loading
        self.loading_changed.emit(loading)
