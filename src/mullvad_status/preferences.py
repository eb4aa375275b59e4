"""User preferences shown in the settings card.

- OptimisticToggle: preference stored outside the app (launch at login)
- PersistedFlag: preference stored in local settings (dark mode)
"""

import logging
from typing import Any, Optional, Protocol

from PyQt6.QtCore import QObject, pyqtSignal

from mullvad_status.bridge import CommandBridge, CommandError
from mullvad_status.constants import DARK_MARKER, DARK_MODE_KEY

log = logging.getLogger(__name__)


class OptimisticToggle(QObject):
    """Boolean preference backed by an external read/write command pair.

    A toggle shows the new value immediately and reverts to the value held
    before the toggle if the write is rejected. Only one write may be in
    flight; the control is disabled while ``pending`` is True.
    """

    # Signals
    value_changed = pyqtSignal(bool)
    enabled_changed = pyqtSignal(bool)  # False while loading or pending

    def __init__(
        self,
        bridge: CommandBridge,
        read_command: str,
        write_command: str,
        name: str = "preference",
        parent: Optional[QObject] = None
    ):
        """Initialize the toggle.

        Args:
            bridge: Command/event boundary
            read_command: Command returning the current value
            write_command: Command taking ``enable`` and applying it
            name: Used in log messages
            parent: Parent QObject
        """
        super().__init__(parent)
        self._bridge = bridge
        self._read_command = read_command
        self._write_command = write_command
        self._name = name
        self._value = False
        self._loading = True
        self._pending = False
        self._stopped = False

    @property
    def value(self) -> bool:
        return self._value

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def enabled(self) -> bool:
        """Whether the control accepts input."""
        return not (self._loading or self._pending)

    async def initialize(self) -> None:
        """Read the current value. On failure the value stays False."""
        try:
            value = await self._bridge.invoke(self._read_command)
        except CommandError as e:
            log.error("Failed to check %s status: %s", self._name, e)
        else:
            if not self._stopped:
                self._set_value(bool(value))
        finally:
            if not self._stopped:
                self._loading = False
                self.enabled_changed.emit(self.enabled)

    async def toggle(self, enable: bool) -> bool:
        """Apply a new value optimistically and write it.

        Args:
            enable: Requested value

        Returns:
            True if the write succeeded, False if it failed or was refused
            because another write is still pending
        """
        if self._stopped:
            log.warning("Ignoring %s toggle after stop", self._name)
            return False
        if self._pending:
            log.warning("Ignoring %s toggle while a write is pending", self._name)
            return False

        previous = self._value
        self._pending = True
        self.enabled_changed.emit(self.enabled)
        self._set_value(enable)

        try:
            await self._bridge.invoke(self._write_command, enable=enable)
        except CommandError as e:
            log.error("Failed to toggle %s: %s", self._name, e)
            if not self._stopped:
                self._set_value(previous)
            return False
        finally:
            self._pending = False
            if not self._stopped:
                self.enabled_changed.emit(self.enabled)

        return True

    def stop(self) -> None:
        """Stop reporting results.

        Reads and writes already in flight run to completion but no longer
        change the value or the enabled state.
        """
        self._stopped = True

    def _set_value(self, value: bool) -> None:
        if self._value == value:
            return
        self._value = value
        self.value_changed.emit(value)


class SettingsStore(Protocol):
    """Synchronous key-value store (the subset of QSettings we use)."""

    def value(self, key: str, defaultValue: Any = None) -> Any: ...

    def setValue(self, key: str, value: Any) -> None: ...


class ThemeRoot(Protocol):
    """Root of the UI that carries presentation markers."""

    def set_marker(self, name: str, enabled: bool) -> None: ...


class PersistedFlag(QObject):
    """Dark mode flag mirrored into local settings.

    Every value the flag takes, including the one read at construction, is
    written back as "true"/"false" and pushed to the theme root.
    """

    # Signals
    value_changed = pyqtSignal(bool)

    def __init__(
        self,
        store: SettingsStore,
        root: ThemeRoot,
        key: str = DARK_MODE_KEY,
        marker: str = DARK_MARKER,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self._store = store
        self._root = root
        self._key = key
        self._marker = marker
        self._value = self.read()
        self._apply()

    @property
    def value(self) -> bool:
        return self._value

    def read(self) -> bool:
        """Read the stored value; anything but "true" counts as False."""
        return self._store.value(self._key, None) == "true"

    def toggle(self) -> bool:
        """Flip the flag.

        Returns:
            The new value
        """
        self._value = not self._value
        self._apply()
        self.value_changed.emit(self._value)
        return self._value

    def _apply(self) -> None:
        self._root.set_marker(self._marker, self._value)
        self._store.setValue(self._key, "true" if self._value else "false")
