"""System tray icon and menu."""

from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal
from PyQt6.QtGui import QColor, QIcon, QImage, QPixmap
from PyQt6.QtWidgets import QMenu, QSystemTrayIcon

from mullvad_status.constants import (
    APP_NAME,
    COLOR_CONNECTED,
    COLOR_DISCONNECTED,
    COLOR_IDLE,
    TRAY_ICON_SIZE,
)


def in_shield(x: int, y: int, size: int = TRAY_ICON_SIZE) -> bool:
    """Whether a pixel lies inside the shield: round top, pointed bottom."""
    radius = size / 2.5
    dx = x - size / 2.0
    dy = y - size / 2.0
    if y < size // 2:
        return dx * dx + dy * dy < radius * radius
    return abs(dx) < radius * (1.0 - (y - size / 2.0) / (size / 2.0))


def create_shield_image(color: tuple, size: int = TRAY_ICON_SIZE) -> QImage:
    """Draw the shield in a single colour on a transparent background.

    Args:
        color: (r, g, b) tuple
        size: Edge length in pixels

    Returns:
        QImage in RGBA format
    """
    image = QImage(size, size, QImage.Format.Format_RGBA8888)
    image.fill(QColor(0, 0, 0, 0))
    fill = QColor(*color)
    for y in range(size):
        for x in range(size):
            if in_shield(x, y, size):
                image.setPixelColor(x, y, fill)
    return image


def create_tray_icon(color: tuple) -> QIcon:
    return QIcon(QPixmap.fromImage(create_shield_image(color)))


class StatusTrayIcon(QObject):
    """Tray icon reflecting the VPN state."""

    # Signals
    show_requested = pyqtSignal()
    toggle_window_requested = pyqtSignal()
    quit_requested = pyqtSignal()

    def __init__(self, parent: Optional[QObject] = None):
        """Initialize the tray icon.

        Args:
            parent: Parent QObject
        """
        super().__init__(parent)

        self.tray = QSystemTrayIcon(parent)
        self.tray.setToolTip(APP_NAME)

        self._connected: Optional[bool] = None
        self._icons = {
            None: create_tray_icon(COLOR_IDLE),
            True: create_tray_icon(COLOR_CONNECTED),
            False: create_tray_icon(COLOR_DISCONNECTED),
        }

        self._setup_menu()
        self._update_icon()

        self.tray.activated.connect(self._on_activated)

    def _setup_menu(self) -> None:
        """Set up the tray context menu."""
        self.menu = QMenu()

        show_action = self.menu.addAction("Show Status")
        show_action.triggered.connect(self.show_requested.emit)

        self.menu.addSeparator()

        quit_action = self.menu.addAction("Quit")
        quit_action.triggered.connect(self.quit_requested.emit)

        self.tray.setContextMenu(self.menu)

    def _on_activated(self, reason: QSystemTrayIcon.ActivationReason) -> None:
        """Left click shows or hides the status window."""
        if reason == QSystemTrayIcon.ActivationReason.Trigger:
            self.toggle_window_requested.emit()

    def set_connected(self, connected: bool) -> None:
        """Update icon and tooltip.

        Args:
            connected: Whether traffic goes through Mullvad
        """
        self._connected = connected
        self._update_icon()
        state = "Connected" if connected else "Disconnected"
        self.tray.setToolTip(f"Mullvad VPN: {state}")

    def is_connected(self) -> Optional[bool]:
        """Last state shown, None before the first update."""
        return self._connected

    def _update_icon(self) -> None:
        self.tray.setIcon(self._icons[self._connected])

    def show(self) -> None:
        self.tray.show()

    def hide(self) -> None:
        self.tray.hide()

    @staticmethod
    def is_system_tray_available() -> bool:
        return QSystemTrayIcon.isSystemTrayAvailable()
