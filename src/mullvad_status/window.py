"""Status window: status card, connection details and settings."""

import asyncio
from typing import Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QCloseEvent
from PyQt6.QtWidgets import (
    QCheckBox,
    QFormLayout,
    QFrame,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from mullvad_status.constants import APP_NAME, DARK_MARKER
from mullvad_status.models import ConnectionStatus
from mullvad_status.preferences import OptimisticToggle, PersistedFlag, SettingsStore
from mullvad_status.sync import StatusSync

LIGHT_STYLESHEET = """
QWidget { background: #ffffff; color: #1f2937; }
QLabel[muted="true"] { color: #6b7280; }
QLabel#badge[state="active"] { background: #44ad4d; color: white; border-radius: 6px; padding: 2px 8px; }
QLabel#badge[state="inactive"] { background: #e34039; color: white; border-radius: 6px; padding: 2px 8px; }
"""

DARK_STYLESHEET = """
QWidget { background: #111827; color: #f3f4f6; }
QLabel[muted="true"] { color: #9ca3af; }
QLabel#badge[state="active"] { background: #44ad4d; color: white; border-radius: 6px; padding: 2px 8px; }
QLabel#badge[state="inactive"] { background: #e34039; color: white; border-radius: 6px; padding: 2px 8px; }
"""


def _muted_label(text: str = "") -> QLabel:
    label = QLabel(text)
    label.setProperty("muted", True)
    return label


class StatusCard(QFrame):
    """Prominent connected/disconnected banner."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)

        layout = QHBoxLayout(self)
        text_layout = QVBoxLayout()
        self.title_label = QLabel()
        font = self.title_label.font()
        font.setPointSize(font.pointSize() + 6)
        font.setBold(True)
        self.title_label.setFont(font)
        self.subtitle_label = _muted_label()
        text_layout.addWidget(self.title_label)
        text_layout.addWidget(self.subtitle_label)
        layout.addLayout(text_layout)
        layout.addStretch()

        self.badge = QLabel()
        self.badge.setObjectName("badge")
        layout.addWidget(self.badge)

        self.set_connected(False)

    def set_connected(self, connected: bool) -> None:
        if connected:
            self.title_label.setText("Connected")
            self.subtitle_label.setText("Your traffic is protected")
            self.badge.setText("ACTIVE")
            self.badge.setProperty("state", "active")
        else:
            self.title_label.setText("Disconnected")
            self.subtitle_label.setText("No VPN connection detected")
            self.badge.setText("INACTIVE")
            self.badge.setProperty("state", "inactive")
        # Re-evaluate the property selectors
        self.badge.style().unpolish(self.badge)
        self.badge.style().polish(self.badge)


class ConnectionDetails(QGroupBox):
    """IP, location, server and protocol of the current connection."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Connection Details", parent)
        self._layout = QFormLayout(self)
        self._values: dict[str, QLabel] = {}
        for label in ("IP Address", "Location", "Server", "Protocol"):
            value = _muted_label()
            value.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)
            self._values[label] = value
            self._layout.addRow(label, value)
        self.setVisible(False)

    def set_status(self, status: Optional[ConnectionStatus]) -> None:
        """Show details for a connected status, hide otherwise."""
        rows = status.details() if status is not None else []
        for label, value in rows:
            self._values[label].setText(value)
        self.setVisible(bool(rows))

    def value(self, label: str) -> str:
        return self._values[label].text()


class SettingsPanel(QGroupBox):
    """Launch-at-login and dark mode switches."""

    def __init__(
        self,
        autostart: OptimisticToggle,
        dark_mode: PersistedFlag,
        parent: Optional[QWidget] = None
    ):
        super().__init__("Settings", parent)
        self._autostart = autostart
        self._dark_mode = dark_mode
        self._tasks: set[asyncio.Task] = set()

        layout = QVBoxLayout(self)

        self.autostart_checkbox = QCheckBox("Start on Boot")
        self.autostart_checkbox.setToolTip(
            "Launch the app automatically when you log in"
        )
        self.autostart_checkbox.setChecked(autostart.value)
        self.autostart_checkbox.setEnabled(autostart.enabled)
        # clicked only fires for user input, not for setChecked()
        self.autostart_checkbox.clicked.connect(self._on_autostart_clicked)
        autostart.value_changed.connect(self._sync_autostart)
        autostart.enabled_changed.connect(self.autostart_checkbox.setEnabled)
        layout.addWidget(self.autostart_checkbox)

        self.dark_mode_checkbox = QCheckBox("Dark Mode")
        self.dark_mode_checkbox.setToolTip("Switch between light and dark theme")
        self.dark_mode_checkbox.setChecked(dark_mode.value)
        self.dark_mode_checkbox.clicked.connect(self._on_dark_mode_clicked)
        dark_mode.value_changed.connect(self._sync_dark_mode)
        layout.addWidget(self.dark_mode_checkbox)

    def _on_autostart_clicked(self, checked: bool) -> None:
        task = asyncio.ensure_future(self._autostart.toggle(checked))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _sync_autostart(self, value: bool) -> None:
        self.autostart_checkbox.blockSignals(True)
        self.autostart_checkbox.setChecked(value)
        self.autostart_checkbox.blockSignals(False)

    def _on_dark_mode_clicked(self, checked: bool) -> None:
        if checked != self._dark_mode.value:
            self._dark_mode.toggle()

    def _sync_dark_mode(self, value: bool) -> None:
        self.dark_mode_checkbox.blockSignals(True)
        self.dark_mode_checkbox.setChecked(value)
        self.dark_mode_checkbox.blockSignals(False)


class StatusWindow(QWidget):
    """Main window. Closing it only hides it; the tray keeps running."""

    def __init__(
        self,
        sync: StatusSync,
        autostart: OptimisticToggle,
        settings: SettingsStore,
        parent: Optional[QWidget] = None
    ):
        """Initialize the window.

        Args:
            sync: Source of the displayed connection status
            autostart: Launch-at-login preference
            settings: Store backing the dark mode flag
            parent: Parent widget
        """
        super().__init__(parent)
        self._markers: set[str] = set()

        self.setWindowTitle(APP_NAME)
        self.setMinimumWidth(380)

        self.dark_mode = PersistedFlag(settings, self)

        layout = QVBoxLayout(self)
        self._stack = QStackedWidget()
        layout.addWidget(self._stack)

        self.loading_label = _muted_label("Loading...")
        self.loading_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._stack.addWidget(self.loading_label)

        content = QWidget()
        content_layout = QVBoxLayout(content)
        self.status_card = StatusCard()
        self.details = ConnectionDetails()
        self.settings_panel = SettingsPanel(autostart, self.dark_mode)
        content_layout.addWidget(self.status_card)
        content_layout.addWidget(self.details)
        content_layout.addWidget(self.settings_panel)
        content_layout.addStretch()
        self._stack.addWidget(content)

        sync.status_changed.connect(self.set_status)
        sync.loading_changed.connect(self.set_loading)
        self.set_status(sync.status)
        self.set_loading(sync.loading)

    def set_status(self, status: Optional[ConnectionStatus]) -> None:
        self.status_card.set_connected(status.connected if status else False)
        self.details.set_status(status)

    def set_loading(self, loading: bool) -> None:
        self._stack.setCurrentIndex(0 if loading else 1)

    def is_loading(self) -> bool:
        return self._stack.currentIndex() == 0

    def set_marker(self, name: str, enabled: bool) -> None:
        """Apply or remove a presentation marker such as "dark"."""
        if enabled:
            self._markers.add(name)
        else:
            self._markers.discard(name)
        self.setProperty(name, enabled)
        self.setStyleSheet(DARK_STYLESHEET if DARK_MARKER in self._markers else LIGHT_STYLESHEET)

    def has_marker(self, name: str) -> bool:
        return name in self._markers

    def toggle_visible(self) -> None:
        if self.isVisible():
            self.hide()
        else:
            self.show_and_raise()

    def show_and_raise(self) -> None:
        self.show()
        self.raise_()
        self.activateWindow()

    def closeEvent(self, event: QCloseEvent) -> None:
        event.ignore()
        self.hide()
