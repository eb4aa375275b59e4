"""Constants and configuration for the Mullvad status indicator."""

import os
import sys
from pathlib import Path

# Application info
APP_NAME = "Mullvad Connection Status"
APP_ID = "com.github.mullvad-status"
ORG_NAME = "mullvad-status"
EXECUTABLE_NAME = "mullvad-status"
VERSION = "0.1.0"

# Platform-specific paths
if sys.platform == "darwin":
    STATE_DIR = Path.home() / "Library" / "Application Support" / "mullvad-status"
    LOGS_DIR = Path.home() / "Library" / "Logs" / "mullvad-status"
elif sys.platform == "win32":
    _appdata = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    STATE_DIR = _appdata / "mullvad-status"
    LOGS_DIR = STATE_DIR / "logs"
else:
    # Linux paths (XDG)
    STATE_DIR = Path.home() / ".cache" / "mullvad-status"
    LOGS_DIR = Path.home() / ".local" / "share" / "mullvad-status" / "logs"

LOG_FILE = LOGS_DIR / "mullvad-status.log"

# Status probe
STATUS_API_URL = "https://am.i.mullvad.net/json"
STATUS_API_TIMEOUT = 10  # seconds
POLL_INTERVAL = 15  # seconds

# Command/event boundary names
CMD_GET_VPN_STATUS = "get_vpn_status"
CMD_CHECK_AUTOSTART = "check_autostart"
CMD_TOGGLE_AUTOSTART = "toggle_autostart"
EVENT_STATUS_CHANGED = "vpn-status-changed"

# Persisted preferences
DARK_MODE_KEY = "darkMode"
DARK_MARKER = "dark"

# Tray icon colours (RGB)
COLOR_IDLE = (0x29, 0x4D, 0x73)
COLOR_CONNECTED = (0x44, 0xAD, 0x4D)
COLOR_DISCONNECTED = (0xE3, 0x40, 0x39)
TRAY_ICON_SIZE = 32
