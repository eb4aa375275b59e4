"""Launch-at-login management.

- Windows: value under HKCU\\Software\\Microsoft\\Windows\\CurrentVersion\\Run
- macOS: LaunchAgent plist in ~/Library/LaunchAgents/
- Linux: XDG Desktop Entry in ~/.config/autostart/
"""

import logging
import os
import plistlib
import shutil
import sys
from pathlib import Path

from mullvad_status.constants import APP_ID, APP_NAME, EXECUTABLE_NAME

log = logging.getLogger(__name__)

RUN_KEY = r"Software\Microsoft\Windows\CurrentVersion\Run"

# Platform-specific paths
if sys.platform == "darwin":
    AUTOSTART_DIR = Path.home() / "Library" / "LaunchAgents"
    AUTOSTART_FILE = AUTOSTART_DIR / f"{APP_ID}.plist"
else:
    AUTOSTART_DIR = Path.home() / ".config" / "autostart"
    AUTOSTART_FILE = AUTOSTART_DIR / f"{APP_ID}.desktop"


class AutostartError(Exception):
    """Raised when the login item cannot be read or changed."""


def _find_executable() -> str:
    """Find the command that launches the application."""
    if getattr(sys, "frozen", False):
        return sys.executable

    appimage = os.environ.get("APPIMAGE")
    if appimage and Path(appimage).exists():
        return appimage

    found = shutil.which(EXECUTABLE_NAME)
    if found:
        return found

    return EXECUTABLE_NAME


# =============================================================================
# Windows - registry Run key
# =============================================================================

def _windows_is_enabled() -> bool:
    import winreg

    try:
        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, RUN_KEY) as key:
            winreg.QueryValueEx(key, APP_NAME)
        return True
    except FileNotFoundError:
        return False


def _windows_set(enabled: bool) -> None:
    import winreg

    with winreg.OpenKey(
        winreg.HKEY_CURRENT_USER, RUN_KEY, 0, winreg.KEY_SET_VALUE
    ) as key:
        if enabled:
            winreg.SetValueEx(key, APP_NAME, 0, winreg.REG_SZ, f'"{_find_executable()}"')
        else:
            try:
                winreg.DeleteValue(key, APP_NAME)
            except FileNotFoundError:
                pass


# =============================================================================
# macOS - LaunchAgent
# =============================================================================

def _create_launch_agent_plist() -> dict:
    return {
        "Label": APP_ID,
        "ProgramArguments": [_find_executable(), "--hidden"],
        "RunAtLoad": True,
        "KeepAlive": False,
        "ProcessType": "Interactive",
    }


def _macos_is_enabled() -> bool:
    if not AUTOSTART_FILE.exists():
        return False
    with open(AUTOSTART_FILE, "rb") as f:
        plist = plistlib.load(f)
    return not plist.get("Disabled", False)


def _macos_enable() -> None:
    AUTOSTART_DIR.mkdir(parents=True, exist_ok=True)
    with open(AUTOSTART_FILE, "wb") as f:
        plistlib.dump(_create_launch_agent_plist(), f)


# =============================================================================
# Linux - XDG autostart
# =============================================================================

def _desktop_entry() -> str:
    return f"""[Desktop Entry]
Name={APP_NAME}
Comment=Show whether traffic is routed through Mullvad VPN
Exec={_find_executable()} --hidden
Icon={APP_ID}
Terminal=false
Type=Application
Categories=Network;
X-GNOME-Autostart-enabled=true
X-GNOME-Autostart-Delay=5
StartupNotify=false
"""


def _xdg_is_enabled() -> bool:
    if not AUTOSTART_FILE.exists():
        return False
    for line in AUTOSTART_FILE.read_text().splitlines():
        line = line.strip().lower()
        if line == "x-gnome-autostart-enabled=false":
            return False
        if line == "hidden=true":
            return False
    return True


def _xdg_enable() -> None:
    AUTOSTART_DIR.mkdir(parents=True, exist_ok=True)
    AUTOSTART_FILE.write_text(_desktop_entry())


# =============================================================================
# Public API
# =============================================================================

def is_autostart_enabled() -> bool:
    """Check if the application is registered to start at login.

    Raises:
        AutostartError: If the registration cannot be read
    """
    try:
        if sys.platform == "win32":
            return _windows_is_enabled()
        if sys.platform == "darwin":
            return _macos_is_enabled()
        return _xdg_is_enabled()
    except (OSError, plistlib.InvalidFileException) as e:
        raise AutostartError(f"Cannot read autostart setting: {e}") from e


def enable_autostart() -> None:
    """Register the application to start at login."""
    try:
        if sys.platform == "win32":
            _windows_set(True)
        elif sys.platform == "darwin":
            _macos_enable()
        else:
            _xdg_enable()
    except OSError as e:
        raise AutostartError(f"Failed to enable autostart: {e}") from e
    log.info("Autostart enabled")


def disable_autostart() -> None:
    """Remove the login registration."""
    try:
        if sys.platform == "win32":
            _windows_set(False)
        elif AUTOSTART_FILE.exists():
            AUTOSTART_FILE.unlink()
    except OSError as e:
        raise AutostartError(f"Failed to disable autostart: {e}") from e
    log.info("Autostart disabled")


def set_autostart(enable: bool) -> str:
    """Set autostart state.

    Returns:
        Message describing the new state

    Raises:
        AutostartError: If the change failed
    """
    if enable:
        enable_autostart()
        return "Auto-start enabled"
    disable_autostart()
    return "Auto-start disabled"
