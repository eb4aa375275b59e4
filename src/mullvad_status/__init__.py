"""Tray indicator showing whether traffic goes through Mullvad VPN."""

from mullvad_status.constants import VERSION as __version__
