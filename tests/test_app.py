"""Tests for constants, command-line options and notifications."""

import pytest

from mullvad_status.models import ConnectionStatus


class TestConstants:
    """Tests for constants module."""

    def test_boundary_names(self):
        """Test that command and channel names are defined."""
        from mullvad_status.constants import (
            CMD_CHECK_AUTOSTART,
            CMD_GET_VPN_STATUS,
            CMD_TOGGLE_AUTOSTART,
            EVENT_STATUS_CHANGED,
        )

        assert CMD_GET_VPN_STATUS == "get_vpn_status"
        assert CMD_CHECK_AUTOSTART == "check_autostart"
        assert CMD_TOGGLE_AUTOSTART == "toggle_autostart"
        assert EVENT_STATUS_CHANGED == "vpn-status-changed"

    def test_probe_settings(self):
        """Test that the probe endpoint and timing are defined."""
        from mullvad_status.constants import POLL_INTERVAL, STATUS_API_TIMEOUT, STATUS_API_URL

        assert STATUS_API_URL == "https://am.i.mullvad.net/json"
        assert STATUS_API_TIMEOUT == 10
        assert POLL_INTERVAL == 15


class TestParseArgs:
    """Tests for command-line parsing."""

    def test_defaults(self):
        from mullvad_status.main import parse_args

        args = parse_args([])

        assert args.debug is False
        assert args.hidden is False
        assert args.interval == 15

    def test_options(self):
        from mullvad_status.main import parse_args

        args = parse_args(["--debug", "--hidden", "--interval", "2.5"])

        assert args.debug is True
        assert args.hidden is True
        assert args.interval == 2.5

    def test_interval_must_be_positive(self):
        from mullvad_status.main import parse_args

        with pytest.raises(SystemExit):
            parse_args(["--interval", "0"])


class FakeTray:
    def __init__(self):
        self.messages = []

    def showMessage(self, title, message, icon, duration_ms):
        self.messages.append((title, message))


class TestNotifications:
    """Tests for connection change notifications."""

    @pytest.fixture
    def notifications(self):
        from mullvad_status.notifications import NotificationManager

        manager = NotificationManager(FakeTray())
        manager._use_native = False
        return manager

    def test_connected(self, notifications):
        notifications.connection_changed(ConnectionStatus(connected=True, country="Sweden"))
        assert notifications.tray.messages[-1][1] == "Connected to Sweden server"

    def test_connected_without_country(self, notifications):
        notifications.connection_changed(ConnectionStatus(connected=True))
        assert notifications.tray.messages[-1][1] == "Connected to Mullvad server"

    def test_disconnected(self, notifications):
        notifications.connection_changed(ConnectionStatus(connected=False))
        assert notifications.tray.messages[-1][1] == "VPN connection lost"

    def test_native_text_passed_as_arguments(self, notifications, monkeypatch):
        from mullvad_status import notifications as module

        calls = []
        monkeypatch.setattr(module.subprocess, "run", lambda args, **kwargs: calls.append(args))
        notifications._use_native = True

        notifications.connection_changed(
            ConnectionStatus(connected=True, country='Côte "d\'Ivoire" \\')
        )

        args = calls[0]
        assert args[0] == "osascript"
        assert args[-2:] == ["Mullvad Connection Status", 'Connected to Côte "d\'Ivoire" \\ server']
        assert not any("Ivoire" in part for part in args[:-2])
        assert notifications.tray.messages == []
