"""Tests for the ConnectionStatus value."""

import dataclasses

import pytest

from mullvad_status.models import ConnectionStatus


class TestDisplay:
    """Tests for the connection details rows."""

    def test_country_only_location(self):
        status = ConnectionStatus(connected=True, ip="1.2.3.4", country="Sweden")

        assert status.location == "Sweden"
        assert status.details() == [
            ("IP Address", "1.2.3.4"),
            ("Location", "Sweden"),
            ("Server", "Unknown"),
            ("Protocol", "Unknown"),
        ]

    def test_city_and_country(self):
        status = ConnectionStatus(connected=True, country="Sweden", city="Malmö")
        assert status.location == "Malmö, Sweden"

    def test_city_without_country(self):
        status = ConnectionStatus(connected=True, city="Malmö")
        assert status.location == "Unknown"

    def test_protocol_upper_case(self):
        status = ConnectionStatus(connected=True, server_type="wireguard")
        assert status.protocol == "WIREGUARD"

    def test_disconnected_has_no_details(self):
        status = ConnectionStatus(connected=False, ip="9.9.9.9", country="Norway")
        assert status.details() == []


class TestConversion:
    """Tests for building snapshots."""

    def test_from_api_defaults_to_disconnected(self):
        status = ConnectionStatus.from_api({"ip": "9.9.9.9"})
        assert status.connected is False
        assert status.ip == "9.9.9.9"

    def test_payload_uses_snake_case(self):
        status = ConnectionStatus(connected=True, hostname="se-got-wg-001", server_type="wireguard")

        payload = status.to_payload()

        assert payload["hostname"] == "se-got-wg-001"
        assert payload["server_type"] == "wireguard"
        assert ConnectionStatus.from_payload(payload) == status

    def test_payload_requires_connected(self):
        with pytest.raises(KeyError):
            ConnectionStatus.from_payload({"ip": "1.2.3.4"})

    def test_snapshot_is_immutable(self):
        status = ConnectionStatus(connected=True)
        with pytest.raises(dataclasses.FrozenInstanceError):
            status.connected = False
