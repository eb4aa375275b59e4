"""Tests for the connection check probe."""

import http.client
import io
import json
import urllib.error

import pytest

from mullvad_status import checker
from mullvad_status.checker import StatusCheckError, check_vpn_status

MULLVAD_RESPONSE = {
    "ip": "185.65.135.1",
    "country": "Sweden",
    "city": "Gothenburg",
    "longitude": 11.97,
    "latitude": 57.71,
    "mullvad_exit_ip": True,
    "mullvad_exit_ip_hostname": "se-got-wg-001",
    "mullvad_server_type": "WireGuard",
    "blacklisted": {"blacklisted": False, "results": []},
    "organization": "Mullvad VPN",
}


class FakeResponse(io.BytesIO):
    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


class TruncatedResponse(FakeResponse):
    def read(self, *args):
        raise http.client.IncompleteRead(b'{"ip": "1.2', 40)


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Patch urlopen; tests set ``.result`` to a response or exception."""

    class Opener:
        result = None
        requests = []

        def __call__(self, req, timeout=None):
            self.requests.append((req, timeout))
            if isinstance(self.result, Exception):
                raise self.result
            return self.result

    opener = Opener()
    opener.requests = []
    monkeypatch.setattr(checker.urllib.request, "urlopen", opener)
    return opener


class TestCheckVpnStatus:
    """Tests for check_vpn_status."""

    def test_connected_response(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(json.dumps(MULLVAD_RESPONSE).encode())

        status = check_vpn_status()

        assert status.connected is True
        assert status.ip == "185.65.135.1"
        assert status.location == "Gothenburg, Sweden"
        assert status.hostname == "se-got-wg-001"
        assert status.protocol == "WIREGUARD"

    def test_request_uses_url_and_timeout(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(b'{"mullvad_exit_ip": false}')

        check_vpn_status(url="https://example.test/json", timeout=3)

        req, timeout = fake_urlopen.requests[0]
        assert req.full_url == "https://example.test/json"
        assert timeout == 3

    def test_not_through_mullvad(self, fake_urlopen):
        body = {"ip": "203.0.113.7", "country": "Germany", "mullvad_exit_ip": False}
        fake_urlopen.result = FakeResponse(json.dumps(body).encode())

        status = check_vpn_status()

        assert status.connected is False
        assert status.ip == "203.0.113.7"
        assert status.hostname is None

    def test_network_error(self, fake_urlopen):
        fake_urlopen.result = urllib.error.URLError("Name or service not known")

        with pytest.raises(StatusCheckError):
            check_vpn_status()

    def test_timeout(self, fake_urlopen):
        fake_urlopen.result = TimeoutError("timed out")

        with pytest.raises(StatusCheckError, match="timed out"):
            check_vpn_status()

    def test_unexpected_status(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(b"{}", status=204)

        with pytest.raises(StatusCheckError, match="204"):
            check_vpn_status()

    def test_malformed_json(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(b"<html>rate limited</html>")

        with pytest.raises(StatusCheckError, match="Malformed"):
            check_vpn_status()

    def test_json_not_an_object(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(b"[1, 2, 3]")

        with pytest.raises(StatusCheckError, match="Malformed"):
            check_vpn_status()

    def test_body_not_utf8(self, fake_urlopen):
        fake_urlopen.result = FakeResponse(b"\xff")

        with pytest.raises(StatusCheckError, match="Malformed"):
            check_vpn_status()

    def test_truncated_body(self, fake_urlopen):
        fake_urlopen.result = TruncatedResponse(b"")

        with pytest.raises(StatusCheckError, match="IncompleteRead"):
            check_vpn_status()
