"""Connection status value shared between the probe, the monitor and the UI."""

from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class ConnectionStatus:
    """Complete snapshot of the VPN connection.

    The detail fields are only filled in by the producer when
    ``connected`` is True. A snapshot is never patched; a newer one
    replaces it.
    """

    connected: bool
    ip: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    hostname: Optional[str] = None
    server_type: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "ConnectionStatus":
        """Build a snapshot from an am.i.mullvad.net response.

        Args:
            data: Decoded JSON body

        Returns:
            ConnectionStatus instance
        """
        return cls(
            connected=bool(data.get("mullvad_exit_ip", False)),
            ip=data.get("ip"),
            country=data.get("country"),
            city=data.get("city"),
            hostname=data.get("mullvad_exit_ip_hostname"),
            server_type=data.get("mullvad_server_type"),
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ConnectionStatus":
        """Build a snapshot from a push-channel payload."""
        return cls(
            connected=bool(payload["connected"]),
            ip=payload.get("ip"),
            country=payload.get("country"),
            city=payload.get("city"),
            hostname=payload.get("hostname"),
            server_type=payload.get("server_type"),
        )

    def to_payload(self) -> dict:
        return asdict(self)

    @property
    def location(self) -> str:
        """Human readable location, "City, Country" when both are known."""
        if self.city and self.country:
            return f"{self.city}, {self.country}"
        return self.country or UNKNOWN

    @property
    def protocol(self) -> str:
        if self.server_type:
            return self.server_type.upper()
        return UNKNOWN

    def details(self) -> list[tuple[str, str]]:
        """Label/value rows shown by the connection details view.

        Returns:
            List of (label, value) tuples, empty when disconnected
        """
        if not self.connected:
            return []
        return [
            ("IP Address", self.ip or UNKNOWN),
            ("Location", self.location),
            ("Server", self.hostname or UNKNOWN),
            ("Protocol", self.protocol),
        ]
