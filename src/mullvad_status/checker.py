"""VPN status probe using Mullvad's public connection check API."""

import http.client
import json
import urllib.error
import urllib.request

from mullvad_status.constants import APP_NAME, STATUS_API_TIMEOUT, STATUS_API_URL, VERSION
from mullvad_status.models import ConnectionStatus


class StatusCheckError(Exception):
    """Raised when the connection check API cannot be queried."""


def check_vpn_status(
    url: str = STATUS_API_URL,
    timeout: float = STATUS_API_TIMEOUT
) -> ConnectionStatus:
    """Check whether traffic is routed through a Mullvad server.

    Queries am.i.mullvad.net, which reports the exit IP and whether it
    belongs to a Mullvad relay. This call blocks; run it off the event
    loop.

    Args:
        url: Connection check endpoint
        timeout: Request timeout in seconds

    Returns:
        ConnectionStatus for the current connection

    Raises:
        StatusCheckError: On network errors, non-200 responses or
            malformed bodies
    """
    req = urllib.request.Request(url)
    req.add_header("Accept", "application/json")
    req.add_header("User-Agent", f"{APP_NAME}/{VERSION}")

    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            if resp.status != 200:
                raise StatusCheckError(f"Unexpected HTTP status {resp.status}")
            body = resp.read()
    except urllib.error.URLError as e:
        raise StatusCheckError(f"Request to {url} failed: {e}") from e
    except TimeoutError as e:
        raise StatusCheckError(f"Request to {url} timed out") from e
    except http.client.HTTPException as e:
        raise StatusCheckError(f"Bad HTTP response: {e!r}") from e
    except OSError as e:
        raise StatusCheckError(f"Connection error: {e}") from e

    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StatusCheckError(f"Malformed response: {e}") from e

    if not isinstance(data, dict):
        raise StatusCheckError("Malformed response: expected a JSON object")

    return ConnectionStatus.from_api(data)
