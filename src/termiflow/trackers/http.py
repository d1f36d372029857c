"""Minimal JSON-over-HTTPS GET used by the tracker clients.

// [LAW:single-enforcer] The only place tracker HTTP failures are classified:
//   HTTP status != 200 -> ProtocolError, undecodable body -> ProtocolError,
//   anything on the wire -> TransportError.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request

from termiflow.errors import ProtocolError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "TermiFlow"


def get_json(url: str, headers: dict[str, str], timeout: float) -> object:
    """GET `url` and decode the JSON body.

    Raises:
        ProtocolError: non-200 status or a body that is not JSON
        TransportError: connection, TLS or timeout failure
    """
    request = urllib.request.Request(url, headers=headers, method="GET")
    logger.debug("GET %s", url)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = response.status
            body = response.read()
    except urllib.error.HTTPError as e:
        raise ProtocolError(f"API Error: {e.code} {e.reason}", status=e.code) from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        reason = getattr(e, "reason", e)
        raise TransportError(f"Request failed: {reason}") from e

    if status != 200:
        raise ProtocolError(f"API Error: {status}", status=status)
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProtocolError(f"Malformed response: {e}") from e
