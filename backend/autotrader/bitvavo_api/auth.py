"""
Authentication utilities for the Bitvavo REST API

Every private endpoint needs four headers: the API key, an HMAC-SHA256
signature over (timestamp + method + "/v2" + path + body), the timestamp
in epoch milliseconds and the access window.
"""

import hashlib
import hmac
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional

from autotrader.constants import (
    BITVAVO_ACCESS_KEY_HEADER,
    BITVAVO_ACCESS_SIGNATURE_HEADER,
    BITVAVO_ACCESS_TIMESTAMP_HEADER,
    BITVAVO_ACCESS_WINDOW_HEADER,
    BITVAVO_API_VERSION_PREFIX,
)
from autotrader.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BitvavoAuthHeaders:
    access_key: str
    signature: str
    timestamp: str
    window: str

    def as_headers(self) -> Dict[str, str]:
        return {
            BITVAVO_ACCESS_KEY_HEADER: self.access_key,
            BITVAVO_ACCESS_SIGNATURE_HEADER: self.signature,
            BITVAVO_ACCESS_TIMESTAMP_HEADER: self.timestamp,
            BITVAVO_ACCESS_WINDOW_HEADER: self.window,
        }

    def __repr__(self) -> str:
        return f"BitvavoAuthHeaders(timestamp={self.timestamp}, window={self.window})"


def generate_hmac_signature(api_secret: str, timestamp: str, method: str, path: str, body: str = "") -> str:
    """
    Generate the Bitvavo HMAC-SHA256 signature

    Args:
        api_secret: Bitvavo API secret
        timestamp: Epoch milliseconds as a string
        method: HTTP method (GET, POST)
        path: Endpoint path without the version prefix (e.g. "/order")
        body: Raw request body exactly as sent (empty for GET requests)

    Returns:
        Lowercase hex digest
    """
    message = timestamp + method + BITVAVO_API_VERSION_PREFIX + path + (body or "")
    return hmac.new(api_secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()


def create_auth_headers(
    method: str,
    path: str,
    body: Optional[str],
    api_key: str,
    api_secret: str,
    window: int,
) -> BitvavoAuthHeaders:
    """
    Build the authentication headers for one Bitvavo request.

    The timestamp is captured once and used for both the signed message and
    the header. The window is not enforced here; Bitvavo rejects requests
    whose timestamp falls outside it.

    Raises:
        ConfigurationError: api_key or api_secret is empty
    """
    if not api_key:
        raise ConfigurationError("Bitvavo API key is not set for this bot")
    if not api_secret:
        raise ConfigurationError("Bitvavo API secret is not set for this bot")

    timestamp = str(int(time.time() * 1000))
    signature = generate_hmac_signature(api_secret, timestamp, method, path, body or "")
    logger.debug(f"Signed {method} {path} at timestamp {timestamp}")

    return BitvavoAuthHeaders(
        access_key=api_key,
        signature=signature,
        timestamp=timestamp,
        window=str(window),
    )
