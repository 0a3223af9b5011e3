"""
Request logging in curl form for the Bitvavo client

Registered as an httpx request event hook. Header values whose name
contains "Key" or "Secret" are replaced before anything is logged.
"""

import logging
from typing import Iterable, Tuple

import httpx

from autotrader.constants import REDACTED

logger = logging.getLogger(__name__)


def _is_sensitive(header_name: str) -> bool:
    lowered = header_name.lower()
    return "key" in lowered or "secret" in lowered


def redact_headers(headers: Iterable[Tuple[str, str]]) -> list:
    """Return (name, value) pairs with credential values replaced by REDACTED."""
    return [(name, REDACTED if _is_sensitive(name) else value) for name, value in headers]


def format_curl(request: httpx.Request) -> str:
    parts = [f"curl -X {request.method} '{request.url}'"]
    for name, value in redact_headers(request.headers.items()):
        parts.append(f"-H '{name}: {value}'")

    body = request.content
    if body:
        escaped = body.decode("utf-8", errors="replace").replace("'", "'\\''")
        parts.append(f"-d '{escaped}'")
    return " ".join(parts)


async def log_request_as_curl(request: httpx.Request) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug(f"Request (curl): {format_curl(request)}")
