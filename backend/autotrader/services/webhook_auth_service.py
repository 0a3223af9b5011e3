"""
TradingView webhook authorization

Requests from TradingView's published addresses are trusted without a key.
Requests from the local machine (e.g. a reverse proxy or a developer's
curl) must carry the bot's webhook key. Everything else is refused before
the key is looked at.
"""

import ipaddress
import logging
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.config import settings
from autotrader.constants import LOCALHOST_ADDRESSES
from autotrader.services.bot_configuration_service import validate_webhook_api_key

logger = logging.getLogger(__name__)


class WebhookAuthResult(str, Enum):
    VALID = "VALID"
    IP_NOT_ALLOWED = "IP_NOT_ALLOWED"
    INVALID_API_KEY = "INVALID_API_KEY"


def is_localhost(address: Optional[str]) -> bool:
    if not address:
        return False
    if address in LOCALHOST_ADDRESSES:
        return True
    try:
        return ipaddress.ip_address(address).is_loopback
    except ValueError:
        return False


async def authorize(
    db: AsyncSession,
    bot_id: str,
    claimed_key: Optional[str],
    caller_address: Optional[str],
    allowed_ips: Optional[Iterable[str]] = None,
) -> WebhookAuthResult:
    """
    Decide whether an inbound alert may be processed.

    Args:
        db: Database session
        bot_id: Target bot from the alert body
        claimed_key: Value of the X-API-KEY header (may be empty)
        caller_address: Remote address of the HTTP peer
        allowed_ips: Override for the configured allow-list

    Returns:
        VALID, IP_NOT_ALLOWED or INVALID_API_KEY. An unknown bot and a wrong
        key both yield INVALID_API_KEY.
    """
    allow_list = list(allowed_ips) if allowed_ips is not None else settings.get_webhook_allowed_ips()

    if caller_address in allow_list:
        return WebhookAuthResult.VALID

    if is_localhost(caller_address):
        if await validate_webhook_api_key(db, bot_id, claimed_key):
            return WebhookAuthResult.VALID
        return WebhookAuthResult.INVALID_API_KEY

    return WebhookAuthResult.IP_NOT_ALLOWED
