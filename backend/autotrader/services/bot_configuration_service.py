"""
Bot configuration service

Registers bots, encrypts their Bitvavo credentials, manages activation and
the webhook API key. Decrypted credentials are handed out as BotCredentials
values, never written back onto the configuration row.
"""

import base64
import logging
import secrets
from typing import List, Optional

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.bitvavo_api.credentials import BotCredentials
from autotrader.constants import BOT_ID_ALPHABET, BOT_ID_LENGTH, WEBHOOK_KEY_BYTES
from autotrader.encryption import decrypt_value, encrypt_value
from autotrader.exceptions import ValidationError
from autotrader.models import BotConfiguration

logger = logging.getLogger(__name__)

# Checked against when the bot does not exist, so both paths cost one bcrypt round
_DUMMY_HASH = bcrypt.hashpw(b"dummy", bcrypt.gensalt()).decode()

MAX_BOT_ID_ATTEMPTS = 5


def generate_bot_id() -> str:
    """Random 6-character id from [A-Za-z0-9]"""
    return "".join(secrets.choice(BOT_ID_ALPHABET) for _ in range(BOT_ID_LENGTH))


def generate_webhook_api_key() -> str:
    return base64.urlsafe_b64encode(secrets.token_bytes(WEBHOOK_KEY_BYTES)).rstrip(b"=").decode("ascii")


def hash_webhook_api_key(api_key: str) -> str:
    return bcrypt.hashpw(api_key.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_webhook_api_key(api_key: str, key_hash: str) -> bool:
    try:
        return bcrypt.checkpw(api_key.encode("utf-8"), key_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        logger.warning("Stored webhook key hash is malformed")
        return False


def normalize_trading_pair(trading_pair: str) -> str:
    pair = (trading_pair or "").strip()
    if not pair:
        raise ValidationError("Trading pair is required")
    if pair != pair.upper():
        raise ValidationError(f"Trading pair must be uppercase: {pair}")
    return pair


async def get_bot_configuration(db: AsyncSession, bot_id: str) -> Optional[BotConfiguration]:
    """Active configuration for bot_id, or None"""
    result = await db.execute(
        select(BotConfiguration).where(
            BotConfiguration.bot_id == bot_id,
            BotConfiguration.active.is_(True),
        )
    )
    return result.scalars().first()


async def get_bot_configuration_including_inactive(db: AsyncSession, bot_id: str) -> Optional[BotConfiguration]:
    result = await db.execute(select(BotConfiguration).where(BotConfiguration.bot_id == bot_id))
    return result.scalars().first()


async def get_all_bot_configurations(db: AsyncSession, include_inactive: bool = False) -> List[BotConfiguration]:
    query = select(BotConfiguration).order_by(BotConfiguration.id)
    if not include_inactive:
        query = query.where(BotConfiguration.active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_bot_configuration(
    db: AsyncSession,
    api_key: str,
    api_secret: str,
    trading_pair: str,
) -> BotConfiguration:
    """
    Register a new bot with encrypted credentials.

    Bot ids are random; a collision with an existing id is caught by the
    unique index and retried with a fresh id.
    """
    if not api_key or not api_secret:
        raise ValidationError("API key and API secret are required")
    pair = normalize_trading_pair(trading_pair)

    encrypted_key = encrypt_value(api_key)
    encrypted_secret = encrypt_value(api_secret)

    for attempt in range(MAX_BOT_ID_ATTEMPTS):
        config = BotConfiguration(
            bot_id=generate_bot_id(),
            trading_pair=pair,
            encrypted_api_key=encrypted_key,
            encrypted_api_secret=encrypted_secret,
            key_version=1,
            active=True,
        )
        db.add(config)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.warning(f"Bot id collision on attempt {attempt + 1}/{MAX_BOT_ID_ATTEMPTS}, retrying")
            continue
        await db.refresh(config)
        logger.info(f"Created bot configuration {config.bot_id} for {config.trading_pair}")
        return config

    raise RuntimeError(f"Could not generate a unique bot id after {MAX_BOT_ID_ATTEMPTS} attempts")


async def set_bot_active(db: AsyncSession, bot_id: str, active: bool) -> bool:
    """Activate or deactivate a bot. Returns False if the bot does not exist."""
    config = await get_bot_configuration_including_inactive(db, bot_id)
    if config is None:
        return False
    config.active = active
    await db.commit()
    logger.info(f"Bot {bot_id} {'activated' if active else 'deactivated'}")
    return True


async def deactivate_bot_configuration(db: AsyncSession, bot_id: str) -> bool:
    return await set_bot_active(db, bot_id, False)


async def activate_bot_configuration(db: AsyncSession, bot_id: str) -> bool:
    return await set_bot_active(db, bot_id, True)


async def generate_and_save_webhook_api_key(db: AsyncSession, bot_id: str) -> Optional[str]:
    """
    Issue a new webhook API key for a bot, replacing any previous one.

    Returns the plaintext key (the only time it is available), or None if
    the bot does not exist.
    """
    config = await get_bot_configuration_including_inactive(db, bot_id)
    if config is None:
        return None

    webhook_api_key = generate_webhook_api_key()
    config.webhook_key_hash = hash_webhook_api_key(webhook_api_key)
    await db.commit()
    logger.info(f"Issued new webhook API key for bot {bot_id}")
    return webhook_api_key


async def validate_webhook_api_key(db: AsyncSession, bot_id: str, api_key: Optional[str]) -> bool:
    """Check a webhook key against the bot's stored hash (active or not)."""
    config = await get_bot_configuration_including_inactive(db, bot_id) if bot_id else None
    stored_hash = config.webhook_key_hash if config else None

    if not stored_hash or not api_key:
        verify_webhook_api_key(api_key or "", _DUMMY_HASH)
        return False
    return verify_webhook_api_key(api_key, stored_hash)


def resolve_credentials(config: BotConfiguration) -> BotCredentials:
    """
    Decrypt a bot's Bitvavo credentials for immediate use.

    CryptoError propagates: signing with a wrong or garbage secret must not
    happen.
    """
    api_key = decrypt_value(config.encrypted_api_key) if config.encrypted_api_key else ""
    api_secret = decrypt_value(config.encrypted_api_secret) if config.encrypted_api_secret else ""
    return BotCredentials(api_key=api_key, api_secret=api_secret, bot_id=config.bot_id)
