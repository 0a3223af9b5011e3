"""
Shared test fixtures for autotrader backend tests.

Provides reusable fixtures for:
- Async database sessions (in-memory SQLite)
- A credential vault with a throwaway key
- Mock Bitvavo client
- Bot configuration factory
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

import autotrader.encryption as enc_module
from autotrader.bitvavo_api.models import AccountBalance, CreateOrderResponse, TickerPrice
from autotrader.encryption import CredentialVault, encrypt_value
from autotrader.models import BotConfiguration

# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def async_engine():
    """Create an in-memory async SQLite engine for testing."""
    from autotrader.models import Base

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(async_engine):
    """Provide an async database session for tests.

    Services commit, so every test gets a fresh in-memory database instead
    of relying on rollback.
    """
    session_factory = async_sessionmaker(
        async_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session
        await session.rollback()


# ---------------------------------------------------------------------------
# Encryption
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def test_vault():
    """Install a vault with a random key; reset the module-level singleton afterwards."""
    vault = CredentialVault(AESGCM.generate_key(bit_length=256))
    enc_module._vault = vault
    yield vault
    enc_module._vault = None


# ---------------------------------------------------------------------------
# Mock Bitvavo client
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_exchange():
    """Mock BitvavoClient for testing without hitting the real API."""
    client = MagicMock()
    client.get_balance = AsyncMock(
        return_value=AccountBalance(symbol="EUR", available=Decimal("100.00"), inOrder=Decimal("0"))
    )
    client.get_price = AsyncMock(return_value=TickerPrice(market="BTCEUR", price=Decimal("30000.0")))
    client.create_order = AsyncMock(
        return_value=CreateOrderResponse(orderId="1be6d0df-d5dc-4b53-a250-3376f3b393e6", status="filled")
    )
    return client


# ---------------------------------------------------------------------------
# Sample data factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_bot(db_session):
    """Factory creating a persisted bot with encrypted credentials."""

    async def _make_bot(bot_id="aB3dE9", trading_pair="BTCEUR", active=True,
                        api_key="bitvavo-key", api_secret="bitvavo-secret", webhook_key_hash=None):
        bot = BotConfiguration(
            bot_id=bot_id,
            trading_pair=trading_pair,
            encrypted_api_key=encrypt_value(api_key),
            encrypted_api_secret=encrypt_value(api_secret),
            webhook_key_hash=webhook_key_hash,
            key_version=1,
            active=active,
        )
        db_session.add(bot)
        await db_session.commit()
        return bot

    return _make_bot
