"""Trading models: bot configurations, alerts, orders, positions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text

from autotrader.constants import POSITION_STATUS_OPEN
from autotrader.database import Base


class TimestampMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class BotConfiguration(TimestampMixin, Base):
    """
    A trading bot bound to one Bitvavo market.

    Holds only ciphertext for the exchange credentials; decrypted values are
    produced on demand as BotCredentials and never stored on this row.
    Bots are deactivated, never deleted.
    """
    __tablename__ = "bot_configurations"

    id = Column(Integer, primary_key=True, index=True)
    bot_id = Column(String(16), nullable=False, unique=True, index=True)  # 6-char public id
    trading_pair = Column(String, nullable=False)  # e.g. "BTC-EUR", immutable
    encrypted_api_key = Column(Text, nullable=True)
    encrypted_api_secret = Column(Text, nullable=True)
    webhook_key_hash = Column(String, nullable=True)  # bcrypt hash, plaintext is never stored
    key_version = Column(Integer, nullable=False, default=1)
    active = Column(Boolean, nullable=False, default=True)


class TradingSignal(TimestampMixin, Base):
    """Audit record of an inbound TradingView alert, written before any order is placed."""
    __tablename__ = "tradingview_alerts"

    id = Column(Integer, primary_key=True, index=True)
    bot_id = Column(String(16), nullable=False, index=True)
    ticker = Column(String, nullable=False)
    action = Column(String, nullable=False)  # buy, sell
    timestamp = Column(DateTime, nullable=False)  # Alert time, UTC
    dry_run = Column(Boolean, nullable=False, default=False)


class OrderRecord(TimestampMixin, Base):
    """Outcome of executing one alert on Bitvavo (or simulating it)."""
    __tablename__ = "tradingview_orders"

    id = Column(Integer, primary_key=True, index=True)
    bot_id = Column(String(16), nullable=False, index=True)
    order_id = Column(String, nullable=True, index=True)  # Bitvavo order id, "dry-run-<ms>", or NULL on failure
    ticker = Column(String, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    status = Column(String, nullable=False, index=True)  # COMPLETED, FAILED
    error_message = Column(Text, nullable=True)


class Position(TimestampMixin, Base):
    """Exposure of a bot in one market. At most one OPEN row per (bot_id, ticker)."""
    __tablename__ = "positions"

    id = Column(Integer, primary_key=True, index=True)
    bot_id = Column(String(16), nullable=False, index=True)
    ticker = Column(String, nullable=False)
    status = Column(String, nullable=False, default=POSITION_STATUS_OPEN)  # OPEN, CLOSED
