"""
Database Models

All model classes are re-exported here:
    from autotrader.models import BotConfiguration, Position, ...
"""

from autotrader.database import Base  # noqa: F401
from autotrader.models.trading import (
    BotConfiguration, OrderRecord, Position, TradingSignal,
)

__all__ = [
    "Base",
    "BotConfiguration", "OrderRecord", "Position", "TradingSignal",
]
