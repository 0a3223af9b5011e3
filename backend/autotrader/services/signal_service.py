"""
TradingView alert audit trail

Alerts are committed before the exchange is contacted, so a crash during
execution still leaves a record of intent.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.models import TradingSignal

logger = logging.getLogger(__name__)


async def save_signal(
    db: AsyncSession,
    bot_id: str,
    ticker: str,
    action: str,
    timestamp: datetime,
    dry_run: bool = False,
) -> TradingSignal:
    logger.info(f"Saving TradingView alert for bot: {bot_id}, ticker: {ticker}, action: {action}")
    signal = TradingSignal(
        bot_id=bot_id,
        ticker=ticker,
        action=action,
        timestamp=timestamp,
        dry_run=dry_run,
    )
    db.add(signal)
    await db.commit()
    return signal


async def get_signals_by_bot_id(db: AsyncSession, bot_id: str, limit: Optional[int] = None) -> List[TradingSignal]:
    query = (
        select(TradingSignal)
        .where(TradingSignal.bot_id == bot_id)
        .order_by(desc(TradingSignal.timestamp), desc(TradingSignal.id))
    )
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_signals_by_bot_id_and_time_range(
    db: AsyncSession, bot_id: str, start: datetime, end: datetime, limit: Optional[int] = None
) -> List[TradingSignal]:
    """Alerts whose timestamp lies in [start, end], newest first"""
    query = (
        select(TradingSignal)
        .where(
            TradingSignal.bot_id == bot_id,
            TradingSignal.timestamp >= start,
            TradingSignal.timestamp <= end,
        )
        .order_by(desc(TradingSignal.timestamp), desc(TradingSignal.id))
    )
    if limit:
        query = query.limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
