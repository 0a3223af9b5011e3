"""
Position tracking per (bot_id, ticker)

At most one OPEN position may exist per bot and market. The check and the
write happen in two statements, so callers serialize them with
position_lock(bot_id, ticker) for the whole read-then-write sequence.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.constants import POSITION_STATUS_CLOSED, POSITION_STATUS_OPEN
from autotrader.exceptions import ValidationError
from autotrader.models import Position

logger = logging.getLogger(__name__)

# Per-(bot, market) locks. Signals for different pairs never wait on each other.
_position_locks: Dict[Tuple[str, str], asyncio.Lock] = {}


def position_lock(bot_id: str, ticker: str) -> asyncio.Lock:
    """Get or create an asyncio.Lock for one (bot_id, ticker) pair."""
    key = (bot_id, ticker)
    if key not in _position_locks:
        _position_locks[key] = asyncio.Lock()
    return _position_locks[key]


async def get_open_position(db: AsyncSession, bot_id: str, ticker: str) -> Optional[Position]:
    result = await db.execute(
        select(Position)
        .where(
            Position.bot_id == bot_id,
            Position.ticker == ticker,
            Position.status == POSITION_STATUS_OPEN,
        )
        .order_by(desc(Position.id))
    )
    return result.scalars().first()


async def open_position(db: AsyncSession, bot_id: str, ticker: str) -> Position:
    """
    Record an OPEN position after a successful buy.

    Idempotent: if an OPEN position already exists it is returned as-is, so
    repeated buy alerts never create parallel open positions.
    """
    existing = await get_open_position(db, bot_id, ticker)
    if existing:
        logger.info(f"Position already open for bot {bot_id} on {ticker} (#{existing.id})")
        return existing

    position = Position(bot_id=bot_id, ticker=ticker, status=POSITION_STATUS_OPEN)
    db.add(position)
    await db.commit()
    logger.info(f"Opened position #{position.id} for bot {bot_id} on {ticker}")
    return position


async def close_position(db: AsyncSession, position: Position) -> Position:
    if position.status == POSITION_STATUS_CLOSED:
        return position
    position.status = POSITION_STATUS_CLOSED
    await db.commit()
    logger.info(f"Closed position #{position.id} for bot {position.bot_id} on {position.ticker}")
    return position


async def close_open_position(db: AsyncSession, bot_id: str, ticker: str) -> Optional[Position]:
    """
    Close the OPEN position after a successful sell.

    A sell without an OPEN position leaves the table untouched; no CLOSED-only
    row is created.
    """
    position = await get_open_position(db, bot_id, ticker)
    if position is None:
        logger.info(f"No open position for bot {bot_id} on {ticker}; nothing to close")
        return None
    return await close_position(db, position)


async def get_positions_by_bot_id(db: AsyncSession, bot_id: str, status: Optional[str] = None) -> List[Position]:
    query = select(Position).where(Position.bot_id == bot_id)
    if status:
        query = query.where(Position.status == status)
    result = await db.execute(query.order_by(desc(Position.id)))
    return list(result.scalars().all())


async def update_position_status(db: AsyncSession, position_id: int, status: str) -> Optional[Position]:
    """Manual override of a position's status. Returns None if it does not exist."""
    if status not in (POSITION_STATUS_OPEN, POSITION_STATUS_CLOSED):
        raise ValidationError(f"Invalid position status: {status}")

    position = await db.get(Position, position_id)
    if position is None:
        return None

    if status == POSITION_STATUS_OPEN and position.status != POSITION_STATUS_OPEN:
        async with position_lock(position.bot_id, position.ticker):
            existing = await get_open_position(db, position.bot_id, position.ticker)
            if existing and existing.id != position.id:
                raise ValidationError(
                    f"Bot {position.bot_id} already has an open position on {position.ticker}"
                )
            position.status = status
            await db.commit()
    else:
        position.status = status
        await db.commit()
    return position
