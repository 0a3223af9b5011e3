"""
Order records

One record per alert that reached sizing: COMPLETED with the Bitvavo (or
dry-run) order id, or FAILED with the reason. Records are not modified by
the trading flow; update_order_status exists for manual correction.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.constants import ORDER_STATUS_COMPLETED, ORDER_STATUS_FAILED
from autotrader.exceptions import ValidationError
from autotrader.models import OrderRecord

logger = logging.getLogger(__name__)

VALID_ORDER_STATUSES = (ORDER_STATUS_COMPLETED, ORDER_STATUS_FAILED)


async def save_completed_order(db: AsyncSession, bot_id: str, ticker: str, order_id: str) -> OrderRecord:
    order = OrderRecord(
        bot_id=bot_id,
        ticker=ticker,
        order_id=order_id,
        status=ORDER_STATUS_COMPLETED,
        timestamp=datetime.utcnow(),
    )
    db.add(order)
    await db.commit()
    logger.info(f"Recorded completed order {order_id} for bot {bot_id} on {ticker}")
    return order


async def save_failed_order(db: AsyncSession, bot_id: str, ticker: str, error_message: str) -> OrderRecord:
    order = OrderRecord(
        bot_id=bot_id,
        ticker=ticker,
        order_id=None,
        status=ORDER_STATUS_FAILED,
        error_message=error_message,
        timestamp=datetime.utcnow(),
    )
    db.add(order)
    await db.commit()
    logger.info(f"Recorded failed order for bot {bot_id} on {ticker}: {error_message}")
    return order


async def get_orders_by_bot_id(db: AsyncSession, bot_id: str, status: Optional[str] = None) -> List[OrderRecord]:
    query = select(OrderRecord).where(OrderRecord.bot_id == bot_id)
    if status:
        query = query.where(OrderRecord.status == status)
    result = await db.execute(query.order_by(desc(OrderRecord.timestamp), desc(OrderRecord.id)))
    return list(result.scalars().all())


async def get_order_by_order_id(db: AsyncSession, order_id: str) -> Optional[OrderRecord]:
    result = await db.execute(select(OrderRecord).where(OrderRecord.order_id == order_id))
    return result.scalars().first()


async def update_order_status(
    db: AsyncSession, record_id: int, status: str, error_message: Optional[str] = None
) -> Optional[OrderRecord]:
    """Manual correction of a recorded outcome. Returns None if the record does not exist."""
    if status not in VALID_ORDER_STATUSES:
        raise ValidationError(f"Invalid order status: {status}")

    order = await db.get(OrderRecord, record_id)
    if order is None:
        return None

    order.status = status
    order.error_message = error_message if status == ORDER_STATUS_FAILED else None
    await db.commit()
    logger.info(f"Order record {record_id} manually set to {status}")
    return order
