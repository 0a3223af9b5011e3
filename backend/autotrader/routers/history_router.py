"""
Per-bot history: received alerts, order outcomes and positions.

Read-only apart from the manual correction endpoints for order records and
position status.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.database import get_db
from autotrader.exceptions import NotFoundError, ValidationError
from autotrader.models import OrderRecord, Position
from autotrader.schemas import (
    OrderRecordResponse,
    OrderStatusUpdate,
    PositionResponse,
    PositionStatusUpdate,
    SignalResponse,
)
from autotrader.services import order_service, position_service, signal_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/bots/{bot_id}", tags=["history"])


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; offsets in query values are honoured"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@router.get("/signals", response_model=List[SignalResponse])
async def list_signals(
    bot_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    db: AsyncSession = Depends(get_db),
):
    """Received alerts, newest first. `from`/`to` bound the alert timestamp (inclusive)."""
    start, end = _as_utc(start), _as_utc(end)
    if start is None and end is None:
        signals = await signal_service.get_signals_by_bot_id(db, bot_id, limit=limit)
    else:
        start = start or datetime.min
        end = end or datetime.max
        if start > end:
            raise ValidationError("'from' must not be after 'to'")
        signals = await signal_service.get_signals_by_bot_id_and_time_range(db, bot_id, start, end, limit=limit)
    return [SignalResponse.model_validate(s) for s in signals]


@router.get("/orders", response_model=List[OrderRecordResponse])
async def list_orders(
    bot_id: str,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    orders = await order_service.get_orders_by_bot_id(db, bot_id, status=status)
    return [OrderRecordResponse.model_validate(o) for o in orders]


@router.get("/orders/exchange/{order_id}", response_model=OrderRecordResponse)
async def get_order_by_exchange_id(
    bot_id: str,
    order_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Look up a recorded order by the id Bitvavo assigned to it"""
    order = await order_service.get_order_by_order_id(db, order_id)
    if order is None or order.bot_id != bot_id:
        raise NotFoundError("Order not found")
    return OrderRecordResponse.model_validate(order)


@router.patch("/orders/{record_id}", response_model=OrderRecordResponse)
async def correct_order(
    bot_id: str,
    record_id: int,
    update: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Manual correction of a recorded order outcome"""
    existing = await db.get(OrderRecord, record_id)
    if existing is None or existing.bot_id != bot_id:
        raise NotFoundError("Order record not found")

    order = await order_service.update_order_status(db, record_id, update.status, update.error_message)
    logger.info(f"Order record {record_id} of bot {bot_id} corrected to {update.status}")
    return OrderRecordResponse.model_validate(order)


@router.get("/positions", response_model=List[PositionResponse])
async def list_positions(
    bot_id: str,
    status: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    positions = await position_service.get_positions_by_bot_id(db, bot_id, status=status)
    return [PositionResponse.model_validate(p) for p in positions]


@router.patch("/positions/{position_id}", response_model=PositionResponse)
async def correct_position(
    bot_id: str,
    position_id: int,
    update: PositionStatusUpdate,
    db: AsyncSession = Depends(get_db),
):
    existing = await db.get(Position, position_id)
    if existing is None or existing.bot_id != bot_id:
        raise NotFoundError("Position not found")

    position = await position_service.update_position_status(db, position_id, update.status)
    return PositionResponse.model_validate(position)
