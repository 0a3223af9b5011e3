"""
Bitvavo account pass-through

Signed calls made with the credentials of an active bot, selected by the
required ?botId= query parameter. Lists come back as lists even when Bitvavo
answers a filtered request with a single object.

POST /order places the order as given: no signal, order record or position
is written for it.

Errors: unknown or inactive bot 404; Bitvavo 4xx 400 with Bitvavo's
message; Bitvavo 5xx or unreachable 503.
"""

import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.bitvavo_api.client import BitvavoClient, bitvavo_client
from autotrader.bitvavo_api.credentials import BotCredentials
from autotrader.bitvavo_api.models import (
    AccountBalance,
    AccountInfo,
    AssetData,
    CreateOrderRequest,
    CreateOrderResponse,
    ServerTime,
    TickerPrice,
)
from autotrader.database import get_db
from autotrader.exceptions import ExchangeUnavailableError, NotFoundError, ValidationError
from autotrader.services.bot_configuration_service import get_bot_configuration, resolve_credentials

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/bitvavo", tags=["bitvavo"])


def get_bitvavo_client() -> BitvavoClient:
    return bitvavo_client


async def get_bot_credentials(
    bot_id: str = Query(..., alias="botId"),
    db: AsyncSession = Depends(get_db),
) -> BotCredentials:
    config = await get_bot_configuration(db, bot_id)
    if config is None:
        logger.warning(f"Bitvavo call for unknown or inactive bot: {bot_id}")
        raise NotFoundError("Bot not found")
    return resolve_credentials(config)


async def _call(description: str, operation, *args):
    try:
        return await operation(*args)
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        if status < 500:
            raise ValidationError(f"Bitvavo rejected {description}: {e.response.text}") from e
        raise ExchangeUnavailableError(f"Bitvavo error {status} on {description}") from e
    except httpx.HTTPError as e:
        logger.error(f"Bitvavo unreachable on {description}: {e}")
        raise ExchangeUnavailableError(f"Bitvavo unreachable: {e}") from e


@router.get("/account", response_model=AccountInfo)
async def get_account(
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    """Fee tier (taker, maker, 30-day volume) of the bot's account"""
    return await _call("account", client.get_account, credentials)


@router.get("/time", response_model=ServerTime)
async def get_time(
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    return await _call("time", client.get_server_time, credentials)


@router.get("/assets", response_model=List[AssetData])
async def get_assets(
    symbol: Optional[str] = None,
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    return await _call("assets", client.get_assets, credentials, symbol)


@router.get("/balance", response_model=List[AccountBalance])
async def get_balance(
    symbol: Optional[str] = None,
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    return await _call("balance", client.get_balances, credentials, symbol)


@router.get("/ticker/price", response_model=List[TickerPrice])
async def get_ticker_price(
    market: Optional[str] = None,
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    return await _call("ticker price", client.get_prices, credentials, market)


@router.post("/order", response_model=CreateOrderResponse)
async def create_order(
    order: CreateOrderRequest,
    credentials: BotCredentials = Depends(get_bot_credentials),
    client: BitvavoClient = Depends(get_bitvavo_client),
):
    """Place an order directly; bypasses the alert pipeline and its records"""
    logger.info(f"Manual {order.side} {order.orderType} order on {order.market} for bot: {credentials.bot_id}")
    return await _call("order", client.create_order, order, credentials)
