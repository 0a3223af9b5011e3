"""
Trading service: TradingView alert -> Bitvavo market order

Flow per alert:
    validate fields -> save alert (audit) -> load bot -> check ticker/currency
    -> size from live balance -> submit (or simulate) -> record outcome
    -> update position

Buys spend the whole available EUR balance; sells sell the whole available
asset balance. Orders worth less than MIN_EUR_AMOUNT are not placed and are
recorded as FAILED. Exchange errors are recorded as FAILED and returned as
ExecutionFailed; nothing is retried.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.bitvavo_api.client import BitvavoClient, bitvavo_client
from autotrader.bitvavo_api.credentials import BotCredentials
from autotrader.bitvavo_api.models import CreateOrderRequest
from autotrader.constants import (
    DRY_RUN_ORDER_PREFIX,
    MIN_EUR_AMOUNT,
    QUOTE_CURRENCY,
    SUPPORTED_ACTIONS,
)
from autotrader.exceptions import ValidationError
from autotrader.models import BotConfiguration
from autotrader.schemas.webhook import TradingViewAlertRequest
from autotrader.services import order_service, position_service, signal_service
from autotrader.services.bot_configuration_service import get_bot_configuration, resolve_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderCompleted:
    order_id: str
    dry_run: bool = False


@dataclass(frozen=True)
class InsufficientFunds:
    """Order too small to place. Recorded as FAILED but not an error for the caller."""
    message: str


@dataclass(frozen=True)
class ExecutionFailed:
    """Sizing or submission raised. Recorded as FAILED and reported to the caller."""
    message: str


ExecutionResult = Union[OrderCompleted, InsufficientFunds, ExecutionFailed]


_OFFSET_TIMESTAMP = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?"
    r"(Z|[+-]\d{2}:\d{2}(?::\d{2})?)",
    re.IGNORECASE | re.ASCII,
)


def _parse_offset(text: str) -> timezone:
    if text.upper() == "Z":
        return timezone.utc
    parts = [int(p) for p in text[1:].split(":")]
    hours, minutes, seconds = parts[0], parts[1], parts[2] if len(parts) > 2 else 0
    if hours > 18 or minutes > 59 or seconds > 59:
        raise ValueError(f"Offset out of range: {text}")
    delta = timedelta(hours=hours, minutes=minutes, seconds=seconds)
    return timezone(-delta if text[0] == "-" else delta)


def parse_offset_timestamp(value: str) -> datetime:
    """
    Parse an extended-format ISO-8601 date-time with a UTC offset, e.g.
    "2025-01-01T12:00:00Z", "2025-01-01T12:00+01:00" or "2025-01-01T12:00:00.1Z".

    Seconds and up to nine fraction digits are optional; fractions beyond
    microseconds are truncated. Returns a naive UTC datetime. Values without
    an offset, and the basic format (20250101T120000+0100), are rejected.
    """
    match = _OFFSET_TIMESTAMP.fullmatch(value.strip())
    if match is None:
        raise ValueError(f"Not an ISO-8601 date-time with offset: {value}")

    year, month, day, hour, minute, second, fraction, offset = match.groups()
    parsed = datetime(
        int(year),
        int(month),
        int(day),
        int(hour),
        int(minute),
        int(second or 0),
        int((fraction or "").ljust(6, "0")[:6]),
        tzinfo=_parse_offset(offset),
    )
    try:
        return parsed.astimezone(timezone.utc).replace(tzinfo=None)
    except OverflowError as e:
        raise ValueError(f"Timestamp out of range: {value}") from e


def validate_request(request: TradingViewAlertRequest) -> datetime:
    """
    Structural validation of an alert, in field order.

    Returns:
        The parsed alert timestamp (naive UTC)

    Raises:
        ValidationError: with a message naming the offending field
    """
    if not request.bot_id:
        raise ValidationError("Bot ID is required")
    if not request.ticker:
        raise ValidationError("Ticker is required")
    if not request.action:
        raise ValidationError("Action is required")
    if request.action.lower() not in SUPPORTED_ACTIONS:
        raise ValidationError(
            f"Invalid action: {request.action}. Supported actions are 'buy' and 'sell'."
        )
    if not request.timestamp:
        raise ValidationError("Timestamp is required")
    try:
        return parse_offset_timestamp(request.timestamp)
    except ValueError:
        raise ValidationError("Invalid timestamp format. Expected format: yyyy-MM-ddTHH:mm:ssZ")


def is_eur_based_ticker(ticker: str) -> bool:
    return ticker.endswith(QUOTE_CURRENCY)


def base_asset(ticker: str) -> str:
    """'BTCEUR' -> 'BTC', 'BTC-EUR' -> 'BTC'"""
    return ticker[: -len(QUOTE_CURRENCY)].rstrip("-")


def dry_run_order_id() -> str:
    return f"{DRY_RUN_ORDER_PREFIX}{int(time.time() * 1000)}"


class TradingService:
    """
    Executes TradingView alerts for configured bots.

    Args:
        exchange: Bitvavo client; defaults to the module-level client
    """

    def __init__(self, exchange: Optional[BitvavoClient] = None):
        self.exchange = exchange or bitvavo_client

    async def process_alert(self, db: AsyncSession, request: TradingViewAlertRequest) -> ExecutionResult:
        """
        Validate and execute one alert.

        Raises:
            ValidationError: malformed alert, unknown/inactive bot, ticker not
                matching the bot, or a non-EUR market. The alert is already
                saved when the last three are raised.
        """
        alert_time = validate_request(request)
        action = request.action.lower()
        bot_id = request.bot_id
        ticker = request.ticker

        logger.info(f"Processing TradingView alert for bot: {bot_id}, ticker: {ticker}, action: {action}")

        await signal_service.save_signal(
            db, bot_id=bot_id, ticker=ticker, action=request.action,
            timestamp=alert_time, dry_run=request.dry_run,
        )

        bot_config = await get_bot_configuration(db, bot_id)
        if bot_config is None:
            raise ValidationError(f"Bot configuration not found: {bot_id}")

        if ticker != bot_config.trading_pair:
            raise ValidationError(
                f"Ticker mismatch: {ticker} does not match bot's configured trading pair: "
                f"{bot_config.trading_pair}"
            )
        if not is_eur_based_ticker(ticker):
            raise ValidationError(
                f"Unsupported ticker: {ticker}. Only EUR-based trading pairs are supported in v1."
            )

        async with position_service.position_lock(bot_id, ticker):
            if action == "buy":
                result = await self._execute(db, bot_config, ticker, action, request.dry_run, self._buy)
                if isinstance(result, OrderCompleted):
                    await position_service.open_position(db, bot_id, ticker)
            else:
                result = await self._execute(db, bot_config, ticker, action, request.dry_run, self._sell)
                if isinstance(result, OrderCompleted):
                    await position_service.close_open_position(db, bot_id, ticker)
        return result

    async def _execute(self, db, bot_config: BotConfiguration, ticker: str, action: str, dry_run: bool, handler):
        # Plain str: a rollback below expires ORM attributes
        bot_id = bot_config.bot_id
        logger.info(f"Processing {action} signal for bot: {bot_id}, ticker: {ticker}")
        try:
            credentials = resolve_credentials(bot_config)
            return await handler(db, bot_id, ticker, credentials, dry_run)
        except Exception as e:
            logger.error(f"Error processing {action} signal for bot {bot_id}: {e}", exc_info=True)
            await db.rollback()
            await order_service.save_failed_order(db, bot_id, ticker, str(e))
            return ExecutionFailed(message=f"Error processing {action} signal: {e}")

    async def _buy(self, db, bot_id: str, ticker: str, credentials: BotCredentials, dry_run: bool) -> ExecutionResult:
        balance = await self.exchange.get_balance(QUOTE_CURRENCY, credentials)
        eur_balance = balance.available
        logger.info(f"EUR balance: {eur_balance}")

        if float(eur_balance) < MIN_EUR_AMOUNT:
            message = (
                f"Insufficient EUR balance: {float(eur_balance)} EUR. "
                f"Minimum required: {MIN_EUR_AMOUNT} EUR."
            )
            logger.warning(message)
            await order_service.save_failed_order(db, bot_id, ticker, message)
            return InsufficientFunds(message=message)

        order = CreateOrderRequest(market=ticker, side="buy", orderType="market", amountQuote=eur_balance)
        return await self._submit(db, bot_id, ticker, order, credentials, dry_run)

    async def _sell(self, db, bot_id: str, ticker: str, credentials: BotCredentials, dry_run: bool) -> ExecutionResult:
        asset = base_asset(ticker)

        balance = await self.exchange.get_balance(asset, credentials)
        asset_balance = balance.available
        logger.info(f"{asset} balance: {asset_balance}")

        price = await self.exchange.get_price(ticker, credentials)
        logger.info(f"{asset} price: {price.price} EUR")

        asset_worth = float(asset_balance) * float(price.price)
        logger.info(f"{asset} worth: {asset_worth} EUR")

        if asset_worth < MIN_EUR_AMOUNT:
            message = (
                f"Insufficient {asset} balance worth: {asset_worth} EUR. "
                f"Minimum required: {MIN_EUR_AMOUNT} EUR."
            )
            logger.warning(message)
            await order_service.save_failed_order(db, bot_id, ticker, message)
            return InsufficientFunds(message=message)

        order = CreateOrderRequest(market=ticker, side="sell", orderType="market", amount=asset_balance)
        return await self._submit(db, bot_id, ticker, order, credentials, dry_run)

    async def _submit(
        self,
        db,
        bot_id: str,
        ticker: str,
        order: CreateOrderRequest,
        credentials: BotCredentials,
        dry_run: bool,
    ) -> OrderCompleted:
        if dry_run:
            order_id = dry_run_order_id()
            amount = order.amountQuote if order.amountQuote is not None else order.amount
            logger.info(f"DRY RUN: would place market {order.side} on {ticker} for {amount}, id {order_id}")
        else:
            response = await self.exchange.create_order(order, credentials)
            order_id = str(response.orderId)
            logger.info(f"{order.side.capitalize()} order placed successfully: {order_id}")

        await order_service.save_completed_order(db, bot_id, ticker, order_id)
        return OrderCompleted(order_id=order_id, dry_run=dry_run)
