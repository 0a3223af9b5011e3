"""
TradingView webhook

POST /webhook/tradingview
    200  empty body        alert processed (including "balance too low")
    400  plaintext reason  malformed alert, unknown bot, ticker/currency mismatch
    401  plaintext         caller address not allowed, or wrong webhook key
    500  plaintext         "Error processing alert: <message>"

The body is read raw so that authorization runs before any field is
type-checked; a caller outside the allowlist always gets 401.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.database import get_db
from autotrader.exceptions import AppError, AuthorizationError, ExecutionError
from autotrader.schemas.webhook import TradingViewAlertRequest, claimed_bot_id, parse_alert_payload
from autotrader.services.trading_service import ExecutionFailed, TradingService
from autotrader.services.webhook_auth_service import WebhookAuthResult, authorize

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/webhook", tags=["webhook"])

_trading_service = TradingService()

_ALERT_BODY_DOC = {
    "requestBody": {
        "required": True,
        "content": {"application/json": {"schema": TradingViewAlertRequest.model_json_schema(by_alias=True)}},
    }
}


def get_trading_service() -> TradingService:
    return _trading_service


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/tradingview", openapi_extra=_ALERT_BODY_DOC)
async def handle_tradingview_alert(
    request: Request,
    x_api_key: Optional[str] = Header(default=None, alias="X-API-KEY"),
    db: AsyncSession = Depends(get_db),
    trading_service: TradingService = Depends(get_trading_service),
):
    """Receive a TradingView alert and execute it for the target bot"""
    payload = await _read_json(request)
    bot_id = claimed_bot_id(payload)
    logger.info(f"Received TradingView alert for bot: {bot_id or None}")

    caller_address = request.client.host if request.client else None
    auth_result = await authorize(db, bot_id, x_api_key, caller_address)

    if auth_result == WebhookAuthResult.IP_NOT_ALLOWED:
        logger.warning(f"Unauthorized access attempt from IP: {caller_address}")
        raise AuthorizationError("Unauthorized access")
    if auth_result == WebhookAuthResult.INVALID_API_KEY:
        logger.warning(f"Invalid API key for bot: {bot_id}")
        raise AuthorizationError("Invalid API key")

    alert = parse_alert_payload(payload)
    logger.info(f"Alert for bot: {alert.bot_id}, ticker: {alert.ticker}, action: {alert.action}")

    try:
        result = await trading_service.process_alert(db, alert)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error processing TradingView alert: {e}", exc_info=True)
        return PlainTextResponse(f"Error processing alert: {e}", status_code=500)

    if isinstance(result, ExecutionFailed):
        raise ExecutionError(f"Error processing alert: {result.message}")

    return Response(status_code=200)
