from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from autotrader.exceptions import ValidationError

_STRING_FIELDS = ("botId", "ticker", "action", "timestamp")


class TradingViewAlertRequest(BaseModel):
    """
    Body of a TradingView alert, e.g.
    {"botId": "aB3dE9", "ticker": "BTCEUR", "action": "buy", "timestamp": "2025-01-01T12:00:00Z"}

    Fields are loosely typed here; the trading service validates them so that
    every rejection carries a specific message.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    bot_id: Optional[str] = None
    ticker: Optional[str] = None
    action: Optional[str] = None
    timestamp: Optional[str] = None
    dry_run: bool = False


def parse_alert_payload(payload: Any) -> TradingViewAlertRequest:
    """
    Build an alert from a decoded JSON body.

    Wrongly typed fields are rejected with a plaintext ValidationError rather
    than a schema error listing. A null dryRun means false.

    Raises:
        ValidationError: body is not a JSON object, or a field has the wrong type
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request body: expected a JSON object")

    for name in _STRING_FIELDS:
        value = payload.get(name)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"Invalid {name}: expected a string")

    dry_run = payload.get("dryRun")
    if dry_run is not None and not isinstance(dry_run, bool):
        raise ValidationError("Invalid dryRun: expected true or false")

    return TradingViewAlertRequest(
        bot_id=payload.get("botId"),
        ticker=payload.get("ticker"),
        action=payload.get("action"),
        timestamp=payload.get("timestamp"),
        dry_run=bool(dry_run),
    )


def claimed_bot_id(payload: Any) -> str:
    """botId from a raw body, or "" when absent or not a string"""
    if isinstance(payload, dict) and isinstance(payload.get("botId"), str):
        return payload["botId"]
    return ""
