"""
Bot API Pydantic Schemas

Wire names are camelCase. Responses never carry exchange credentials.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BotConfigurationRequest(CamelModel):
    api_key: str
    api_secret: str
    trading_pair: str

    def __repr__(self) -> str:
        return f"BotConfigurationRequest(trading_pair={self.trading_pair!r})"


class BotConfigurationResponse(CamelModel):
    bot_id: str
    trading_pair: str
    active: bool
    key_version: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BotCreatedResponse(CamelModel):
    bot_id: str
    trading_pair: str
    active: bool
    webhook_api_key: str


class WebhookApiKeyResponse(CamelModel):
    bot_id: str
    webhook_api_key: str


class SignalResponse(CamelModel):
    id: int
    bot_id: str
    ticker: str
    action: str
    timestamp: datetime
    dry_run: bool


class OrderRecordResponse(CamelModel):
    id: int
    bot_id: str
    order_id: Optional[str]
    ticker: str
    timestamp: datetime
    status: str
    error_message: Optional[str]


class OrderStatusUpdate(CamelModel):
    status: str
    error_message: Optional[str] = None


class PositionResponse(CamelModel):
    id: int
    bot_id: str
    ticker: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PositionStatusUpdate(CamelModel):
    status: str
