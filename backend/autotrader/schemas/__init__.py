from autotrader.schemas.bots import (  # noqa: F401
    BotConfigurationRequest,
    BotConfigurationResponse,
    BotCreatedResponse,
    OrderRecordResponse,
    OrderStatusUpdate,
    PositionResponse,
    PositionStatusUpdate,
    SignalResponse,
    WebhookApiKeyResponse,
)
from autotrader.schemas.webhook import (  # noqa: F401
    TradingViewAlertRequest,
    claimed_bot_id,
    parse_alert_payload,
)
