"""
Bot configuration API

Registers bots, toggles them and rotates webhook keys. Bots are never
deleted, only deactivated.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from autotrader.database import get_db
from autotrader.exceptions import NotFoundError
from autotrader.schemas import (
    BotConfigurationRequest,
    BotConfigurationResponse,
    BotCreatedResponse,
    WebhookApiKeyResponse,
)
from autotrader.services import bot_configuration_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/bots", tags=["bots"])


@router.post("/create", response_model=BotCreatedResponse, status_code=201)
async def create_bot(request: BotConfigurationRequest, db: AsyncSession = Depends(get_db)):
    """Register a bot; the webhook API key is returned only in this response"""
    logger.info("Received request to create bot configuration")

    config = await bot_configuration_service.create_bot_configuration(
        db, api_key=request.api_key, api_secret=request.api_secret, trading_pair=request.trading_pair
    )
    webhook_api_key = await bot_configuration_service.generate_and_save_webhook_api_key(db, config.bot_id)

    logger.info(f"Successfully created bot configuration with ID: {config.bot_id}")
    return BotCreatedResponse(
        bot_id=config.bot_id,
        trading_pair=config.trading_pair,
        active=config.active,
        webhook_api_key=webhook_api_key,
    )


@router.get("/{bot_id}", response_model=BotConfigurationResponse)
async def get_bot(bot_id: str, db: AsyncSession = Depends(get_db)):
    config = await bot_configuration_service.get_bot_configuration(db, bot_id)
    if config is None:
        logger.warning(f"Bot configuration with ID: {bot_id} not found within active configurations")
        raise NotFoundError("Bot not found")
    return BotConfigurationResponse.model_validate(config)


@router.get("", response_model=List[BotConfigurationResponse])
async def list_bots(
    include_inactive: bool = Query(False, alias="includeInactive"),
    db: AsyncSession = Depends(get_db),
):
    configs = await bot_configuration_service.get_all_bot_configurations(db, include_inactive=include_inactive)
    logger.info(f"Retrieved {len(configs)} bot configurations (includeInactive={include_inactive})")

    if not configs:
        return Response(status_code=204, headers={"X-Message": "No bot configurations found"})
    return [BotConfigurationResponse.model_validate(c) for c in configs]


@router.patch("/deactivate/{bot_id}", response_class=PlainTextResponse)
async def deactivate_bot(bot_id: str, db: AsyncSession = Depends(get_db)):
    """Stop a bot from processing alerts"""
    if not await bot_configuration_service.deactivate_bot_configuration(db, bot_id):
        raise NotFoundError("Bot not found")
    return f"Bot configuration deactivated ID: {bot_id}"


@router.patch("/activate/{bot_id}", response_class=PlainTextResponse)
async def activate_bot(bot_id: str, db: AsyncSession = Depends(get_db)):
    if not await bot_configuration_service.activate_bot_configuration(db, bot_id):
        raise NotFoundError("Bot not found")
    return f"Bot configuration activated ID: {bot_id}"


@router.post("/webhook-key/{bot_id}", response_model=WebhookApiKeyResponse)
async def regenerate_webhook_key(bot_id: str, db: AsyncSession = Depends(get_db)):
    """Replace the bot's webhook API key; the old key stops working immediately"""
    webhook_api_key = await bot_configuration_service.generate_and_save_webhook_api_key(db, bot_id)
    if webhook_api_key is None:
        raise NotFoundError("Bot not found")
    return WebhookApiKeyResponse(bot_id=bot_id, webhook_api_key=webhook_api_key)
