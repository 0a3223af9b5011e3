"""
Tests for backend/autotrader/routers/bitvavo_router.py

Credential resolution runs against the test database; everything else goes
through TestClient with the Bitvavo client and credentials overridden.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient

from autotrader.bitvavo_api.credentials import BotCredentials
from autotrader.bitvavo_api.models import (
    AccountBalance,
    AccountFees,
    AccountInfo,
    CreateOrderResponse,
    ServerTime,
)
from autotrader.database import get_db
from autotrader.exceptions import NotFoundError
from autotrader.main import app
from autotrader.routers.bitvavo_router import get_bitvavo_client, get_bot_credentials

CREDS = BotCredentials(api_key="bitvavo-key", api_secret="bitvavo-secret", bot_id="aB3dE9")


def _status_error(status_code, text):
    request = httpx.Request("GET", "https://api.bitvavo.com/v2/balance")
    response = httpx.Response(status_code, text=text, request=request)
    return httpx.HTTPStatusError(f"{status_code}", request=request, response=response)


class TestBotCredentials:
    async def test_resolves_active_bot(self, db_session, make_bot):
        await make_bot(bot_id="aB3dE9", api_key="plain-key", api_secret="plain-secret")

        credentials = await get_bot_credentials("aB3dE9", db=db_session)

        assert credentials.api_key == "plain-key"
        assert credentials.api_secret == "plain-secret"
        assert credentials.bot_id == "aB3dE9"

    async def test_inactive_bot_is_404(self, db_session, make_bot):
        await make_bot(bot_id="OFF001", active=False)

        with pytest.raises(NotFoundError) as exc_info:
            await get_bot_credentials("OFF001", db=db_session)
        assert exc_info.value.message == "Bot not found"


@pytest.fixture
def client():
    exchange = MagicMock()
    app.dependency_overrides[get_bitvavo_client] = lambda: exchange
    app.dependency_overrides[get_bot_credentials] = lambda: CREDS
    yield TestClient(app), exchange
    app.dependency_overrides.clear()


class TestPassThrough:
    def test_account_fees(self, client):
        http, exchange = client
        exchange.get_account = AsyncMock(
            return_value=AccountInfo(fees=AccountFees(taker=Decimal("0.0025"), maker=Decimal("0.0015")))
        )

        response = http.get("/api/bitvavo/account", params={"botId": "aB3dE9"})

        assert response.status_code == 200
        assert response.json()["fees"]["taker"] == "0.0025"
        exchange.get_account.assert_awaited_once_with(CREDS)

    def test_time(self, client):
        http, exchange = client
        exchange.get_server_time = AsyncMock(return_value=ServerTime(time=1700000000000))

        response = http.get("/api/bitvavo/time", params={"botId": "aB3dE9"})

        assert response.json()["time"] == 1700000000000

    def test_balance_symbol_forwarded(self, client):
        http, exchange = client
        exchange.get_balances = AsyncMock(
            return_value=[AccountBalance(symbol="EUR", available=Decimal("100.00"))]
        )

        response = http.get("/api/bitvavo/balance", params={"botId": "aB3dE9", "symbol": "EUR"})

        assert response.status_code == 200
        assert [b["symbol"] for b in response.json()] == ["EUR"]
        exchange.get_balances.assert_awaited_once_with(CREDS, "EUR")

    def test_assets_without_symbol(self, client):
        http, exchange = client
        exchange.get_assets = AsyncMock(return_value=[])

        response = http.get("/api/bitvavo/assets", params={"botId": "aB3dE9"})

        assert response.json() == []
        exchange.get_assets.assert_awaited_once_with(CREDS, None)

    def test_order_passed_through(self, client):
        http, exchange = client
        exchange.create_order = AsyncMock(return_value=CreateOrderResponse(orderId="abc", status="new"))

        response = http.post(
            "/api/bitvavo/order",
            params={"botId": "aB3dE9"},
            json={"market": "BTC-EUR", "side": "buy", "orderType": "limit", "amount": "0.01", "price": "25000"},
        )

        assert response.status_code == 200
        assert response.json()["orderId"] == "abc"
        order, credentials = exchange.create_order.await_args.args
        assert order.amount == Decimal("0.01")
        assert credentials == CREDS


async def _no_db():
    yield None


class TestErrors:
    def test_bot_id_required(self):
        app.dependency_overrides[get_db] = _no_db
        try:
            response = TestClient(app).get("/api/bitvavo/time")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 422

    def test_exchange_rejection_is_plaintext_400(self, client):
        http, exchange = client
        exchange.get_balances = AsyncMock(side_effect=_status_error(400, '{"errorCode": 205}'))

        response = http.get("/api/bitvavo/balance", params={"botId": "aB3dE9"})

        assert response.status_code == 400
        assert response.text == 'Bitvavo rejected balance: {"errorCode": 205}'

    def test_exchange_outage_is_503(self, client):
        http, exchange = client
        exchange.get_server_time = AsyncMock(side_effect=_status_error(502, "Bad Gateway"))

        response = http.get("/api/bitvavo/time", params={"botId": "aB3dE9"})

        assert response.status_code == 503
        assert response.text == "Bitvavo error 502 on time"

    def test_unreachable_exchange_is_503(self, client):
        http, exchange = client
        exchange.get_account = AsyncMock(side_effect=httpx.ConnectError("connection refused"))

        response = http.get("/api/bitvavo/account", params={"botId": "aB3dE9"})

        assert response.status_code == 503
        assert response.text == "Bitvavo unreachable: connection refused"
