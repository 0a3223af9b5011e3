"""
Bitvavo REST client

Issues signed GET/POST calls and decodes the JSON responses. HTTP and
transport errors are logged and re-raised unchanged; this client never
retries. Retry policy, if any, belongs to the caller.
"""

import logging
from typing import Any, List, Optional
from urllib.parse import urlencode

import httpx

from autotrader.bitvavo_api.auth import create_auth_headers
from autotrader.bitvavo_api.credentials import BotCredentials
from autotrader.bitvavo_api.curl_logging import log_request_as_curl
from autotrader.bitvavo_api.models import (
    AccountBalance,
    AccountInfo,
    AssetData,
    CreateOrderRequest,
    CreateOrderResponse,
    ServerTime,
    TickerPrice,
)
from autotrader.config import settings

logger = logging.getLogger(__name__)


def _with_query(path: str, **params: Optional[str]) -> str:
    query = urlencode({k: v for k, v in params.items() if v})
    return f"{path}?{query}" if query else path


def _as_list(data: Any) -> List[Any]:
    """Bitvavo returns a list, or a single object when filtered to one item"""
    return data if isinstance(data, list) else [data]


class BitvavoClient:
    """
    Thin typed client for the Bitvavo endpoints the trading pipeline and the
    account pass-through API use.

    Args:
        base_url: API root including the version, e.g. https://api.bitvavo.com/v2
        window_ms: Access window sent with every signed request
        timeout: Transport timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        window_ms: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.bitvavo_api_url).rstrip("/")
        self.window_ms = window_ms if window_ms is not None else settings.bitvavo_window_ms
        self.timeout = timeout if timeout is not None else settings.bitvavo_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            event_hooks={"request": [log_request_as_curl]},
        )

    def _headers(self, method: str, path: str, body: Optional[str], credentials: BotCredentials) -> dict:
        auth = create_auth_headers(
            method, path, body, credentials.api_key, credentials.api_secret, self.window_ms
        )
        headers = auth.as_headers()
        headers["Accept"] = "application/json"
        if method == "GET":
            headers["Content-Length"] = "0"
        else:
            headers["Content-Type"] = "application/json"
        return headers

    async def _send(self, method: str, path: str, body: Optional[str], credentials: BotCredentials) -> Any:
        url = f"{self.base_url}{path}"
        headers = self._headers(method, path, body, credentials)

        async with self._client() as client:
            logger.debug(f"Sending {method} request to Bitvavo API: {path}")
            response = await client.request(method, url, headers=headers, content=body or None)
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Bitvavo API error {e.response.status_code} on {method} {path}: {e.response.text}"
                )
                raise

            logger.debug(f"Received response from Bitvavo API: {path} with status {response.status_code}")
            return response.json()

    async def get(self, path: str, credentials: BotCredentials) -> Any:
        return await self._send("GET", path, None, credentials)

    async def post(self, path: str, body: str, credentials: BotCredentials) -> Any:
        """POST a raw JSON body; the same string is signed and sent."""
        return await self._send("POST", path, body, credentials)

    # ----------------------------------------------------------------------
    # Typed endpoints
    # ----------------------------------------------------------------------

    async def get_balance(self, symbol: str, credentials: BotCredentials) -> AccountBalance:
        """
        Available balance for one asset.

        Bitvavo answers with a list; an empty list means the account never
        held the asset, which is reported as a zero balance.
        """
        data = await self.get(f"/balance?symbol={symbol}", credentials)
        if isinstance(data, list):
            if not data:
                return AccountBalance(symbol=symbol)
            data = data[0]
        return AccountBalance.model_validate(data)

    async def get_price(self, market: str, credentials: BotCredentials) -> TickerPrice:
        data = await self.get(f"/ticker/price?market={market}", credentials)
        if isinstance(data, list):
            data = data[0]
        return TickerPrice.model_validate(data)

    async def create_order(self, order: CreateOrderRequest, credentials: BotCredentials) -> CreateOrderResponse:
        data = await self.post("/order", order.to_body(), credentials)
        return CreateOrderResponse.model_validate(data)

    async def get_account(self, credentials: BotCredentials) -> AccountInfo:
        return AccountInfo.model_validate(await self.get("/account", credentials))

    async def get_server_time(self, credentials: BotCredentials) -> ServerTime:
        return ServerTime.model_validate(await self.get("/time", credentials))

    async def get_assets(self, credentials: BotCredentials, symbol: Optional[str] = None) -> List[AssetData]:
        data = await self.get(_with_query("/assets", symbol=symbol), credentials)
        return [AssetData.model_validate(item) for item in _as_list(data)]

    async def get_balances(self, credentials: BotCredentials, symbol: Optional[str] = None) -> List[AccountBalance]:
        """All non-zero balances, or the one for symbol"""
        data = await self.get(_with_query("/balance", symbol=symbol), credentials)
        return [AccountBalance.model_validate(item) for item in _as_list(data)]

    async def get_prices(self, credentials: BotCredentials, market: Optional[str] = None) -> List[TickerPrice]:
        data = await self.get(_with_query("/ticker/price", market=market), credentials)
        return [TickerPrice.model_validate(item) for item in _as_list(data)]


bitvavo_client = BitvavoClient()
