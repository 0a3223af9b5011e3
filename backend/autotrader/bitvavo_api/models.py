"""
Bitvavo request/response models

Field names follow the Bitvavo REST API (camelCase). Amounts are Decimal and
travel as strings on the wire, as Bitvavo expects.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer


class BitvavoModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class AccountBalance(BitvavoModel):
    """One entry of GET /balance"""
    symbol: str
    available: Decimal = Decimal("0")
    inOrder: Decimal = Decimal("0")


class TickerPrice(BitvavoModel):
    """GET /ticker/price for a single market"""
    market: str
    price: Decimal


class AccountFees(BitvavoModel):
    tier: Optional[int] = None
    volume: Optional[Decimal] = None
    taker: Optional[Decimal] = None
    maker: Optional[Decimal] = None


class AccountInfo(BitvavoModel):
    """GET /account: the fee tier of the API key's account"""
    fees: Optional[AccountFees] = None
    capabilities: List[str] = []


class ServerTime(BitvavoModel):
    """GET /time, milliseconds since the epoch"""
    time: int
    timeNs: Optional[int] = None


class AssetData(BitvavoModel):
    """One entry of GET /assets"""
    symbol: str
    name: Optional[str] = None
    decimals: Optional[int] = None
    depositFee: Optional[Decimal] = None
    depositConfirmations: Optional[int] = None
    depositStatus: Optional[str] = None
    withdrawalFee: Optional[Decimal] = None
    withdrawalMinAmount: Optional[Decimal] = None
    withdrawalStatus: Optional[str] = None
    networks: List[str] = []
    message: Optional[str] = None


class CreateOrderRequest(BitvavoModel):
    """
    Body of POST /order.

    Market orders set either amount (base currency) or amountQuote (quote
    currency). Unset fields are left out of the serialized body.
    """
    market: str
    side: str  # "buy" or "sell"
    orderType: str  # "market", "limit", ...
    amount: Optional[Decimal] = None
    amountQuote: Optional[Decimal] = None
    price: Optional[Decimal] = None
    timeInForce: Optional[str] = None
    clientOrderId: Optional[str] = None
    responseRequired: Optional[bool] = None

    @field_serializer("amount", "amountQuote", "price")
    def _decimal_as_string(self, value: Optional[Decimal]) -> Optional[str]:
        return None if value is None else str(value)

    def to_body(self) -> str:
        """Compact JSON body; this exact string is what gets signed and sent."""
        return self.model_dump_json(exclude_none=True)


class Fill(BitvavoModel):
    id: Optional[str] = None
    timestamp: Optional[int] = None
    amount: Optional[Decimal] = None
    price: Optional[Decimal] = None
    taker: Optional[bool] = None
    fee: Optional[Decimal] = None
    feeCurrency: Optional[str] = None
    settled: Optional[bool] = None


class CreateOrderResponse(BitvavoModel):
    """Synchronous response of POST /order (fills are recorded, not reconciled)"""
    orderId: str
    market: Optional[str] = None
    created: Optional[int] = None
    updated: Optional[int] = None
    status: Optional[str] = None
    side: Optional[str] = None
    orderType: Optional[str] = None
    amount: Optional[Decimal] = None
    amountRemaining: Optional[Decimal] = None
    amountQuote: Optional[Decimal] = None
    amountQuoteRemaining: Optional[Decimal] = None
    filledAmount: Optional[Decimal] = None
    filledAmountQuote: Optional[Decimal] = None
    feePaid: Optional[Decimal] = None
    feeCurrency: Optional[str] = None
    fills: List[Fill] = []
