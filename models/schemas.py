#Description: Pydantic schemas for inbound signals, Kraken requests/responses and read endpoints.

from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Optional
from datetime import datetime

class WebhookSignal(BaseModel):
    # TradingView-style alert body; every field arrives as a string.
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    token: str = ""
    text: str = ""
    pair: str = ""
    type: str = ""
    ordertype: str = ""
    volume: str = ""
    price: str = ""
    price2: str = ""
    close_ordertype: str = ""
    close_price: str = ""
    close_price2: str = ""

class CloseOrder(BaseModel):
    ordertype: str = ""
    price: str = ""
    price2: str = ""

    def is_empty(self) -> bool:
        return not (self.ordertype or self.price or self.price2)

class OrderInput(BaseModel):
    pair: str
    type: str
    ordertype: str = "market"
    volume: str
    price: str = ""
    price2: str = ""
    userref: str = ""
    oflags: str = ""
    timeinforce: str = ""
    validate_only: bool = False  # sent as validate=true
    close: Optional[CloseOrder] = None

class Envelope(BaseModel):
    error: list[str] = Field(default_factory=list)
    result: Any = None

class OrderDescription(BaseModel):
    order: str = ""
    close: str = ""

class AddOrderReceipt(BaseModel):
    descr: OrderDescription = Field(default_factory=OrderDescription)
    txid: list[str] = Field(default_factory=list)

    @property
    def first_txid(self) -> str:
        return self.txid[0] if self.txid else ""

class TradeBalance(BaseModel):
    eb: str = ""   # equivalent balance
    tb: str = ""   # trade balance
    m: str = ""    # margin amount of open positions
    n: str = ""    # unrealized net pnl
    c: str = ""    # cost basis
    v: str = ""    # floating valuation
    e: str = ""    # equity
    mf: str = ""   # free margin
    ml: str = ""   # margin level

class ServerTime(BaseModel):
    unixtime: int
    rfc1123: str = ""

class SignalOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    received_at: datetime
    pair: str = ""
    type: str = ""
    payload: str = ""

class TradeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    signal_id: Optional[int] = None
    pair: str = ""
    type: str = ""
    ordertype: str = ""
    volume: str = ""
    price: str = ""
    txid: str = ""
    created_at: datetime
    status: str = "open"
    pnl: float = 0.0

class WebhookOutcome(BaseModel):
    signal_id: int = 0
    status: str  # skipped|placed|validated|rejected|failed|unknown
    txid: str = ""
    message: str = ""
