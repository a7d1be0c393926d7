"""Order placement and order-history payloads."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field, field_validator, model_validator

from degiro_client.decoding import OpenIntEnum, open_enum
from degiro_client.models.base import DegiroModel


class OrderAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class BuySell(str, Enum):
    B = "B"
    S = "S"


class OrderType(OpenIntEnum):
    LIMIT = 0
    STOP_LIMIT = 1
    MARKET = 2
    STOP_LOSS = 3


class OrderTimeType(OpenIntEnum):
    GOOD_TILL_DAY = 1
    GOOD_TILL_CANCELED = 3


OrderTypeField = open_enum(OrderType)
OrderTimeTypeField = open_enum(OrderTimeType)


class Order(DegiroModel):
    buy_sell: OrderAction
    order_type: OrderTypeField
    product_id: str
    size: float
    price: float | None = None
    time_type: OrderTimeTypeField = OrderTimeType.GOOD_TILL_DAY
    stop_price: float | None = None

    @field_validator("size")
    @classmethod
    def _positive_size(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("size must be positive")
        return value

    @model_validator(mode="after")
    def _prices_match_type(self) -> "Order":
        if self.order_type in {OrderType.LIMIT, OrderType.STOP_LIMIT} and self.price is None:
            raise ValueError(f"{self.order_type.name} orders require a price")
        if self.order_type in {OrderType.STOP_LIMIT, OrderType.STOP_LOSS} and self.stop_price is None:
            raise ValueError(f"{self.order_type.name} orders require a stop_price")
        return self


class TransactionFee(DegiroModel):
    id: int | None = None
    amount: float | None = None
    currency: str | None = None


class CheckOrderResult(DegiroModel):
    confirmation_id: str
    free_space_new: float | None = None
    transaction_fees: list[TransactionFee] = Field(default_factory=list)
    transaction_opposite_fees: list[TransactionFee] = Field(default_factory=list)
    show_ex_ante_report_link: bool | None = None


class CheckOrderResponse(DegiroModel):
    data: CheckOrderResult


class OrderConfirmation(DegiroModel):
    order_id: str


class OrderConfirmationResponse(DegiroModel):
    data: OrderConfirmation


class HistoryItem(DegiroModel):
    product_id: int
    order_id: str | None = None
    buysell: BuySell | None = None
    created: datetime | None = None
    last: datetime | None = None
    size: float | None = None
    price: float | None = None
    stop_price: float | None = None
    current_traded_size: float | None = None
    total_traded_size: float | None = None
    order_type_id: OrderTypeField | None = None
    order_time_type_id: OrderTimeTypeField | None = None
    active: bool | None = None
    status: str | None = None
    event_type: str | None = Field(default=None, alias="type")


class HistoryResponse(DegiroModel):
    data: list[HistoryItem] = Field(default_factory=list)
