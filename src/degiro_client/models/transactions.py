"""Transaction history payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from degiro_client.models.base import DegiroModel
from degiro_client.models.orders import BuySell, OrderTypeField


class TransactionItem(DegiroModel):
    id: int
    product_id: int | None = None
    date: datetime | None = None
    buysell: BuySell | None = None
    price: float | None = None
    quantity: float | None = None
    total: float | None = None
    order_type_id: OrderTypeField | None = None
    counter_party: str | None = None
    transfered: bool | None = None
    fx_rate: float | None = None
    nett_fx_rate: float | None = None
    gross_fx_rate: float | None = None
    auto_fx_fee_in_base_currency: float | None = None
    total_in_base_currency: float | None = None
    fee_in_base_currency: float | None = None
    total_fees_in_base_currency: float | None = None
    total_plus_fee_in_base_currency: float | None = None
    total_plus_all_fees_in_base_currency: float | None = None
    transaction_type_id: int | None = None
    trading_venue: str | None = None
    executing_entity_id: str | None = None


class TransactionsHistoryResponse(DegiroModel):
    data: list[TransactionItem] = Field(default_factory=list)
