"""Account info and account overview payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from degiro_client.models.base import DegiroModel


class CurrencyPair(DegiroModel):
    id: int | None = None
    price: str | None = None


class AccountInfo(DegiroModel):
    client_id: int
    base_currency: str
    currency_pairs: dict[str, CurrencyPair] = Field(default_factory=dict)
    margin_type: str | None = None
    cash_funds: dict[str, Any] = Field(default_factory=dict)
    compensation_capping: float | None = None


class AccountInfoResponse(DegiroModel):
    data: AccountInfo


class CashBalance(DegiroModel):
    unsettled_cash: float | None = None
    flatex_cash: float | None = None
    cash_fund: list[Any] = Field(default_factory=list)
    total: float | None = None


class CashMovement(DegiroModel):
    id: int | None = None
    date: datetime | None = None
    value_date: datetime | None = None
    description: str | None = None
    currency: str | None = None
    change: float | None = None
    balance: CashBalance | None = None
    type: str | None = None
    product_id: int | None = None
    order_id: str | None = None
    exchange_rate: float | None = None


class AccountOverview(DegiroModel):
    cash_movements: list[CashMovement] = Field(default_factory=list)


class AccountOverviewResponse(DegiroModel):
    data: AccountOverview
