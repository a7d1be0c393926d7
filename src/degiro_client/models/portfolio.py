"""Portfolio update payloads."""

from __future__ import annotations

from pydantic import Field

from degiro_client.decoding import PositionValue, PositionValueField
from degiro_client.models.base import DegiroModel


class PositionField(DegiroModel):
    name: str
    value: PositionValueField | None = None
    is_added: bool | None = None


class PositionRow(DegiroModel):
    # currency cash rows use the currency code as id, e.g. "USD"
    id: str
    name: str | None = None
    value: list[PositionField] = Field(default_factory=list)
    is_added: bool | None = None

    def field(self, name: str) -> PositionValue | None:
        for entry in self.value:
            if entry.name == name:
                return entry.value
        return None

    def as_dict(self) -> dict[str, PositionValue | None]:
        return {entry.name: entry.value for entry in self.value}


class Portfolio(DegiroModel):
    last_updated: int | None = None
    name: str | None = None
    value: list[PositionRow] = Field(default_factory=list)
    is_added: bool | None = None

    def product_ids(self) -> list[str]:
        return [row.id for row in self.value]


class PortfolioResponse(DegiroModel):
    portfolio: Portfolio
