"""Product, search and favorites payloads."""

from __future__ import annotations

from pydantic import Field

from degiro_client.models.base import DegiroModel


class ProductInfo(DegiroModel):
    id: str
    name: str
    symbol: str
    currency: str
    contract_size: float
    close_price: float
    product_type_id: int
    tradable: bool

    # only present for some product types
    isin: str | None = None
    product_type: str | None = None
    category: str | None = None
    active: bool | None = None
    strike_price: float | None = None
    exchange_id: str | None = None
    only_eod_prices: bool | None = None
    order_time_types: list[str] | None = None
    buy_order_types: list[str] | None = None
    sell_order_types: list[str] | None = None
    close_price_date: str | None = None
    is_shortable: bool | None = None

    feed_quality: str | None = None
    order_book_depth: int | None = None
    vwd_identifier_type: str | None = None
    vwd_id: str | None = None
    quality_switchable: bool | None = None
    quality_switch_free: bool | None = None
    vwd_module_id: int | None = None

    feed_quality_secondary: str | None = None
    order_book_depth_secondary: int | None = None
    vwd_identifier_type_secondary: str | None = None
    vwd_id_secondary: str | None = None
    quality_switchable_secondary: bool | None = None
    quality_switch_free_secondary: bool | None = None
    vwd_module_id_secondary: int | None = None

    product_bit_types: list[str] | None = None


class ProductInfoResponse(DegiroModel):
    data: dict[str, ProductInfo] = Field(default_factory=dict)

    def products(self) -> list[ProductInfo]:
        return list(self.data.values())

    def get_product(self, product_id: str | int) -> ProductInfo | None:
        return self.data.get(str(product_id))

    def tradable_products(self) -> list[ProductInfo]:
        return [product for product in self.data.values() if product.tradable]

    def products_by_type(self, product_type: str) -> list[ProductInfo]:
        return [product for product in self.data.values() if product.product_type == product_type]


class ProductSearchResponse(DegiroModel):
    offset: int | None = None
    products: list[ProductInfo] = Field(default_factory=list)


class FavoritesList(DegiroModel):
    product_ids: list[int] = Field(default_factory=list)
    id: int | None = None
    name: str | None = None
    is_default: bool | None = None


class FavoritesResponse(DegiroModel):
    data: list[FavoritesList]

    def first_list_ids(self) -> list[int]:
        if not self.data:
            return []
        return list(self.data[0].product_ids)
