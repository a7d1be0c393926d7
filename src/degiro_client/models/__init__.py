"""Typed DEGIRO payload models."""

from degiro_client.models.account import AccountInfo, AccountOverview, CashMovement
from degiro_client.models.orders import (
    BuySell,
    CheckOrderResult,
    HistoryItem,
    Order,
    OrderAction,
    OrderConfirmation,
    OrderTimeType,
    OrderType,
)
from degiro_client.models.portfolio import Portfolio, PositionField, PositionRow
from degiro_client.models.products import ProductInfo, ProductInfoResponse
from degiro_client.models.transactions import TransactionItem

__all__ = [
    "AccountInfo",
    "AccountOverview",
    "BuySell",
    "CashMovement",
    "CheckOrderResult",
    "HistoryItem",
    "Order",
    "OrderAction",
    "OrderConfirmation",
    "OrderTimeType",
    "OrderType",
    "Portfolio",
    "PositionField",
    "PositionRow",
    "ProductInfo",
    "ProductInfoResponse",
    "TransactionItem",
]
