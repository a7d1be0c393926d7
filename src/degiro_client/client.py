"""Async DEGIRO web-trader client."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from degiro_client.auth import AuthFlow
from degiro_client.config import ClientConfig, Credentials
from degiro_client.dates import IsoDate, OrderHistoryDate, date_range_params
from degiro_client.decoding import ResponseDecoder
from degiro_client.exceptions import InvalidArgument
from degiro_client.models.account import AccountInfo, AccountInfoResponse, AccountOverview, AccountOverviewResponse
from degiro_client.models.orders import (
    CheckOrderResponse,
    CheckOrderResult,
    HistoryItem,
    HistoryResponse,
    Order,
    OrderConfirmation,
    OrderConfirmationResponse,
)
from degiro_client.models.portfolio import Portfolio, PortfolioResponse
from degiro_client.models.products import FavoritesResponse, ProductInfo, ProductInfoResponse, ProductSearchResponse
from degiro_client.models.transactions import TransactionItem, TransactionsHistoryResponse
from degiro_client.request_builder import (
    ACCOUNT_INFO,
    ACCOUNT_OVERVIEW,
    CHECK_ORDER,
    CONFIRM_ORDER,
    FAVORITES,
    ORDER_HISTORY,
    PORTFOLIO,
    PRODUCT_INFO,
    PRODUCT_SEARCH,
    TRANSACTIONS,
    Endpoint,
    RequestBuilder,
)
from degiro_client.session import SessionSnapshot, SessionStage, SessionState
from degiro_client.totp import TotpGenerator
from degiro_client.transport import HttpExecutor, build_http_client

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

DEFAULT_SEARCH_LIMIT = 10


class DegiroClient:
    """Stateful client: one session, one account, one cookie jar.

    ``login()`` must complete before any other call; every endpoint method
    checks for an Active session before anything is sent. Endpoint methods
    only read the session, so they can run concurrently once logged in.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        config: ClientConfig | None = None,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if http_client is not None and transport is not None:
            raise ValueError("pass either transport or http_client, not both")
        cfg = config or ClientConfig()
        if base_url is not None:
            cfg = cfg.model_copy(update={"base_url": ClientConfig(base_url=base_url).base_url})
        self._cfg = cfg

        # decode the TOTP secret up front so a bad secret fails here
        totp = TotpGenerator(credentials.totp_secret)

        self._owns_http = http_client is None
        self._http = http_client or build_http_client(cfg, transport=transport)
        self._session = SessionState()
        self._builder = RequestBuilder(cfg.base_url, self._session)
        self._executor = HttpExecutor(self._http)
        self._decoder = ResponseDecoder()
        self._auth = AuthFlow(
            credentials,
            session=self._session,
            builder=self._builder,
            executor=self._executor,
            decoder=self._decoder,
            totp=totp,
        )

    async def __aenter__(self) -> "DegiroClient":
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    @property
    def base_url(self) -> str:
        return self._cfg.base_url

    @property
    def stage(self) -> SessionStage:
        return self._session.stage

    @property
    def is_active(self) -> bool:
        return self._session.is_active

    @property
    def session(self) -> SessionSnapshot:
        return self._session.snapshot()

    async def login(self) -> None:
        """Log in with username, password and a fresh TOTP code, then bind the account."""
        await self._auth.login()

    async def get_favorites(self) -> list[int]:
        """Product ids of the first favorites list."""
        res = await self._call(FAVORITES, FavoritesResponse)
        return res.first_list_ids()

    async def get_products_details(self, ids: Iterable[int | str]) -> list[ProductInfo]:
        self._session.require_active()
        product_ids = [str(product_id) for product_id in ids]
        if not product_ids:
            return []
        res = await self._call(PRODUCT_INFO, ProductInfoResponse, json_body=product_ids)
        return res.products()

    async def search_product_by_name(
        self,
        text: str,
        *,
        offset: int = 0,
        limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> list[ProductInfo]:
        self._session.require_active()
        if not text.strip():
            raise InvalidArgument("search text is required")
        if offset < 0 or limit <= 0:
            raise InvalidArgument("offset must be >= 0 and limit > 0", details={"offset": offset, "limit": limit})
        res = await self._call(
            PRODUCT_SEARCH,
            ProductSearchResponse,
            params={"searchText": text.strip(), "offset": offset, "limit": limit},
        )
        return res.products

    async def get_portfolio(self) -> Portfolio:
        res = await self._call(PORTFOLIO, PortfolioResponse, params={"portfolio": 0})
        return res.portfolio

    async def get_order_history(
        self,
        from_date: OrderHistoryDate | date | str,
        to_date: OrderHistoryDate | date | str,
    ) -> list[HistoryItem]:
        """Orders placed in the range; string dates use ``dd/mm/yyyy``."""
        self._session.require_active()
        params = date_range_params(OrderHistoryDate.coerce(from_date), OrderHistoryDate.coerce(to_date))
        res = await self._call(ORDER_HISTORY, HistoryResponse, params=params)
        return res.data

    async def get_transaction_history(
        self,
        from_date: IsoDate | date | str,
        to_date: IsoDate | date | str,
        *,
        group_by_order: bool = False,
    ) -> list[TransactionItem]:
        """Executed transactions in the range; string dates use ISO ``yyyy-mm-dd``."""
        self._session.require_active()
        params: dict[str, Any] = date_range_params(IsoDate.coerce(from_date), IsoDate.coerce(to_date))
        params["groupTransactionsByOrder"] = group_by_order
        res = await self._call(TRANSACTIONS, TransactionsHistoryResponse, params=params)
        return res.data

    async def check_order(self, order: Order) -> CheckOrderResult:
        res = await self._call(CHECK_ORDER, CheckOrderResponse, json_body=order.to_wire())
        return res.data

    async def confirm_order(self, confirmation_id: str, order: Order) -> OrderConfirmation:
        self._session.require_active()
        if not confirmation_id.strip():
            raise InvalidArgument("confirmation_id is required")
        res = await self._call(
            CONFIRM_ORDER,
            OrderConfirmationResponse,
            path_args={"confirmation_id": confirmation_id.strip()},
            json_body=order.to_wire(),
        )
        return res.data

    async def get_account_info(self) -> AccountInfo:
        res = await self._call(ACCOUNT_INFO, AccountInfoResponse)
        return res.data

    async def get_account_overview(
        self,
        from_date: IsoDate | date | str,
        to_date: IsoDate | date | str,
    ) -> AccountOverview:
        self._session.require_active()
        params = date_range_params(IsoDate.coerce(from_date), IsoDate.coerce(to_date))
        res = await self._call(ACCOUNT_OVERVIEW, AccountOverviewResponse, params=params)
        return res.data

    async def _call(
        self,
        endpoint: Endpoint,
        model: type[M],
        *,
        path_args: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> M:
        built = self._builder.build(endpoint, path_args=path_args, params=params, json_body=json_body)
        logger.debug("calling %s", endpoint.name)
        response = await self._executor.execute(built)
        return self._decoder.decode_response(model, response, operation=endpoint.name)
