from __future__ import annotations

import asyncio
from datetime import date

import httpx
import pytest
from conftest import INT_ACCOUNT, SESSION_ID, FakeBroker

from degiro_client import DegiroClient, SessionStage
from degiro_client.exceptions import ErrorCode, HttpStatusError, InvalidArgument, NetworkError, NotAuthenticated, SchemaError
from degiro_client.models.orders import Order, OrderAction, OrderTimeType, OrderType

PORTFOLIO_PATH = f"/trading/secure/v5/update/{INT_ACCOUNT};jsessionid={SESSION_ID}"
CHECK_ORDER_PATH = f"/trading/secure/v5/checkOrder;jsessionid={SESSION_ID}"
ACCOUNT_INFO_PATH = f"/trading/secure/v5/account/info/{INT_ACCOUNT};jsessionid={SESSION_ID}"

PRODUCT = {
    "id": "331868",
    "name": "Apple Inc",
    "isin": "US0378331005",
    "symbol": "AAPL",
    "contractSize": 1.0,
    "productType": "STOCK",
    "productTypeId": 1,
    "tradable": True,
    "category": "A",
    "currency": "USD",
    "closePrice": 189.84,
    "closePriceDate": "2025-01-02",
    "feedQuality": "D15",
    "orderBookDepth": 0,
}


async def _logged_in(client: DegiroClient, broker: FakeBroker) -> DegiroClient:
    broker.with_login()
    await client.login()
    assert client.stage is SessionStage.ACTIVE
    return client


def _session_params(request: httpx.Request) -> tuple[str | None, str | None]:
    return request.url.params.get("intAccount"), request.url.params.get("sessionId")


@pytest.mark.asyncio
async def test_favorites_returns_first_list(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("GET", "/favorites/secure/v1", {"data": [{"productIds": [1, 2, 3]}, {"productIds": [9]}]})

    assert await client.get_favorites() == [1, 2, 3]

    [request] = broker.sent("/favorites/secure/v1")
    assert _session_params(request) == (str(INT_ACCOUNT), SESSION_ID)


@pytest.mark.asyncio
async def test_endpoint_before_login_sends_nothing(client: DegiroClient, broker: FakeBroker) -> None:
    with pytest.raises(NotAuthenticated) as exc:
        await client.get_favorites()
    assert exc.value.code == ErrorCode.MISSING_SESSION_ID

    with pytest.raises(NotAuthenticated):
        await client.get_order_history("not a date", "nor this")

    assert broker.requests == []


@pytest.mark.asyncio
async def test_products_details_posts_string_ids(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("POST", "/product_search/secure/v5/products/info", {"data": {"331868": PRODUCT}})

    products = await client.get_products_details([331868])

    assert [product.symbol for product in products] == ["AAPL"]
    assert products[0].feed_quality == "D15"
    assert products[0].vwd_id is None

    [request] = broker.sent("/product_search/secure/v5/products/info")
    assert broker.body(request) == ["331868"]
    assert _session_params(request) == (str(INT_ACCOUNT), SESSION_ID)


@pytest.mark.asyncio
async def test_products_details_with_no_ids_skips_request(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)

    assert await client.get_products_details([]) == []
    assert broker.sent("/product_search/secure/v5/products/info") == []


@pytest.mark.asyncio
async def test_search_product_by_name(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("GET", "/product_search/secure/v5/products/lookup", {"offset": 0, "products": [PRODUCT]})

    products = await client.search_product_by_name(" apple ", limit=5)

    assert products[0].isin == "US0378331005"
    [request] = broker.sent("/product_search/secure/v5/products/lookup")
    assert request.url.params["searchText"] == "apple"
    assert request.url.params["offset"] == "0"
    assert request.url.params["limit"] == "5"


@pytest.mark.asyncio
async def test_search_without_matches_is_empty(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("GET", "/product_search/secure/v5/products/lookup", {"offset": 0})

    assert await client.search_product_by_name("zzzz") == []
    with pytest.raises(InvalidArgument):
        await client.search_product_by_name("  ")


@pytest.mark.asyncio
async def test_portfolio_uses_path_and_query_session(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "GET",
        PORTFOLIO_PATH,
        {
            "portfolio": {
                "lastUpdated": 3,
                "name": "portfolio",
                "value": [
                    {
                        "name": "positionrow",
                        "id": "331868",
                        "value": [
                            {"name": "size", "value": 10, "isAdded": True},
                            {"name": "positionType", "value": "PRODUCT", "isAdded": True},
                        ],
                        "isAdded": True,
                    }
                ],
                "isAdded": True,
            }
        },
    )

    portfolio = await client.get_portfolio()

    assert portfolio.product_ids() == ["331868"]
    assert portfolio.value[0].field("positionType").as_str() == "PRODUCT"
    [request] = broker.sent(PORTFOLIO_PATH)
    assert request.url.params["portfolio"] == "0"
    assert _session_params(request) == (str(INT_ACCOUNT), SESSION_ID)


@pytest.mark.asyncio
async def test_order_history_uses_day_first_dates(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "GET",
        "/portfolio-reports/secure/v4/order-history",
        {"data": [{"productId": 331868, "orderTypeId": 7, "buysell": "B", "type": "CREATE", "size": 1}]},
    )

    history = await client.get_order_history(date(2025, 1, 2), "31/01/2025")

    assert history[0].order_type_id is not None
    assert history[0].order_type_id.is_unknown
    assert int(history[0].order_type_id) == 7
    [request] = broker.sent("/portfolio-reports/secure/v4/order-history")
    assert request.url.params["fromDate"] == "02/01/2025"
    assert request.url.params["toDate"] == "31/01/2025"


@pytest.mark.asyncio
async def test_order_history_rejects_iso_dates(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    sent_before = len(broker.requests)

    with pytest.raises(InvalidArgument):
        await client.get_order_history("2025-01-02", "2025-01-31")

    assert len(broker.requests) == sent_before


@pytest.mark.asyncio
async def test_transaction_history_uses_iso_dates(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "GET",
        "/portfolio-reports/secure/v4/transactions",
        {"data": [{"id": 1, "productId": 331868, "buysell": "S", "price": 190.0, "quantity": -1, "orderTypeId": 0}]},
    )

    items = await client.get_transaction_history("2025-01-01", date(2025, 1, 31), group_by_order=True)

    assert items[0].order_type_id is OrderType.LIMIT
    [request] = broker.sent("/portfolio-reports/secure/v4/transactions")
    assert request.url.params["fromDate"] == "2025-01-01"
    assert request.url.params["toDate"] == "2025-01-31"
    assert request.url.params["groupTransactionsByOrder"] == "true"


@pytest.mark.asyncio
async def test_check_and_confirm_order(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "POST",
        CHECK_ORDER_PATH,
        {"data": {"confirmationId": "conf-1", "freeSpaceNew": 1000.5, "transactionFees": [{"id": 2, "amount": 0.5, "currency": "EUR"}]}},
    )
    confirm_path = f"/trading/secure/v5/order/conf-1;jsessionid={SESSION_ID}"
    broker.json("POST", confirm_path, {"data": {"orderId": "order-9"}})
    order = Order(
        buy_sell=OrderAction.BUY,
        order_type=OrderType.LIMIT,
        product_id="331868",
        size=1,
        price=180.0,
        time_type=OrderTimeType.GOOD_TILL_CANCELED,
    )

    check = await client.check_order(order)
    confirmation = await client.confirm_order(check.confirmation_id, order)

    assert check.transaction_fees[0].amount == 0.5
    assert confirmation.order_id == "order-9"

    [check_request] = broker.sent(CHECK_ORDER_PATH)
    assert broker.body(check_request) == {
        "buySell": "BUY",
        "orderType": 0,
        "productId": "331868",
        "size": 1.0,
        "price": 180.0,
        "timeType": 3,
    }
    assert check_request.headers["Content-Type"] == "application/json; charset=UTF-8"
    assert _session_params(check_request) == (str(INT_ACCOUNT), SESSION_ID)
    assert len(broker.sent(confirm_path)) == 1


@pytest.mark.asyncio
async def test_confirm_order_keeps_odd_confirmation_id_in_its_segment(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    # FakeBroker routes on the decoded path
    broker.json("POST", f"/trading/secure/v5/order/conf?intAccount=999;jsessionid={SESSION_ID}", {"data": {"orderId": "order-1"}})
    order = Order(buy_sell=OrderAction.SELL, order_type=OrderType.MARKET, product_id="331868", size=2)

    confirmation = await client.confirm_order("conf?intAccount=999", order)

    assert confirmation.order_id == "order-1"
    request = broker.requests[-1]
    assert request.url.raw_path.startswith(f"/trading/secure/v5/order/conf%3FintAccount%3D999;jsessionid={SESSION_ID}?".encode())
    assert _session_params(request) == (str(INT_ACCOUNT), SESSION_ID)


@pytest.mark.asyncio
async def test_timed_out_call_leaves_session_unchanged(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)

    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    broker.on("GET", "/favorites/secure/v1", timeout)

    with pytest.raises(NetworkError) as exc:
        await client.get_favorites()

    assert exc.value.timed_out
    assert client.session.stage is SessionStage.ACTIVE
    assert client.session.session_id == SESSION_ID
    assert client.session.int_account == INT_ACCOUNT


@pytest.mark.asyncio
async def test_account_info_uses_path_session_only(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "GET",
        ACCOUNT_INFO_PATH,
        {"data": {"clientId": 1, "baseCurrency": "EUR", "currencyPairs": {"EURUSD": {"id": 705366, "price": "1.0412"}}}},
    )

    info = await client.get_account_info()

    assert info.base_currency == "EUR"
    assert info.currency_pairs["EURUSD"].price == "1.0412"
    [request] = broker.sent(ACCOUNT_INFO_PATH)
    assert request.url.query == b""


@pytest.mark.asyncio
async def test_account_overview(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json(
        "GET",
        "/portfolio-reports/secure/v6/accountoverview",
        {
            "data": {
                "cashMovements": [
                    {
                        "date": "2025-01-02T10:00:00+01:00",
                        "valueDate": "2025-01-02T10:00:00+01:00",
                        "description": "Deposit",
                        "currency": "EUR",
                        "change": 100.0,
                        "balance": {"unsettledCash": 0, "flatexCash": 100.0, "total": 100.0},
                    }
                ]
            }
        },
    )

    overview = await client.get_account_overview("2025-01-01", "2025-01-31")

    assert overview.cash_movements[0].balance is not None
    assert overview.cash_movements[0].balance.total == 100.0
    [request] = broker.sent("/portfolio-reports/secure/v6/accountoverview")
    assert request.url.params["fromDate"] == "2025-01-01"


@pytest.mark.asyncio
async def test_http_error_keeps_session_active(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.text("GET", "/favorites/secure/v1", "boom", status=500)

    with pytest.raises(HttpStatusError) as exc:
        await client.get_favorites()

    assert exc.value.status == 500
    assert not exc.value.auth_expired
    assert client.stage is SessionStage.ACTIVE


@pytest.mark.asyncio
async def test_expired_session_is_flagged_not_reset(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.text("GET", "/favorites/secure/v1", "unauthorized", status=401)

    with pytest.raises(HttpStatusError) as exc:
        await client.get_favorites()

    assert exc.value.auth_expired
    assert exc.value.suggestion is not None
    assert client.session.session_id == SESSION_ID


@pytest.mark.asyncio
async def test_schema_mismatch_is_reported_with_path(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("GET", ACCOUNT_INFO_PATH, {"data": {"clientId": 1}})

    with pytest.raises(SchemaError) as exc:
        await client.get_account_info()

    assert exc.value.field_path == "data.baseCurrency"
    assert client.stage is SessionStage.ACTIVE


@pytest.mark.asyncio
async def test_concurrent_reads_share_one_session(client: DegiroClient, broker: FakeBroker) -> None:
    await _logged_in(client, broker)
    broker.json("GET", "/favorites/secure/v1", {"data": [{"productIds": [1]}]})
    broker.json("POST", "/product_search/secure/v5/products/info", {"data": {"331868": PRODUCT}})

    favorites, products = await asyncio.gather(client.get_favorites(), client.get_products_details(["331868"]))

    assert favorites == [1]
    assert products[0].id == "331868"
    assert client.stage is SessionStage.ACTIVE


@pytest.mark.asyncio
async def test_login_cookies_are_replayed(client: DegiroClient, broker: FakeBroker) -> None:
    broker.with_login()
    login_payload = {"sessionId": SESSION_ID, "status": 0}
    broker.json(
        "POST",
        "/login/secure/login/totp",
        login_payload,
        headers={"Set-Cookie": f"JSESSIONID={SESSION_ID}; Path=/"},
    )
    await client.login()
    broker.json("GET", "/favorites/secure/v1", {"data": []})

    await client.get_favorites()

    [request] = broker.sent("/favorites/secure/v1")
    assert f"JSESSIONID={SESSION_ID}" in request.headers.get("Cookie", "")
