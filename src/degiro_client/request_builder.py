"""Endpoint table and construction of session-authenticated requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import quote

from degiro_client.session import SessionStage, SessionState

ACCEPT = "application/json, text/plain, */*"
JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


class SessionPlacement(str, Enum):
    """Where session identifiers go for a given endpoint."""

    NONE = "none"
    SESSION_QUERY = "session_query"  # ?sessionId=
    ACCOUNT_QUERY = "account_query"  # ?intAccount=&sessionId=
    PATH = "path"  # ;jsessionid= in the path only
    PATH_AND_QUERY = "path_and_query"


class RefererGroup(str, Enum):
    LOGIN = "login"
    TRADER = "trader"


@dataclass(frozen=True)
class Endpoint:
    name: str
    method: str
    path: str
    placement: SessionPlacement
    requires: SessionStage = SessionStage.ACTIVE
    referer: RefererGroup = RefererGroup.TRADER


LOGIN = Endpoint(
    "login",
    "POST",
    "/login/secure/login/totp",
    SessionPlacement.NONE,
    requires=SessionStage.UNAUTHENTICATED,
    referer=RefererGroup.LOGIN,
)
CLIENT = Endpoint(
    "client",
    "GET",
    "/pa/secure/client",
    SessionPlacement.SESSION_QUERY,
    requires=SessionStage.AWAITING_ACCOUNT_BINDING,
)
FAVORITES = Endpoint("favorites", "GET", "/favorites/secure/v1", SessionPlacement.ACCOUNT_QUERY)
PRODUCT_INFO = Endpoint("product_info", "POST", "/product_search/secure/v5/products/info", SessionPlacement.ACCOUNT_QUERY)
PRODUCT_SEARCH = Endpoint("product_search", "GET", "/product_search/secure/v5/products/lookup", SessionPlacement.ACCOUNT_QUERY)
PORTFOLIO = Endpoint(
    "portfolio",
    "GET",
    "/trading/secure/v5/update/{int_account};jsessionid={session_id}",
    SessionPlacement.PATH_AND_QUERY,
)
ORDER_HISTORY = Endpoint("order_history", "GET", "/portfolio-reports/secure/v4/order-history", SessionPlacement.ACCOUNT_QUERY)
TRANSACTIONS = Endpoint("transactions", "GET", "/portfolio-reports/secure/v4/transactions", SessionPlacement.ACCOUNT_QUERY)
CHECK_ORDER = Endpoint(
    "check_order",
    "POST",
    "/trading/secure/v5/checkOrder;jsessionid={session_id}",
    SessionPlacement.PATH_AND_QUERY,
)
CONFIRM_ORDER = Endpoint(
    "confirm_order",
    "POST",
    "/trading/secure/v5/order/{confirmation_id};jsessionid={session_id}",
    SessionPlacement.PATH_AND_QUERY,
)
ACCOUNT_INFO = Endpoint(
    "account_info",
    "GET",
    "/trading/secure/v5/account/info/{int_account};jsessionid={session_id}",
    SessionPlacement.PATH,
)
ACCOUNT_OVERVIEW = Endpoint(
    "account_overview",
    "GET",
    "/portfolio-reports/secure/v6/accountoverview",
    SessionPlacement.ACCOUNT_QUERY,
)


@dataclass(frozen=True)
class BuiltRequest:
    operation: str
    method: str
    url: str
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    json: Any | None = None


class RequestBuilder:
    """Builds fully addressed requests without touching the network.

    Session requirements are checked here, so an endpoint call made before
    login completes fails with ``NotAuthenticated`` and nothing is sent.
    """

    def __init__(self, base_url: str, session: SessionState) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session

    def build(
        self,
        endpoint: Endpoint,
        *,
        path_args: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        json_body: Any | None = None,
    ) -> BuiltRequest:
        session_id, int_account = self._credentials_for(endpoint)

        # caller values must stay inside their own path segment
        template_args: dict[str, str] = {key: quote(str(value), safe="") for key, value in (path_args or {}).items()}
        if session_id is not None:
            template_args["session_id"] = session_id
        if int_account is not None:
            template_args["int_account"] = str(int_account)
        try:
            path = endpoint.path.format(**template_args)
        except KeyError as exc:
            raise ValueError(f"{endpoint.name}: missing path argument {exc.args[0]!r}") from exc

        query: dict[str, str] = {key: _query_value(value) for key, value in (params or {}).items() if value is not None}
        if endpoint.placement is SessionPlacement.SESSION_QUERY:
            query["sessionId"] = str(session_id)
        elif endpoint.placement in {SessionPlacement.ACCOUNT_QUERY, SessionPlacement.PATH_AND_QUERY}:
            query["intAccount"] = str(int_account)
            query["sessionId"] = str(session_id)

        return BuiltRequest(
            operation=endpoint.name,
            method=endpoint.method,
            url=f"{self._base_url}{path}",
            params=query,
            headers=self._headers(endpoint, has_body=json_body is not None),
            json=json_body,
        )

    def _credentials_for(self, endpoint: Endpoint) -> tuple[str | None, int | None]:
        if endpoint.requires is SessionStage.UNAUTHENTICATED:
            return None, None
        if endpoint.requires is SessionStage.AWAITING_ACCOUNT_BINDING:
            return self._session.require_session(), None
        return self._session.require_active()

    def _headers(self, endpoint: Endpoint, *, has_body: bool) -> dict[str, str]:
        headers = {"Accept": ACCEPT}
        if endpoint.referer is RefererGroup.LOGIN:
            headers["Origin"] = self._base_url
            headers["Referer"] = f"{self._base_url}/login/nl"
        else:
            headers["Referer"] = f"{self._base_url}/trader/"
        if endpoint.method == "POST" and has_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
