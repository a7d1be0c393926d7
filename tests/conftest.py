from __future__ import annotations

import json
import os
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from degiro_client import Credentials, DegiroClient

BASE_URL = "https://degiro.test"
TOTP_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
SESSION_ID = "abc123"
INT_ACCOUNT = 12345678

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBroker:
    """Canned DEGIRO endpoints behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def json(self, method: str, path: str, payload: Any, *, status: int = 200, headers: dict[str, str] | None = None) -> None:
        self.on(method, path, lambda _request: httpx.Response(status, json=payload, headers=headers))

    def text(self, method: str, path: str, body: str, *, status: int = 200) -> None:
        self.on(method, path, lambda _request: httpx.Response(status, text=body))

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, text=f"no route for {request.method} {request.url.path}")
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def sent(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def body(self, request: httpx.Request) -> Any:
        return json.loads(request.content)

    def with_login(self, *, session_id: str = SESSION_ID, int_account: int = INT_ACCOUNT) -> None:
        self.json(
            "POST",
            "/login/secure/login/totp",
            {
                "captchaRequired": False,
                "isPassCodeEnabled": True,
                "locale": "en_US",
                "redirectUrl": "https://trader.degiro.nl/trader/",
                "sessionId": session_id,
                "status": 0,
                "statusText": "success",
                "userTokens": [],
            },
        )
        self.json(
            "GET",
            "/pa/secure/client",
            {"data": {"intAccount": int_account, "username": "testuser", "email": "testuser@example.com"}},
        )


@pytest.fixture(autouse=True)
def clear_degiro_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ.keys()):
        if key.startswith("DEGIRO_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(username="TEST", password="TEST", totp_secret=TOTP_SECRET)


@pytest.fixture
def broker() -> FakeBroker:
    return FakeBroker()


@pytest.fixture
def client(credentials: Credentials, broker: FakeBroker) -> DegiroClient:
    return DegiroClient(credentials, base_url=BASE_URL, transport=broker.transport)
