"""httpx execution of built requests with typed transport errors."""

from __future__ import annotations

import logging

import httpx

from degiro_client.config import ClientConfig
from degiro_client.exceptions import HttpStatusError, NetworkError, truncate_body
from degiro_client.request_builder import BuiltRequest

logger = logging.getLogger(__name__)


def build_http_client(cfg: ClientConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Cookie-persisting async client; httpx keeps cookies on the client by default."""
    event_hooks: dict[str, list] = {}
    if cfg.logging.log_http:
        event_hooks = {"request": [_log_request], "response": [_log_response]}
    return httpx.AsyncClient(
        headers={"User-Agent": cfg.user_agent},
        timeout=httpx.Timeout(cfg.runtime.request_timeout_seconds, connect=cfg.runtime.connect_timeout_seconds),
        transport=transport,
        event_hooks=event_hooks,
    )


class HttpExecutor:
    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def send(self, built: BuiltRequest) -> httpx.Response:
        request = self._client.build_request(
            built.method,
            built.url,
            params=built.params or None,
            headers=built.headers,
            json=built.json,
        )
        try:
            return await self._client.send(request)
        except httpx.TimeoutException as exc:
            logger.warning("%s timed out", built.operation)
            raise NetworkError(
                f"{built.operation} timed out",
                timed_out=True,
                details={"operation": built.operation, "error": str(exc)},
            ) from exc
        except httpx.RequestError as exc:
            logger.warning("%s network error: %s", built.operation, type(exc).__name__)
            raise NetworkError(
                f"{built.operation} failed: {exc}",
                details={"operation": built.operation, "error_type": type(exc).__name__},
            ) from exc

    async def execute(self, built: BuiltRequest) -> httpx.Response:
        response = await self.send(built)
        raise_for_status(response, operation=built.operation)
        return response


def response_body(response: httpx.Response) -> str:
    return truncate_body(response.text.strip())


def raise_for_status(response: httpx.Response, *, operation: str) -> None:
    if response.is_success:
        return
    logger.warning("%s returned HTTP %s", operation, response.status_code)
    raise HttpStatusError(operation, status=response.status_code, body=response_body(response))


async def _log_request(request: httpx.Request) -> None:
    logger.debug("http request %s %s", request.method, _redacted_path(request.url))


async def _log_response(response: httpx.Response) -> None:
    logger.debug(
        "http response %s %s -> %s",
        response.request.method,
        _redacted_path(response.request.url),
        response.status_code,
    )


def _redacted_path(url: httpx.URL) -> str:
    # session ids ride in the query string and in ;jsessionid= path segments
    return url.path.split(";", 1)[0]
