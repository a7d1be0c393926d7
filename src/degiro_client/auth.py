"""TOTP login and account binding."""

from __future__ import annotations

import asyncio
import logging

from degiro_client.config import Credentials
from degiro_client.decoding import ResponseDecoder
from degiro_client.exceptions import AuthenticationFailed, SchemaError
from degiro_client.models.auth import ClientResponse, TotpLoginRequest, TotpLoginResponse
from degiro_client.request_builder import CLIENT, LOGIN, RequestBuilder
from degiro_client.session import SessionStage, SessionState
from degiro_client.totp import TotpGenerator
from degiro_client.transport import HttpExecutor

logger = logging.getLogger(__name__)


class AuthFlow:
    """Drives ``Unauthenticated -> AwaitingAccountBinding -> Active``.

    Session fields are written only after each step has fully succeeded, so
    a network failure, timeout or cancellation mid-step leaves the state as
    it was before that step. Concurrent ``login()`` calls are serialized.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        session: SessionState,
        builder: RequestBuilder,
        executor: HttpExecutor,
        decoder: ResponseDecoder,
        totp: TotpGenerator | None = None,
    ) -> None:
        self._credentials = credentials
        self._session = session
        self._builder = builder
        self._executor = executor
        self._decoder = decoder
        self._totp = totp or TotpGenerator(credentials.totp_secret)
        self._lock = asyncio.Lock()

    @property
    def stage(self) -> SessionStage:
        return self._session.stage

    async def login(self) -> None:
        async with self._lock:
            if self._session.stage is not SessionStage.UNAUTHENTICATED:
                logger.info("login: discarding previous session before re-login")
            self._session.reset()

            session_id = await self._authenticate()
            self._session.establish_session(session_id)
            logger.info("login: session established, binding account")

            int_account = await self._bind_account()
            self._session.bind_account(int_account)
            logger.info("login: account bound, session active")

    async def _authenticate(self) -> str:
        code = self._totp.generate()
        payload = TotpLoginRequest(
            username=self._credentials.username,
            password=self._credentials.password,
            one_time_password=code,
        )
        built = self._builder.build(LOGIN, json_body=payload.to_wire())

        logger.info("login: submitting credentials with TOTP code")
        response = await self._executor.send(built)
        # kept verbatim; the error details carry a shortened copy
        body = response.text
        if not response.is_success:
            logger.warning("login: rejected with HTTP %s", response.status_code)
            raise AuthenticationFailed(
                f"login rejected: HTTP {response.status_code}",
                status=response.status_code,
                body=body,
            )

        try:
            decoded = self._decoder.decode_response(TotpLoginResponse, response, operation=LOGIN.name)
        except SchemaError as exc:
            raise AuthenticationFailed(
                "login failed: malformed login response",
                status=response.status_code,
                body=body,
            ) from exc

        if not decoded.succeeded:
            logger.warning("login: broker reported status=%s (%s)", decoded.status, decoded.status_text)
            raise AuthenticationFailed(
                f"login failed: {decoded.status_text or 'no session id returned'}",
                status=response.status_code,
                body=body,
            )
        assert decoded.session_id is not None
        return decoded.session_id

    async def _bind_account(self) -> int:
        built = self._builder.build(CLIENT)
        response = await self._executor.execute(built)
        decoded = self._decoder.decode_response(ClientResponse, response, operation=CLIENT.name)
        return decoded.data.int_account
