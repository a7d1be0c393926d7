"""Authenticated session state owned by a single client instance."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from degiro_client.exceptions import ErrorCode, NotAuthenticated


class SessionStage(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AWAITING_ACCOUNT_BINDING = "awaiting_account_binding"
    ACTIVE = "active"


@dataclass(frozen=True)
class SessionSnapshot:
    stage: SessionStage
    session_id: str | None
    int_account: int | None


class SessionState:
    """Session id and account id with the binding invariant enforced.

    The account id can only be set once a session id exists, so the state
    "account bound without a session" cannot be reached through this API.
    """

    def __init__(self) -> None:
        self._session_id: str | None = None
        self._int_account: int | None = None

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def int_account(self) -> int | None:
        return self._int_account

    @property
    def stage(self) -> SessionStage:
        if self._session_id is None:
            return SessionStage.UNAUTHENTICATED
        if self._int_account is None:
            return SessionStage.AWAITING_ACCOUNT_BINDING
        return SessionStage.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.stage is SessionStage.ACTIVE

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(stage=self.stage, session_id=self._session_id, int_account=self._int_account)

    def reset(self) -> None:
        self._session_id = None
        self._int_account = None

    def establish_session(self, session_id: str) -> None:
        if self._session_id is not None:
            raise RuntimeError("session already established; reset() before logging in again")
        if not session_id:
            raise ValueError("session id must be non-empty")
        self._session_id = session_id

    def bind_account(self, int_account: int) -> None:
        if self._session_id is None:
            raise RuntimeError("cannot bind an account before a session is established")
        if self._int_account is not None:
            raise RuntimeError("account already bound to this session")
        self._int_account = int_account

    def require_session(self) -> str:
        if self._session_id is None:
            raise NotAuthenticated(ErrorCode.MISSING_SESSION_ID)
        return self._session_id

    def require_active(self) -> tuple[str, int]:
        session_id = self.require_session()
        if self._int_account is None:
            raise NotAuthenticated(ErrorCode.MISSING_INT_ACCOUNT)
        return session_id, self._int_account
