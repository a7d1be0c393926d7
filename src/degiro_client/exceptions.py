"""Error hierarchy and code mapping for the DEGIRO client."""

from __future__ import annotations

from enum import Enum
from typing import Any

LOGIN_AGAIN_SUGGESTION = "Call login() again to establish a fresh session."
MAX_BODY_CHARS = 2_000


class ErrorCode(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    INVALID_SECRET = "INVALID_SECRET"
    TOTP_ERROR = "TOTP_ERROR"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    MISSING_SESSION_ID = "MISSING_SESSION_ID"
    MISSING_INT_ACCOUNT = "MISSING_INT_ACCOUNT"
    SCHEMA_ERROR = "SCHEMA_ERROR"
    HTTP_STATUS = "HTTP_STATUS"
    INVALID_ARGS = "INVALID_ARGS"


def truncate_body(text: str) -> str:
    if len(text) > MAX_BODY_CHARS:
        return text[:MAX_BODY_CHARS] + "..."
    return text


class DegiroError(Exception):
    """Base typed exception for every failure surfaced by the client."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        suggestion: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

    def to_error_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }
        if self.suggestion:
            payload["suggestion"] = self.suggestion
        return payload


class NetworkError(DegiroError):
    def __init__(self, message: str, *, timed_out: bool = False, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            ErrorCode.TIMEOUT if timed_out else ErrorCode.NETWORK_ERROR,
            message,
            details=details,
            suggestion="Check network connectivity and DEGIRO availability.",
        )
        self.timed_out = timed_out


class InvalidSecret(DegiroError):
    def __init__(self, message: str = "invalid TOTP secret encoding") -> None:
        super().__init__(
            ErrorCode.INVALID_SECRET,
            message,
            suggestion="Provide the base32 secret shown when enabling 2FA.",
        )


class TotpError(DegiroError):
    def __init__(self, message: str) -> None:
        super().__init__(ErrorCode.TOTP_ERROR, message)


class AuthenticationFailed(DegiroError):
    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        super().__init__(
            ErrorCode.AUTHENTICATION_FAILED,
            message,
            details={"status": status, "body": truncate_body(body)},
            suggestion="Verify username, password and TOTP secret.",
        )
        self.status = status
        self.body = body


class NotAuthenticated(DegiroError):
    """Raised before any network call when the session is not Active."""

    def __init__(self, code: ErrorCode) -> None:
        if code not in {ErrorCode.MISSING_SESSION_ID, ErrorCode.MISSING_INT_ACCOUNT}:
            raise ValueError(f"not an authentication error code: {code}")
        message = "missing required session ID" if code is ErrorCode.MISSING_SESSION_ID else "missing required int account"
        super().__init__(code, message, suggestion="Call login() and wait for it to complete.")

    @property
    def missing_session_id(self) -> bool:
        return self.code is ErrorCode.MISSING_SESSION_ID

    @property
    def missing_int_account(self) -> bool:
        return self.code is ErrorCode.MISSING_INT_ACCOUNT


class SchemaError(DegiroError):
    def __init__(self, message: str, *, field_path: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SCHEMA_ERROR, message, details={"field_path": field_path, **(details or {})})
        self.field_path = field_path


class HttpStatusError(DegiroError):
    def __init__(self, operation: str, *, status: int, body: str) -> None:
        auth_expired = status in {401, 403}
        super().__init__(
            ErrorCode.HTTP_STATUS,
            f"{operation} failed: HTTP {status}",
            details={"operation": operation, "status": status, "body": body, "auth_expired": auth_expired},
            suggestion=LOGIN_AGAIN_SUGGESTION if auth_expired else None,
        )
        self.status = status
        self.body = body

    @property
    def auth_expired(self) -> bool:
        return bool(self.details.get("auth_expired"))


class InvalidArgument(DegiroError):
    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INVALID_ARGS, message, details=details)
