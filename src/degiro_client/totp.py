"""Time-based one-time passwords for the DEGIRO 2FA login."""

from __future__ import annotations

from datetime import UTC, datetime
import logging
import time

import pyotp

from degiro_client.exceptions import InvalidSecret, TotpError

logger = logging.getLogger(__name__)

DIGITS = 6
INTERVAL_SECONDS = 30
VALID_WINDOW = 1

TimeInput = int | float | datetime | None


class TotpGenerator:
    """SHA-1 TOTP with a 30 second step and 6 digit codes.

    The secret is decoded once here so a bad secret fails at construction
    instead of on every login attempt.
    """

    def __init__(self, secret: str) -> None:
        normalized = "".join(secret.split()).upper()
        if not normalized:
            raise InvalidSecret("TOTP secret is empty")
        self._totp = pyotp.TOTP(normalized, digits=DIGITS, interval=INTERVAL_SECONDS)
        try:
            self._totp.byte_secret()
        except ValueError as exc:
            raise InvalidSecret() from exc

    def generate(self, at: TimeInput = None) -> str:
        moment = _as_utc(at)
        try:
            return self._totp.at(moment)
        except Exception as exc:
            raise TotpError(f"TOTP generation failed: {exc}") from exc

    def verify(self, code: str, at: TimeInput = None) -> bool:
        """Check a code the way the server does, allowing one step either side."""
        moment = _as_utc(at)
        try:
            return self._totp.verify(code, for_time=moment, valid_window=VALID_WINDOW)
        except Exception as exc:
            raise TotpError(f"TOTP verification failed: {exc}") from exc


def _as_utc(at: TimeInput) -> datetime:
    if at is None:
        try:
            value = time.time()
        except OSError as exc:
            raise TotpError(f"system time unavailable: {exc}") from exc
    elif isinstance(at, datetime):
        if at.tzinfo is None:
            raise TotpError("TOTP time must be timezone-aware")
        value = at.timestamp()
    elif isinstance(at, bool) or not isinstance(at, (int, float)):
        raise TotpError(f"unsupported TOTP time value: {at!r}")
    else:
        value = float(at)

    if value != value or value < 0:
        logger.warning("TOTP requested for invalid time %r", value)
        raise TotpError(f"invalid TOTP time: {value!r}")
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (OverflowError, ValueError, OSError) as exc:
        raise TotpError(f"invalid TOTP time: {value!r}") from exc
