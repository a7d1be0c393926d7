"""Async client for the DEGIRO web-trader API."""

from degiro_client.client import DegiroClient
from degiro_client.config import ClientConfig, Credentials, load_config
from degiro_client.dates import IsoDate, OrderHistoryDate
from degiro_client.exceptions import (
    AuthenticationFailed,
    DegiroError,
    ErrorCode,
    HttpStatusError,
    InvalidArgument,
    InvalidSecret,
    NetworkError,
    NotAuthenticated,
    SchemaError,
    TotpError,
)
from degiro_client.session import SessionStage
from degiro_client.totp import TotpGenerator

__all__ = [
    "AuthenticationFailed",
    "ClientConfig",
    "Credentials",
    "DegiroClient",
    "DegiroError",
    "ErrorCode",
    "HttpStatusError",
    "InvalidArgument",
    "InvalidSecret",
    "IsoDate",
    "NetworkError",
    "NotAuthenticated",
    "OrderHistoryDate",
    "SchemaError",
    "SessionStage",
    "TotpError",
    "TotpGenerator",
    "load_config",
]
