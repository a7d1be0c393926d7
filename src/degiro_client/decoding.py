"""Schema-tolerant decoding of DEGIRO JSON payloads.

DEGIRO adds fields and enum codes without notice, so decoding follows three
rules:

* unknown JSON fields are ignored and absent optional fields become ``None``;
* broker-controlled integer enums (:class:`OpenIntEnum`) map unknown codes to
  an ``UNKNOWN`` pseudo-member that still carries the wire code, so
  decode followed by encode reproduces the received number;
* fields whose JSON type varies between payloads decode through
  :class:`PositionValue`, trying string, then number, then a mapping of
  numbers, in that order.

Anything else that does not fit (a missing required field, a wrong shape)
surfaces as :class:`~degiro_client.exceptions.SchemaError` with the path of
the offending field.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
import logging
from typing import Annotated, Any, TypeVar

import httpx
from pydantic import BaseModel, PlainSerializer, PlainValidator, ValidationError

from degiro_client.exceptions import SchemaError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
E = TypeVar("E", bound="OpenIntEnum")

UNKNOWN_NAME = "UNKNOWN"


class OpenIntEnum(IntEnum):
    """Integer enum that never rejects a code.

    Known codes resolve through the normal value table. Any other integer
    resolves to a pseudo-member named ``UNKNOWN`` whose value is the code
    that was received.
    """

    @classmethod
    def _missing_(cls, value: object) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            member = int.__new__(cls, value)
            member._name_ = UNKNOWN_NAME
            member._value_ = value
            return member
        return None

    @property
    def is_unknown(self) -> bool:
        return self._name_ == UNKNOWN_NAME

    @classmethod
    def decode(cls: type[E], raw: Any) -> E:
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, bool):
            raise ValueError(f"{cls.__name__} code must be an integer, got bool")
        if isinstance(raw, float) and raw.is_integer():
            raw = int(raw)
        if isinstance(raw, str):
            text = raw.strip()
            if text.lstrip("-").isdigit():
                raw = int(text)
            elif text.upper() in cls.__members__:
                return cls.__members__[text.upper()]
            else:
                raise ValueError(f"unrecognized {cls.__name__} value {raw!r}")
        if not isinstance(raw, int):
            raise ValueError(f"{cls.__name__} code must be an integer, got {type(raw).__name__}")
        return cls(raw)


def open_enum(enum_cls: type[E]) -> Any:
    """Annotated pydantic type for an :class:`OpenIntEnum` field."""
    return Annotated[
        enum_cls,
        PlainValidator(enum_cls.decode),
        PlainSerializer(int, return_type=int),
    ]


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    MAPPING = "mapping"


@dataclass(frozen=True)
class PositionValue:
    """A portfolio value that is a string, a number or a mapping of numbers."""

    kind: ValueKind
    raw: str | float | dict[str, float]

    @classmethod
    def decode(cls, raw: Any) -> "PositionValue":
        if isinstance(raw, PositionValue):
            return raw
        if isinstance(raw, str):
            return cls(ValueKind.STRING, raw)
        if isinstance(raw, (int, float)) and not isinstance(raw, bool):
            return cls(ValueKind.NUMBER, float(raw))
        if isinstance(raw, dict):
            mapping: dict[str, float] = {}
            for key, value in raw.items():
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"mapping value for {key!r} must be a number, got {type(value).__name__}")
                mapping[str(key)] = float(value)
            return cls(ValueKind.MAPPING, mapping)
        raise ValueError(f"expected string, number or mapping of numbers, got {type(raw).__name__}")

    def encode(self) -> str | float | dict[str, float]:
        if isinstance(self.raw, dict):
            return dict(self.raw)
        return self.raw

    def as_float(self) -> float | None:
        if isinstance(self.raw, float):
            return self.raw
        if isinstance(self.raw, str):
            try:
                return float(self.raw)
            except ValueError:
                return None
        return None

    def as_str(self) -> str | None:
        return self.raw if isinstance(self.raw, str) else None

    def as_mapping(self) -> dict[str, float] | None:
        return dict(self.raw) if isinstance(self.raw, dict) else None


PositionValueField = Annotated[
    PositionValue,
    PlainValidator(PositionValue.decode),
    PlainSerializer(lambda value: value.encode()),
]


def field_path(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return "$"
    return ".".join(str(part) for part in loc)


class ResponseDecoder:
    """Turns HTTP responses into typed models or a :class:`SchemaError`."""

    def parse_json(self, response: httpx.Response, *, operation: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            logger.warning("%s returned a non-JSON payload (HTTP %s)", operation, response.status_code)
            raise SchemaError(
                f"{operation} failed: expected JSON response",
                field_path="$",
                details={"operation": operation, "status": response.status_code},
            ) from exc

    def decode(self, model: type[M], payload: Any, *, operation: str) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            errors = exc.errors(include_url=False)
            first = errors[0] if errors else {}
            path = field_path(tuple(first.get("loc", ())))
            logger.warning("%s payload does not match %s at %s", operation, model.__name__, path)
            raise SchemaError(
                f"{operation} failed: {first.get('msg', 'invalid payload')} at {path}",
                field_path=path,
                details={
                    "operation": operation,
                    "model": model.__name__,
                    "errors": [
                        {"path": field_path(tuple(err.get("loc", ()))), "type": err.get("type"), "msg": err.get("msg")}
                        for err in errors
                    ],
                },
            ) from exc

    def decode_response(self, model: type[M], response: httpx.Response, *, operation: str) -> M:
        return self.decode(model, self.parse_json(response, operation=operation), operation=operation)
