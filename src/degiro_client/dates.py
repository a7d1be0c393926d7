"""Date query parameters for the report endpoints.

The order-history endpoint wants ``dd/mm/yyyy`` while transactions and the
account overview want ISO ``yyyy-mm-dd``. Each format gets its own type and
neither parser accepts the other's format.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import ClassVar

from degiro_client.exceptions import InvalidArgument


@dataclass(frozen=True)
class _DateParam:
    value: date

    wire_format: ClassVar[str] = "%Y-%m-%d"
    label: ClassVar[str] = "date"

    @classmethod
    def parse(cls, raw: str):
        text = raw.strip()
        try:
            parsed = datetime.strptime(text, cls.wire_format).date()
        except ValueError as exc:
            raise InvalidArgument(
                f"invalid {cls.label}: {raw!r}",
                details={"expected_format": cls.wire_format},
            ) from exc
        # strptime accepts unpadded fields; require the exact wire text back
        if parsed.strftime(cls.wire_format) != text:
            raise InvalidArgument(f"invalid {cls.label}: {raw!r}", details={"expected_format": cls.wire_format})
        return cls(parsed)

    @classmethod
    def coerce(cls, value: "_DateParam | date | str"):
        if isinstance(value, cls):
            return value
        if isinstance(value, _DateParam):
            raise InvalidArgument(f"expected {cls.label}, got {type(value).__name__}")
        if isinstance(value, datetime):
            return cls(value.date())
        if isinstance(value, date):
            return cls(value)
        if isinstance(value, str):
            return cls.parse(value)
        raise InvalidArgument(f"unsupported {cls.label} value: {value!r}")

    def to_param(self) -> str:
        return self.value.strftime(self.wire_format)

    def __str__(self) -> str:
        return self.to_param()


@dataclass(frozen=True)
class OrderHistoryDate(_DateParam):
    wire_format: ClassVar[str] = "%d/%m/%Y"
    label: ClassVar[str] = "order history date (dd/mm/yyyy)"


@dataclass(frozen=True)
class IsoDate(_DateParam):
    wire_format: ClassVar[str] = "%Y-%m-%d"
    label: ClassVar[str] = "ISO date (yyyy-mm-dd)"


def date_range_params(start: _DateParam, end: _DateParam) -> dict[str, str]:
    if start.value > end.value:
        raise InvalidArgument(
            "fromDate must not be after toDate",
            details={"fromDate": start.to_param(), "toDate": end.to_param()},
        )
    return {"fromDate": start.to_param(), "toDate": end.to_param()}
