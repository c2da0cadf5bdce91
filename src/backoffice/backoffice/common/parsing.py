"""Typed parsing of loosely-shaped request values.

Every entry point goes through these parsers so create and update paths see
the same rules; callers decide whether an error is fatal (`unwrap`) or falls
back to a default (`or_default`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from ..core.constants import HOURS_DECIMALS, MAX_WORKING_HOURS, MIN_WORKING_HOURS
from ..core.exceptions import ValidationError

T = TypeVar("T")

_HHMM = re.compile(r"^\s*(\d{1,2}):([0-5]\d)\s*$")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self, field_name: str) -> T:
        if self.error is not None:
            raise ValidationError(self.error, field=field_name)
        return self.value  # type: ignore[return-value]

    def or_default(self, default: T) -> T:
        return default if self.error is not None else self.value  # type: ignore[return-value]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_hours(value: Any) -> ParseResult[float]:
    """Working hours as a decimal number, numeric string or "HH:MM"."""
    if value is None or value == "":
        return ParseResult(value=0.0)

    if _is_number(value):
        hours = float(value)
    elif isinstance(value, str):
        m = _HHMM.match(value)
        if m:
            hours = int(m.group(1)) + int(m.group(2)) / 60
        else:
            try:
                hours = float(value.strip())
            except ValueError:
                return ParseResult(error="invalid working hours format")
    else:
        return ParseResult(error="invalid working hours format")

    if hours != hours:  # NaN
        return ParseResult(error="invalid working hours format")
    if hours < MIN_WORKING_HOURS or hours > MAX_WORKING_HOURS:
        return ParseResult(error=f"Working hours must be between {MIN_WORKING_HOURS} and {MAX_WORKING_HOURS}")
    return ParseResult(value=round(hours, HOURS_DECIMALS))


def parse_amount(value: Any) -> ParseResult[float]:
    """Non-negative monetary amount as a number or numeric string."""
    if _is_number(value):
        amount = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            amount = float(value.strip())
        except ValueError:
            return ParseResult(error="amount must be a number")
    else:
        return ParseResult(error="amount must be a number")

    if amount != amount or amount in (float("inf"), float("-inf")):
        return ParseResult(error="amount must be a number")
    if amount < 0:
        return ParseResult(error="amount cannot be negative")
    return ParseResult(value=amount)


def parse_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a boolean", field=field_name)
    return value
