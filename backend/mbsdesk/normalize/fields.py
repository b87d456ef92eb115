"""Field-level coercion and the table-driven reshaping used by every read endpoint.

A document is reshaped by a list of ``FieldRule`` entries. Each rule names the
output key, the source keys to try in order (first non-null wins), a default
for when none of them is present, and a coercion applied to the value found.
Coercions never raise: anything they cannot interpret becomes ``None`` or is
passed through as text, so a single bad field cannot fail a response.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Callable, Iterable, Mapping

Coercion = Callable[[Any], Any]


def parse_number(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, str):
        cleaned = value.strip().rstrip("%").strip()
        if not cleaned:
            return None
        try:
            number = Decimal(cleaned)
        except InvalidOperation:
            return None
        return number if number.is_finite() else None
    return None


def format_decimal(number: Decimal, places: int) -> str:
    """Fix ``number`` to ``places`` decimals, rounding half away from zero."""
    quantized = number.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)
    if quantized == 0:
        quantized = abs(quantized)
    return f"{quantized:f}"


def as_raw(value: Any) -> Any:
    return value


def as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def as_decimal(places: int) -> Coercion:
    def coerce(value: Any) -> str | None:
        number = parse_number(value)
        if number is None:
            return as_text(value)
        return format_decimal(number, places)

    coerce.__name__ = f"as_decimal_{places}"
    return coerce


def as_timestamp(value: Any) -> str | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, str):
        return value.replace(" ", "T", 1)
    return str(value)


def derived_change(
    latest: Any, previous: Any, places: int, zero_as_null: bool = False
) -> str | None:
    """Return ``latest - previous`` fixed to ``places``, or None when either side is not a number."""
    latest_number = parse_number(latest)
    previous_number = parse_number(previous)
    if latest_number is None or previous_number is None:
        return None
    change = latest_number - previous_number
    if zero_as_null and change == 0:
        return None
    return format_decimal(change, places)


@dataclass(frozen=True)
class FieldRule:
    target: str
    sources: tuple[str, ...]
    coerce: Coercion = as_raw
    default: Any = None

    def extract(self, document: Mapping[str, Any]) -> Any:
        for key in self.sources:
            value = document.get(key)
            if value is not None:
                return self.coerce(value)
        return self.default


def rule(target: str, *sources: str, coerce: Coercion = as_raw, default: Any = None) -> FieldRule:
    return FieldRule(target=target, sources=sources or (target,), coerce=coerce, default=default)


def reshape(document: Mapping[str, Any] | None, rules: Iterable[FieldRule]) -> dict[str, Any]:
    """Apply ``rules`` to ``document``; every rule's target is always present in the result."""
    source = document or {}
    return {field_rule.target: field_rule.extract(source) for field_rule in rules}
