"""Display formatting for the ticker board.

Every cell has a fixed id. A value that is null, missing or empty renders as
the placeholder; change cells get a ``+`` prefix and a ``positive``/``negative``
class for values strictly above/below zero, and no class at exactly zero.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Mapping

from mbsdesk.normalize.fields import as_text, parse_number

PLACEHOLDER = "--"
POSITIVE = "positive"
NEGATIVE = "negative"

PRICE_FIELDS = ("current", "change", "open", "high", "low", "prevClose")
RATE_FIELDS = ("latest", "yesterday", "last_month", "year_ago", "daily_change")
STOCK_FIELDS = ("current", "change", "percentChange")
CHANGE_FIELDS = frozenset({"change", "daily_change", "monthly_change", "percentChange"})


@dataclass(frozen=True)
class Cell:
    text: str = PLACEHOLDER
    css_class: str | None = None


def format_value(value: Any) -> str:
    if value is None or value == "":
        return PLACEHOLDER
    return as_text(value) or PLACEHOLDER


def render_change(value: Any) -> Cell:
    text = format_value(value)
    if text == PLACEHOLDER:
        return Cell()
    number = parse_number(value)
    if number is None:
        return Cell(text)
    if number > 0:
        return Cell(text if text.startswith("+") else f"+{text}", POSITIVE)
    if number < 0:
        return Cell(text, NEGATIVE)
    return Cell(text)


def render_cell(field: str, value: Any) -> Cell:
    if field in CHANGE_FIELDS:
        return render_change(value)
    return Cell(format_value(value))


def format_timestamp(raw: Any) -> str:
    """``2025-06-02T14:05:00`` -> ``2:05 PM 6/2/2025``; unparsable input is shown as-is."""
    if raw is None or raw == "":
        return PLACEHOLDER
    if isinstance(raw, datetime.datetime):
        moment = raw
    else:
        try:
            moment = datetime.datetime.fromisoformat(str(raw).replace(" ", "T", 1))
        except ValueError:
            return str(raw)
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem} {moment.month}/{moment.day}/{moment.year}"


def _entry_cells(key: str, entry: Any, fields: tuple[str, ...]) -> dict[str, Cell]:
    values = entry if isinstance(entry, Mapping) else {}
    return {f"{key}_{field}": render_cell(field, values.get(field)) for field in fields}


def render_top(payload: Mapping[str, Any]) -> dict[str, Cell]:
    cells: dict[str, Cell] = {}
    for key in ("UMBS_5_5", "GNMA_5_5", "UMBS_5_5_Shadow"):
        cells.update(_entry_cells(key, payload.get(key), PRICE_FIELDS))
    for key in ("US10Y", "US30Y"):
        cells.update(_entry_cells(key, payload.get(key), ("yield", "change")))

    umbs = payload.get("UMBS_5_5")
    last_updated = umbs.get("last_updated") if isinstance(umbs, Mapping) else None
    cells["last_updated"] = Cell(format_timestamp(last_updated))
    return cells


def render_rates(payload: Mapping[str, Any]) -> dict[str, Cell]:
    cells: dict[str, Cell] = {}
    for key, entry in payload.items():
        cells.update(_entry_cells(key, entry, RATE_FIELDS))
    return cells


def render_stocks(payload: Mapping[str, Any]) -> dict[str, Cell]:
    cells: dict[str, Cell] = {}
    for symbol, quote in payload.items():
        cells.update(_entry_cells(symbol, quote, STOCK_FIELDS))
    return cells


class Board:
    """The rendered state of every cell; cells never written read as the placeholder."""

    def __init__(self) -> None:
        self._cells: dict[str, Cell] = {}

    def update(self, cells: Mapping[str, Cell]) -> None:
        self._cells.update(cells)

    def get(self, cell_id: str) -> Cell:
        return self._cells.get(cell_id, Cell())

    def snapshot(self) -> dict[str, Cell]:
        return dict(self._cells)
