# =============================================================================
# core/cells.py - Typed Cell Values
# =============================================================================
# One variant per field type. Edited text is coerced into a variant at the
# boundary; records.data stays plain JSON because other clients share it.
#
#   default_json / build_initial_data   -> values for a new record
#   coerce_edit                          -> edited text -> cell (or 422)
#   read_cell                            -> stored JSON -> cell (lenient)
#   merge_cell                           -> new whole data map
#   visible_data / orphaned_keys         -> split active vs. legacy keys
#
# Usage:
#   from core.cells import coerce_edit, merge_cell
#   cell = coerce_edit(field, "12.5kg")     # Number(12.5)
#   data = merge_cell(record["data"], field["id"], cell)
# =============================================================================

from __future__ import annotations

import math
import re
import string
from dataclasses import dataclass, field as dc_field
from datetime import date, datetime
from typing import Any, Mapping, Union
from urllib.parse import urlparse

from app.exceptions import InvalidCellValueError
from core.models.grid import FieldType


# JavaScript parseFloat: longest numeric prefix after leading whitespace
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s.]+$")
_PHONE = re.compile(r"^\+?[0-9\s\-.()]+$")
MIN_PHONE_DIGITS = 3


# =============================================================================
# Cell Variants
# =============================================================================

@dataclass(frozen=True)
class Text:
    value: str = ""

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Number:
    value: float = 0.0

    def to_json(self) -> Any:
        # 3.0 is stored as 3
        if self.value.is_integer():
            return int(self.value)
        return self.value


@dataclass(frozen=True)
class Checkbox:
    value: bool = False

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Select:
    value: str = ""

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class MultiSelect:
    values: frozenset[str] = dc_field(default_factory=frozenset)

    def to_json(self) -> Any:
        # Empty multiselect is stored like every other empty cell
        return sorted(self.values) if self.values else ""


@dataclass(frozen=True)
class Date:
    value: date | None = None

    def to_json(self) -> Any:
        return self.value.isoformat() if self.value else ""


@dataclass(frozen=True)
class Url:
    value: str = ""

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Email:
    value: str = ""

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Phone:
    value: str = ""

    def to_json(self) -> Any:
        return self.value


Cell = Union[Text, Number, Checkbox, Select, MultiSelect, Date, Url, Email, Phone]

CELL_TYPES: dict[FieldType, type] = {
    FieldType.TEXT: Text,
    FieldType.NUMBER: Number,
    FieldType.CHECKBOX: Checkbox,
    FieldType.SELECT: Select,
    FieldType.MULTISELECT: MultiSelect,
    FieldType.DATE: Date,
    FieldType.URL: Url,
    FieldType.EMAIL: Email,
    FieldType.PHONE: Phone,
}


# =============================================================================
# Defaults
# =============================================================================

def default_cell(field_type: FieldType | str) -> Cell:
    """Empty cell of the given type: checkbox -> false, number -> 0, else ""."""
    return CELL_TYPES[FieldType(field_type)]()


def default_json(field_type: FieldType | str) -> Any:
    return default_cell(field_type).to_json()


def build_initial_data(fields: list[Mapping[str, Any]]) -> dict[str, Any]:
    """
    Build the data map of a new record: one entry per field, defaulted by type.

    Example:
        [F1:text, F2:number, F3:checkbox] -> {F1: "", F2: 0, F3: False}
    """
    return {str(f["id"]): default_json(f["type"]) for f in fields}


# =============================================================================
# Coercion of Edited Text
# =============================================================================

def parse_float_or_zero(text: str) -> float:
    """
    Parse the longest numeric prefix, like JavaScript's parseFloat.

    "12.5kg" -> 12.5, "abc" -> 0, "  -3e2x" -> -300.0.
    NaN and infinities become 0.
    """
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return 0.0
    value = float(match.group(1))
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def _parse_date(text: str) -> date | None:
    """ISO-8601 date or datetime -> date; None when it isn't one."""
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _split_choices(text: str) -> list[str]:
    choices: list[str] = []
    for part in text.split(","):
        part = part.strip()
        if part and part not in choices:
            choices.append(part)
    return choices


def coerce_edit(field: Mapping[str, Any], text: str) -> Cell:
    """
    Coerce edited text into the field's type.

    number and checkbox never fail: number takes the numeric prefix (or 0)
    and checkbox is true only for exactly "true". Every other type accepts
    empty text and otherwise validates the format.

    Args:
        field: Field row (needs "type", and "options" for select types)
        text: Text typed into the cell

    Raises:
        InvalidCellValueError: If the text doesn't fit the field type
    """
    field_type = FieldType(field["type"])
    options = field.get("options") or []

    if field_type == FieldType.NUMBER:
        return Number(parse_float_or_zero(text))

    if field_type == FieldType.CHECKBOX:
        return Checkbox(text == "true")

    if field_type == FieldType.TEXT:
        return Text(text)

    stripped = text.strip()
    if not stripped:
        return default_cell(field_type)

    if field_type == FieldType.SELECT:
        if options and stripped not in options:
            raise InvalidCellValueError(
                field_type.value, text, f"must be one of: {', '.join(options)}"
            )
        return Select(stripped)

    if field_type == FieldType.MULTISELECT:
        choices = _split_choices(stripped)
        unknown = [c for c in choices if options and c not in options]
        if unknown:
            raise InvalidCellValueError(
                field_type.value, text, f"unknown choices: {', '.join(unknown)}"
            )
        return MultiSelect(frozenset(choices))

    if field_type == FieldType.DATE:
        parsed = _parse_date(stripped)
        if parsed is None:
            raise InvalidCellValueError(field_type.value, text, "expected an ISO date like 2024-01-31")
        return Date(parsed)

    if field_type == FieldType.URL:
        parsed_url = urlparse(stripped)
        if parsed_url.scheme not in ("http", "https") or not parsed_url.netloc:
            raise InvalidCellValueError(field_type.value, text, "expected an http(s) URL")
        return Url(stripped)

    if field_type == FieldType.EMAIL:
        if not _EMAIL.match(stripped):
            raise InvalidCellValueError(field_type.value, text, "expected name@domain.tld")
        return Email(stripped)

    # phone
    digits = sum(ch in string.digits for ch in stripped)
    if not _PHONE.match(stripped) or digits < MIN_PHONE_DIGITS:
        raise InvalidCellValueError(
            field_type.value, text, f"expected at least {MIN_PHONE_DIGITS} digits"
        )
    return Phone(stripped)


# =============================================================================
# Reading Stored Values
# =============================================================================

def read_cell(field_type: FieldType | str, raw: Any) -> Cell:
    """
    Read a stored JSON value into its cell variant.

    Lenient: missing, None, "" and legacy values that don't parse read as
    the type's empty cell. Never raises for a known field type.
    """
    field_type = FieldType(field_type)
    if raw is None or raw == "":
        return default_cell(field_type)

    if field_type == FieldType.NUMBER:
        if isinstance(raw, bool):
            return Number(float(raw))
        if isinstance(raw, (int, float)):
            value = float(raw)
            return Number(0.0 if math.isnan(value) or math.isinf(value) else value)
        return Number(parse_float_or_zero(str(raw)))

    if field_type == FieldType.CHECKBOX:
        return Checkbox(raw is True or raw == "true")

    if field_type == FieldType.MULTISELECT:
        if isinstance(raw, (list, tuple, set)):
            return MultiSelect(frozenset(str(v) for v in raw if str(v).strip()))
        return MultiSelect(frozenset(_split_choices(str(raw))))

    if field_type == FieldType.DATE:
        return Date(_parse_date(str(raw)))

    return CELL_TYPES[field_type](str(raw))


# =============================================================================
# Whole-Map Helpers
# =============================================================================

def merge_cell(data: Mapping[str, Any] | None, field_id: str, cell: Cell) -> dict[str, Any]:
    """
    Return a new data map with one key replaced.

    The store receives the whole map, never a partial patch.
    """
    merged = dict(data or {})
    merged[str(field_id)] = cell.to_json()
    return merged


def visible_data(data: Mapping[str, Any] | None, fields: list[Mapping[str, Any]]) -> dict[str, Any]:
    """Values of the table's current fields only."""
    active = {str(f["id"]) for f in fields}
    return {k: v for k, v in (data or {}).items() if k in active}


def orphaned_keys(data: Mapping[str, Any] | None, fields: list[Mapping[str, Any]]) -> list[str]:
    """Keys left behind by deleted fields, sorted."""
    active = {str(f["id"]) for f in fields}
    return sorted(k for k in (data or {}) if k not in active)
