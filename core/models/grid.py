# =============================================================================
# core/models/grid.py - Table / Field / Record Schemas
# =============================================================================
# These models define the API contract for the data grid:
# - FieldType: The fixed set of column types
# - TableCreate / TableUpdate: Input for table operations
# - FieldCreate / FieldUpdate: Input for field (column) operations
# - RecordCreate / CellEdit: Input for record (row) operations
# - MoveRequest: Reorder a table or field
#
# A Base owns Tables, a Table owns Fields and Records.
# records.data maps field id -> stored JSON value.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator


class FieldType(str, Enum):
    """
    Column types supported by the grid.

    Only select and multiselect carry options.
    """
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATE = "date"
    CHECKBOX = "checkbox"
    URL = "url"
    EMAIL = "email"
    PHONE = "phone"

    @property
    def takes_options(self) -> bool:
        return self in (FieldType.SELECT, FieldType.MULTISELECT)


# Field created with every new table
DEFAULT_FIELD_NAME = "Name"


def clean_options(options: list[str]) -> list[str]:
    """Trim choices and drop blanks/duplicates, keeping first-seen order."""
    seen: list[str] = []
    for option in options:
        option = option.strip()
        if option and option not in seen:
            seen.append(option)
    return seen


# =============================================================================
# Tables
# =============================================================================

class TableCreate(BaseModel):
    """
    Schema for creating a table inside a base.

    Example:
        {"name": "Leads", "description": "Inbound leads"}
    """
    name: str = Field(..., min_length=1, max_length=255, description="Table name")
    description: str | None = Field(default=None, max_length=2000)


class TableUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=2000)


class TableResponse(BaseModel):
    """A table as stored."""
    id: UUID
    base_id: UUID
    name: str
    description: str | None = None
    order_index: int
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class MoveRequest(BaseModel):
    """
    Move a table or field to a new position.

    Positions past the end are clamped to the last slot.
    """
    position: int = Field(..., ge=0, description="Zero-based target position")


# =============================================================================
# Fields
# =============================================================================

class FieldCreate(BaseModel):
    """
    Schema for adding a field (column) to a table.

    Example:
        {"name": "Stage", "type": "select", "options": ["New", "Won", "Lost"]}
    """
    name: str = Field(..., min_length=1, max_length=255, description="Field name")
    type: FieldType = Field(..., description="Column type")
    options: list[str] = Field(
        default_factory=list,
        description="Allowed choices (select/multiselect only)"
    )
    required: bool = Field(default=False)

    @field_validator("options")
    @classmethod
    def strip_options(cls, v: list[str]) -> list[str]:
        return clean_options(v)


class FieldUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    options: list[str] | None = None
    required: bool | None = None

    @field_validator("options")
    @classmethod
    def strip_options(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return clean_options(v)


class FieldResponse(BaseModel):
    """A field as stored."""
    id: UUID
    table_id: UUID
    name: str
    type: FieldType
    options: list[str] = Field(default_factory=list)
    order_index: int
    required: bool = False

    class Config:
        from_attributes = True


# =============================================================================
# Records
# =============================================================================

class RecordCreate(BaseModel):
    """
    Schema for adding a record.

    `values` maps field id -> edited text and is coerced per field type.
    Fields left out get their type's default.
    """
    values: dict[str, str] = Field(default_factory=dict)


class CellEdit(BaseModel):
    """
    One edited cell.

    Example:
        {"field_id": "660e8400-...", "value": "12.5"}
    """
    field_id: UUID
    value: str = Field(..., max_length=10000, description="Edited text")


class RecordResponse(BaseModel):
    """
    A record as stored.

    `data` is the stored map. Keys left behind by deleted fields stay in it
    and are listed in `legacy_keys` so clients can hide them.
    """
    id: UUID
    table_id: UUID
    data: dict[str, Any] = Field(default_factory=dict)
    legacy_keys: list[str] = Field(default_factory=list)
    created_by: UUID | None = None
    created_at: datetime | None = None
