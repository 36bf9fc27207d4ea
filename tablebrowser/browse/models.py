"""Value types passed between the catalog, sampler, editor and front-ends."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import types as sqltypes


class ColumnType(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    BIGINT = "bigint"
    FLOAT = "float"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    TIMESTAMPTZ = "timestamptz"
    DATE = "date"
    JSON = "json"
    OTHER = "other"

    @classmethod
    def from_sql_type(cls, sql_type: sqltypes.TypeEngine) -> ColumnType:
        """Classify a reflected SQLAlchemy type."""
        # Subclasses first: BigInteger is an Integer, Float is a Numeric
        if isinstance(sql_type, sqltypes.Boolean):
            return cls.BOOLEAN
        if isinstance(sql_type, sqltypes.BigInteger):
            return cls.BIGINT
        if isinstance(sql_type, sqltypes.Integer):
            return cls.INTEGER
        if isinstance(sql_type, sqltypes.Float):
            return cls.FLOAT
        if isinstance(sql_type, sqltypes.String):
            return cls.TEXT
        if isinstance(sql_type, sqltypes.DateTime):
            return cls.TIMESTAMPTZ if sql_type.timezone else cls.TIMESTAMP
        if isinstance(sql_type, sqltypes.Date):
            return cls.DATE
        if isinstance(sql_type, sqltypes.JSON):
            return cls.JSON
        return cls.OTHER


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    type: ColumnType = ColumnType.OTHER


@dataclass
class TableSample:
    table: str
    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)
    # column that addresses a row for edits; None when the table has none
    key_column: str | None = None


@dataclass
class EditRequest:
    table: str
    column: str
    id: str
    value: str


@dataclass
class EditResult:
    table: str
    column: str
    key_column: str
    row_id: str
    affected: int = 0

    @property
    def matched(self) -> bool:
        return self.affected > 0
