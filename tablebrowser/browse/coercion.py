"""Read edit values, which always arrive as text, as the target column's type.

SQLite keeps whatever it is given, so binding ``"false"`` into a BOOLEAN
column stores the string and reads back as true. Values for the column
types the browser renders are parsed here and bound with the column's own
SQLAlchemy type; anything else is bound as text for the database to
coerce.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from sqlalchemy import Column, bindparam
from sqlalchemy import types as sqltypes
from sqlalchemy.sql.elements import BindParameter

from tablebrowser.errors import InvalidValueError

_TRUE = frozenset({"true", "t", "yes", "y", "on", "1"})
_FALSE = frozenset({"false", "f", "no", "n", "off", "0"})


def _parse_bool(text: str) -> bool:
    folded = text.strip().casefold()
    if folded in _TRUE:
        return True
    if folded in _FALSE:
        return False
    raise ValueError(text)


def _parse_decimal(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as e:
        raise ValueError(text) from e


# Checked in order: Boolean before Integer, Float before Numeric
_PARSERS: list[tuple[type[sqltypes.TypeEngine], str, Callable[[str], Any]]] = [
    (sqltypes.Boolean, "boolean", _parse_bool),
    (sqltypes.Integer, "integer", lambda t: int(t.strip())),
    (sqltypes.Float, "number", lambda t: float(t.strip())),
    (sqltypes.Numeric, "number", _parse_decimal),
    (sqltypes.DateTime, "timestamp", lambda t: datetime.fromisoformat(t.strip())),
    (sqltypes.Date, "date", lambda t: date.fromisoformat(t.strip())),
    (sqltypes.JSON, "JSON document", json.loads),
]


def coerce_value(column: Column, text: str) -> Any:
    """Parse ``text`` as a value of ``column``'s type.

    Returns ``text`` unchanged for text columns and for types with no
    parser. Raises ``InvalidValueError`` when the text cannot be read.
    """
    for sql_type, label, parse in _PARSERS:
        if isinstance(column.type, sql_type):
            try:
                return parse(text)
            except (TypeError, ValueError, OverflowError) as e:
                raise InvalidValueError(column.name, text, label) from e
    return text


def value_param(column: Column, text: str, name: str = "value") -> BindParameter:
    """A bound parameter carrying ``text`` coerced for ``column``."""
    if any(isinstance(column.type, sql_type) for sql_type, _, _ in _PARSERS):
        return bindparam(name, coerce_value(column, text), type_=column.type)
    return bindparam(name, text)
