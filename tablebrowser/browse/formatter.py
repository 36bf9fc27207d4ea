"""Render typed column values as display strings.

Every value shown by the API or the CLI goes through ``format_value``:
integers as exact decimals, floats as their shortest round-trip text,
temporal values as ISO-8601, JSON re-serialized, and ``None`` as the
single ``NULL`` marker regardless of the column's type.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any, Callable, Sequence

from tablebrowser.browse.models import ColumnDescriptor, ColumnType
from tablebrowser.errors import RowShapeError

NULL_MARKER = "NULL"


def _format_bool(value: Any) -> str:
    # SQLite hands back 0/1 when no boolean processor applies
    if isinstance(value, bool) or value in (0, 1):
        return "true" if value else "false"
    return _format_other(value)


def _format_int(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _format_other(value)


def _format_float(value: Any) -> str:
    # repr() is the shortest text that round-trips; no locale, no grouping
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _format_other(value)


def _format_text(value: Any) -> str:
    return value if isinstance(value, str) else _format_other(value)


def _format_timestamp(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return _format_other(value)


def _format_timestamptz(value: Any) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat()
    return _format_other(value)


def _format_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _format_other(value: Any) -> str:
    if isinstance(value, memoryview):
        value = value.tobytes()
    if isinstance(value, (bytes, bytearray)):
        return "\\x" + bytes(value).hex()
    return str(value)


_FORMATTERS: dict[ColumnType, Callable[[Any], str]] = {
    ColumnType.BOOLEAN: _format_bool,
    ColumnType.INTEGER: _format_int,
    ColumnType.BIGINT: _format_int,
    ColumnType.FLOAT: _format_float,
    ColumnType.TEXT: _format_text,
    ColumnType.TIMESTAMP: _format_timestamp,
    ColumnType.TIMESTAMPTZ: _format_timestamptz,
    ColumnType.DATE: _format_timestamp,
    ColumnType.JSON: _format_json,
    ColumnType.OTHER: _format_other,
}


def format_value(column_type: ColumnType, value: Any) -> str:
    """Render one value of a column of the given type.

    A value whose Python type does not match the declared column type
    (SQLite stores whatever it is given) is rendered as plain text
    instead of failing the whole sample.
    """
    if value is None:
        return NULL_MARKER
    try:
        return _FORMATTERS.get(column_type, _format_other)(value)
    except (TypeError, ValueError, OverflowError):
        return _format_other(value)


def project_row(row: Sequence[Any], columns: Sequence[ColumnDescriptor]) -> list[str]:
    """Render a result row position by position against its column descriptors."""
    if len(row) != len(columns):
        raise RowShapeError(
            f"Row has {len(row)} values but {len(columns)} columns were described"
        )
    return [format_value(col.type, value) for col, value in zip(columns, row)]
