"""Table browsing — catalog lookup, bounded sampling, cell edits, value rendering."""

from tablebrowser.browse.formatter import NULL_MARKER, format_value, project_row
from tablebrowser.browse.models import (
    ColumnDescriptor,
    ColumnType,
    EditRequest,
    EditResult,
    TableSample,
)
from tablebrowser.browse.service import TableBrowser

__all__ = [
    "NULL_MARKER",
    "format_value",
    "project_row",
    "ColumnDescriptor",
    "ColumnType",
    "EditRequest",
    "EditResult",
    "TableSample",
    "TableBrowser",
]
