"""Error taxonomy shared by the API and the CLI.

Not-found outcomes, catalog inconsistencies, statement failures and
connectivity failures are kept apart so the API can answer each with its
own status code and the CLI can keep its menu loop running.
"""

from __future__ import annotations


class TableBrowserError(RuntimeError):
    """Base class for every error raised by the browser."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TableNotFoundError(TableBrowserError):
    status_code = 404

    def __init__(self, table: str):
        super().__init__(f"Table {table!r} not found")
        self.table = table


class ColumnNotFoundError(TableBrowserError):
    status_code = 404

    def __init__(self, table: str, column: str):
        super().__init__(f"Column {column!r} not found in table {table!r}")
        self.table = table
        self.column = column


class AmbiguousTableError(TableBrowserError):
    """More than one catalog entry matches a name case-insensitively."""

    status_code = 409

    def __init__(self, table: str, matches: list[str]):
        super().__init__(f"Table name {table!r} is ambiguous: matches {', '.join(matches)}")
        self.table = table
        self.matches = matches


class AmbiguousColumnError(TableBrowserError):
    """More than one column of a table matches a name case-insensitively."""

    status_code = 409

    def __init__(self, table: str, column: str, matches: list[str]):
        super().__init__(
            f"Column name {column!r} is ambiguous in table {table!r}: matches {', '.join(matches)}"
        )
        self.table = table
        self.column = column
        self.matches = matches


class QueryExecutionError(TableBrowserError):
    """A statement was rejected by the database."""

    status_code = 500


class InvalidValueError(QueryExecutionError):
    """An edit value cannot be read as the target column's type."""

    status_code = 400

    def __init__(self, column: str, value: str, expected: str):
        super().__init__(f"Value {value!r} is not a valid {expected} for column {column!r}")
        self.column = column
        self.value = value


class DatabaseUnavailableError(TableBrowserError):
    """No connection could be obtained (connect failure or pool timeout)."""

    status_code = 503


class RowShapeError(TableBrowserError):
    """A result row does not line up with its column descriptors."""

    status_code = 500


__all__ = [
    "TableBrowserError",
    "TableNotFoundError",
    "ColumnNotFoundError",
    "AmbiguousTableError",
    "AmbiguousColumnError",
    "QueryExecutionError",
    "InvalidValueError",
    "DatabaseUnavailableError",
    "RowShapeError",
]
