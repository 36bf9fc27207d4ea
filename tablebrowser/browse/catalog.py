"""Catalog lookups — table listing, name resolution, column reflection."""

from __future__ import annotations

import logging

from sqlalchemy import MetaData, Table, inspect
from sqlalchemy.engine import Connection

from tablebrowser.browse.models import ColumnDescriptor, ColumnType
from tablebrowser.db.connection import Database
from tablebrowser.errors import (
    AmbiguousColumnError,
    AmbiguousTableError,
    ColumnNotFoundError,
    TableNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_KEY_COLUMN = "id"


def match_name(requested: str, candidates: list[str]) -> list[str]:
    """Case-insensitive matches of ``requested``.

    An exact-case match wins outright, even over candidates that differ
    from it only by case (``"Users"`` and ``users`` on PostgreSQL). Only a
    name with no exact match can come back ambiguous.
    """
    if requested in candidates:
        return [requested]
    folded = requested.casefold()
    return [c for c in candidates if c.casefold() == folded]


def describe_columns(table: Table) -> list[ColumnDescriptor]:
    return [
        ColumnDescriptor(name=col.name, type=ColumnType.from_sql_type(col.type))
        for col in table.columns
    ]


class TableCatalog:
    """Reads the database catalog for the configured schema.

    Every method opens its own connection unless one is passed in, and a
    fresh SQLAlchemy inspector is used each time so nothing is cached
    between requests.
    """

    def __init__(self, db: Database, key_columns: dict[str, str] | None = None):
        self.db = db
        self.key_columns = dict(key_columns or {})

    @property
    def schema(self) -> str | None:
        return self.db.schema_name

    def list_tables(self, conn: Connection | None = None) -> list[str]:
        """Tables and views of the schema, in catalog order."""
        if conn is None:
            with self.db.connection() as conn:
                return self.list_tables(conn)
        inspector = inspect(conn)
        names = inspector.get_table_names(schema=self.schema)
        names += [v for v in inspector.get_view_names(schema=self.schema) if v not in names]
        return names

    def resolve_table(self, name: str, conn: Connection | None = None) -> str:
        """Return the canonical catalog name of a table, matched case-insensitively.

        Follows ``match_name``: an exact-case spelling selects its table even
        when case variants of it exist.
        """
        matches = match_name(name, self.list_tables(conn))
        if not matches:
            raise TableNotFoundError(name)
        if len(matches) > 1:
            logger.warning("Ambiguous table name %r: %s", name, matches)
            raise AmbiguousTableError(name, matches)
        return matches[0]

    def reflect(self, table: str, conn: Connection) -> Table:
        """Reflect a canonical table (or view) into a SQLAlchemy ``Table``."""
        return Table(table, MetaData(), schema=self.schema, autoload_with=conn)

    def describe(self, table: str, conn: Connection | None = None) -> list[ColumnDescriptor]:
        """Column descriptors of a canonical table, available even when it is empty."""
        if conn is None:
            with self.db.connection() as conn:
                return self.describe(table, conn)
        return describe_columns(self.reflect(table, conn))

    def resolve_column(self, table: Table, name: str) -> str:
        """Return the canonical name of a column of a reflected table."""
        matches = match_name(name, [col.name for col in table.columns])
        if not matches:
            raise ColumnNotFoundError(table.name, name)
        if len(matches) > 1:
            logger.warning("Ambiguous column name %r in %s: %s", name, table.name, matches)
            raise AmbiguousColumnError(table.name, name, matches)
        return matches[0]

    def key_column(self, table: Table, conn: Connection) -> str:
        """Identifier column used to address a single row of ``table``.

        Configured override first, then a single-column primary key, then
        the literal ``id``.
        """
        key = self.key_columns.get(table.name)
        if key is None:
            pk = inspect(conn).get_pk_constraint(table.name, schema=self.schema)
            columns = pk.get("constrained_columns") or []
            key = columns[0] if len(columns) == 1 else DEFAULT_KEY_COLUMN
        return self.resolve_column(table, key)
