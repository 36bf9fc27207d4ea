"""Bounded table sampling — column names plus the first few rows of a table."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.engine import Connection

from tablebrowser.browse.catalog import TableCatalog, describe_columns
from tablebrowser.browse.formatter import project_row
from tablebrowser.browse.models import TableSample
from tablebrowser.errors import AmbiguousColumnError, ColumnNotFoundError, QueryExecutionError

logger = logging.getLogger(__name__)

SAMPLE_LIMIT = 10


class TableSampler:
    """Fetches up to ``limit`` rendered rows of a table.

    Rows come back in whatever order the engine produces without an
    ORDER BY, so the sample is not a stable "first N".
    """

    def __init__(self, catalog: TableCatalog, limit: int = SAMPLE_LIMIT):
        self.catalog = catalog
        self.limit = limit

    def sample(self, table: str, conn: Connection | None = None) -> TableSample:
        """Sample a table by its canonical catalog name."""
        if conn is None:
            with self.catalog.db.connection() as conn:
                return self.sample(table, conn)

        reflected = self.catalog.reflect(table, conn)
        columns = describe_columns(reflected)
        result = conn.execute(select(reflected).limit(self.limit))
        try:
            rows = [project_row(tuple(row), columns) for row in result]
        except (TypeError, ValueError) as e:
            # a result processor (e.g. SQLite DATETIME) choked on a stored value
            raise QueryExecutionError(f"Could not read a row of {table}: {e}") from e

        try:
            key = self.catalog.key_column(reflected, conn)
        except (ColumnNotFoundError, AmbiguousColumnError):
            key = None

        logger.debug("Sampled %d row(s) from %s", len(rows), table)
        return TableSample(
            table=table,
            columns=[col.name for col in columns],
            rows=rows,
            key_column=key,
        )
