"""Single-cell edits addressed by a row identifier."""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection

from tablebrowser.browse.catalog import TableCatalog
from tablebrowser.browse.coercion import value_param
from tablebrowser.browse.models import EditRequest, EditResult

logger = logging.getLogger(__name__)


class CellEditor:
    """Applies ``UPDATE <table> SET <column> = :value WHERE <key> = :row_id``.

    Table, column and key names are looked up in the catalog before they
    are quoted into the statement. The value is parsed as the column's type
    and bound with it; the row identifier is bound as text.
    """

    def __init__(self, catalog: TableCatalog):
        self.catalog = catalog

    def edit(self, request: EditRequest, conn: Connection | None = None) -> EditResult:
        if conn is None:
            with self.catalog.db.connection() as conn:
                return self.edit(request, conn)

        table_name = self.catalog.resolve_table(request.table, conn)
        table = self.catalog.reflect(table_name, conn)
        column = self.catalog.resolve_column(table, request.column)
        key = self.catalog.key_column(table, conn)

        quote = self.catalog.db.quote
        target = quote(table_name)
        if self.catalog.schema:
            target = f"{quote(self.catalog.schema)}.{target}"
        statement = text(
            f"UPDATE {target} SET {quote(column)} = :value WHERE {quote(key)} = :row_id"  # noqa: S608
        ).bindparams(value_param(table.c[column], request.value), row_id=request.id)
        result = conn.execute(statement)

        affected = result.rowcount
        if affected:
            logger.info(
                "Updated %s.%s where %s=%s (%d row(s))",
                table_name, column, key, request.id, affected,
            )
        else:
            logger.info("No row in %s with %s=%s", table_name, key, request.id)

        return EditResult(
            table=table_name,
            column=column,
            key_column=key,
            row_id=request.id,
            affected=affected,
        )
