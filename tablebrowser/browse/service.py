"""Browser facade — the three operations shared by the API and the CLI."""

from __future__ import annotations

from tablebrowser.browse.catalog import TableCatalog
from tablebrowser.browse.editor import CellEditor
from tablebrowser.browse.models import EditRequest, EditResult, TableSample
from tablebrowser.browse.sampler import SAMPLE_LIMIT, TableSampler
from tablebrowser.db.connection import Database


class TableBrowser:
    """List tables, sample a table, edit one cell.

    Each call is one unit of work on one connection checked out of ``db``.
    """

    def __init__(
        self,
        db: Database,
        key_columns: dict[str, str] | None = None,
        sample_limit: int = SAMPLE_LIMIT,
    ):
        self.db = db
        self.catalog = TableCatalog(db, key_columns)
        self.sampler = TableSampler(self.catalog, limit=sample_limit)
        self.editor = CellEditor(self.catalog)

    def list_tables(self) -> list[str]:
        return self.catalog.list_tables()

    def sample(self, name: str) -> TableSample:
        """Resolve a user-supplied table name, then sample it."""
        with self.db.connection() as conn:
            table = self.catalog.resolve_table(name, conn)
            return self.sampler.sample(table, conn)

    def edit(self, request: EditRequest) -> EditResult:
        return self.editor.edit(request)
