"""Table API routes — list tables, sample a table, edit a cell."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from tablebrowser.browse.models import EditRequest
from tablebrowser.browse.service import TableBrowser
from tablebrowser.errors import DatabaseUnavailableError

logger = logging.getLogger(__name__)
router = APIRouter()


class TableData(BaseModel):
    columns: list[str]
    rows: list[list[str]]
    # column the UI sends back as the row id on edits
    key: str | None = None


class EditBody(BaseModel):
    table: str
    column: str
    id: str
    value: str


def get_browser(request: Request) -> TableBrowser:
    """The browser built by ``create_app`` for this application."""
    return request.app.state.browser


# Handlers are plain functions: FastAPI runs them in its thread pool, so
# concurrent requests each hold their own pooled connection.


@router.get("/tables")
def list_tables(browser: TableBrowser = Depends(get_browser)) -> list[str]:
    return browser.list_tables()


@router.get("/table/{name}")
def get_table_data(name: str, browser: TableBrowser = Depends(get_browser)) -> TableData:
    sample = browser.sample(name)
    return TableData(columns=sample.columns, rows=sample.rows, key=sample.key_column)


@router.post("/edit")
def edit_table_data(body: EditBody, browser: TableBrowser = Depends(get_browser)) -> bool:
    """Update one cell; ``false`` means no row carried the given identifier."""
    result = browser.edit(
        EditRequest(table=body.table, column=body.column, id=body.id, value=body.value)
    )
    return result.matched


@router.get("/health")
def health(browser: TableBrowser = Depends(get_browser)):
    try:
        browser.db.ping()
    except DatabaseUnavailableError as e:
        logger.warning("Health check failed: %s", e)
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ok"}
