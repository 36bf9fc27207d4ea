"""Shared fixtures — SQLite databases standing in for PostgreSQL."""

from __future__ import annotations

import pytest
from sqlalchemy import text

from tablebrowser.browse.service import TableBrowser
from tablebrowser.db.connection import Database


def run_sql(db: Database, *statements: str) -> None:
    """Execute setup statements in one committed unit of work."""
    with db.connection() as conn:
        for statement in statements:
            conn.execute(text(statement))


@pytest.fixture
def db(tmp_path):
    """An empty file-backed SQLite database."""
    database = Database.from_url(f"sqlite:///{tmp_path / 'test.db'}")
    yield database
    database.dispose()


@pytest.fixture
def accounts_db(db):
    """The accounts table: one row (1, 100.5, true)."""
    run_sql(
        db,
        "CREATE TABLE accounts (id INTEGER PRIMARY KEY, balance FLOAT, active BOOLEAN)",
        "INSERT INTO accounts (id, balance, active) VALUES (1, 100.5, 1)",
    )
    return db


@pytest.fixture
def browser(accounts_db):
    return TableBrowser(accounts_db)
