"""Database layer — SQLAlchemy engine for PostgreSQL (and SQLite)."""

from tablebrowser.db.connection import Database, create_db_engine

__all__ = ["Database", "create_db_engine"]
