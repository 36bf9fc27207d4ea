"""Database connection management — a SQLAlchemy engine behind one small facade."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Connection, Engine, make_url
from sqlalchemy.pool import StaticPool

from tablebrowser.config import AppConfig
from tablebrowser.errors import DatabaseUnavailableError, QueryExecutionError

logger = logging.getLogger(__name__)

_POSTGRES_DRIVER = "postgresql+psycopg2://"


def _describe(exc: BaseException) -> str:
    """Short message for a SQLAlchemy error (the DBAPI message when there is one)."""
    if isinstance(exc, sa_exc.DBAPIError) and exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc)


def create_db_engine(
    url: str,
    *,
    single_connection: bool = False,
    pool_size: int = 5,
    max_overflow: int = 10,
    pool_timeout: float = 30.0,
    ssl_mode: str = "",
) -> Engine:
    """Build an engine from a SQLAlchemy URL, a ``postgres://`` URL or a libpq DSN.

    ``single_connection`` keeps exactly one connection for the life of the
    engine (the CLI); otherwise a regular pool is configured (the service).
    """
    connect_args: dict[str, Any] = {}
    if "://" not in url:
        # libpq keyword/value string, e.g. "host=localhost dbname=app user=me"
        connect_args["dsn"] = url
        url = _POSTGRES_DRIVER
    elif url.startswith("postgres://"):
        url = _POSTGRES_DRIVER + url[len("postgres://"):]

    sa_url = make_url(url)
    backend = sa_url.get_backend_name()

    if backend == "sqlite":
        connect_args["check_same_thread"] = False
    elif backend == "postgresql" and ssl_mode:
        connect_args["sslmode"] = ssl_mode

    kwargs: dict[str, Any] = {}
    if single_connection:
        kwargs["poolclass"] = StaticPool
    elif backend != "sqlite":
        kwargs.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_pre_ping=True,
        )

    return create_engine(sa_url, connect_args=connect_args, **kwargs)


class Database:
    """Query executor handed to the catalog, sampler and editor.

    One ``connection()`` block is one unit of work: it is committed when
    the block exits normally and rolled back otherwise.
    """

    def __init__(self, engine: Engine, schema_name: str | None = None):
        self.engine = engine
        self.schema_name = schema_name

    @classmethod
    def from_config(cls, config: AppConfig) -> Database:
        """Pooled database for the network service."""
        db_config = config.database
        if not db_config.url:
            raise ValueError("Database URL not configured. Set DATABASE_URL or TB_DB_URL.")
        engine = create_db_engine(
            db_config.url,
            pool_size=db_config.pool_size,
            max_overflow=db_config.max_overflow,
            pool_timeout=db_config.pool_timeout,
            ssl_mode=db_config.ssl_mode,
        )
        return cls(engine, schema_name=db_config.schema_name)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        single_connection: bool = False,
        schema_name: str | None = None,
        ssl_mode: str = "",
    ) -> Database:
        engine = create_db_engine(url, single_connection=single_connection, ssl_mode=ssl_mode)
        return cls(engine, schema_name=schema_name)

    @property
    def backend(self) -> str:
        return self.engine.url.get_backend_name()

    @contextmanager
    def connection(self) -> Generator[Connection, None, None]:
        """Check a connection out of the pool (context manager)."""
        try:
            conn = self.engine.connect()
        except (sa_exc.DBAPIError, sa_exc.TimeoutError) as e:
            logger.error("Database connection failed: %s", _describe(e))
            raise DatabaseUnavailableError(f"Database unavailable: {_describe(e)}") from e

        try:
            yield conn
            conn.commit()
        except sa_exc.SQLAlchemyError as e:
            conn.rollback()
            if isinstance(e, sa_exc.DBAPIError) and e.connection_invalidated:
                logger.error("Database connection lost: %s", _describe(e))
                raise DatabaseUnavailableError(f"Database connection lost: {_describe(e)}") from e
            logger.error("Query failed: %s", _describe(e))
            raise QueryExecutionError(f"Query failed: {_describe(e)}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ping(self) -> None:
        """Run a trivial statement; raises DatabaseUnavailableError when unreachable."""
        with self.connection() as conn:
            conn.execute(text("SELECT 1"))

    def quote(self, identifier: str) -> str:
        """Quote an identifier for the engine's dialect, always."""
        return self.engine.dialect.identifier_preparer.quote_identifier(identifier)

    def dispose(self) -> None:
        """Close every pooled connection."""
        self.engine.dispose()
        logger.info("Database engine disposed")
