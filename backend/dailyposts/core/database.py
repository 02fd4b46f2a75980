"""Query executor - owns the connection pool and runs parameterized statements."""

import logging
import re
from contextlib import contextmanager
from typing import Any, Iterator, Sequence

from sqlalchemy import Connection, Engine, text
from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import SQLModel, create_engine

from dailyposts.core.config import Settings
from dailyposts.core.errors import DataAccessError, ValidationError

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"\?")


def create_db_engine(settings: Settings) -> Engine:
    """Build the process-wide engine from settings."""
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_engine(
            url,
            echo=settings.debug,
            connect_args={"check_same_thread": False},
            pool_recycle=settings.database_pool_recycle,
        )
    return create_engine(
        url,
        echo=settings.debug,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle,
        pool_pre_ping=True,
    )


def bind_positional(sql: str, args: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite `?` placeholders into named binds `:p0, :p1, ...`."""
    count = len(_PLACEHOLDER.findall(sql))
    if count != len(args):
        raise ValidationError(f"statement has {count} placeholders but {len(args)} arguments were given")

    index = iter(range(count))
    bound = _PLACEHOLDER.sub(lambda _: f":p{next(index)}", sql)
    return bound, {f"p{i}": value for i, value in enumerate(args)}


class QueryExecutor:
    """Runs statements against the pool.

    Outside of a transaction every statement checks a connection out, runs and
    commits, and gives the connection back. Inside `transaction()` all
    statements share one connection and are committed or rolled back together.
    """

    def __init__(self, engine: Engine, connection: Connection | None = None):
        self.engine = engine
        self._connection = connection

    @contextmanager
    def _connect(self) -> Iterator[Connection]:
        if self._connection is not None:
            yield self._connection
            return
        with self.engine.begin() as conn:
            yield conn

    def query(self, sql: str, *args: Any) -> tuple[list[str], list[Row]]:
        """Run a SELECT and return (column names, rows)."""
        bound, params = bind_positional(sql, args)
        logger.debug(f"query: {sql} {list(args)!r}")
        try:
            with self._connect() as conn:
                result = conn.execute(text(bound), params)
                return list(result.keys()), list(result.fetchall())
        except SQLAlchemyError as e:
            raise DataAccessError(f"query failed: {sql}", e) from e

    def execute(self, sql: str, *args: Any) -> int:
        """Run a write statement and return the affected row count."""
        bound, params = bind_positional(sql, args)
        logger.debug(f"execute: {sql}")
        try:
            with self._connect() as conn:
                return conn.execute(text(bound), params).rowcount
        except SQLAlchemyError as e:
            raise DataAccessError(f"statement failed: {sql}", e) from e

    @contextmanager
    def transaction(self) -> Iterator["QueryExecutor"]:
        """Run several statements atomically; any exception rolls all of them back."""
        if self._connection is not None:
            yield self
            return
        try:
            with self.engine.begin() as conn:
                yield QueryExecutor(self.engine, connection=conn)
        except SQLAlchemyError as e:
            raise DataAccessError("transaction failed", e) from e

    def health_check(self) -> bool:
        try:
            self.query("SELECT 1")
            return True
        except DataAccessError as e:
            logger.error(f"DB health check failed: {e.original}")
            return False

    def init_db(self) -> None:
        import dailyposts.models  # noqa: F401 - ensure models are registered
        SQLModel.metadata.create_all(self.engine)
