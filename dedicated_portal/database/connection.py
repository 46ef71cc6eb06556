"""Async database connection using aiosqlite or asyncpg."""

import re
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

import aiosqlite
import asyncpg

from ..utils.logger import get_logger

logger = get_logger(__name__)

Row = Dict[str, Any]
Values = Optional[Dict[str, Any]]


class DatabaseDialect(Enum):
    """Enum for database dialects."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    UNKNOWN = "unknown"


DIALECT_DETECTORS: Dict[str, Callable[[str], bool]] = {
    "sqlite": lambda url: url.startswith("sqlite"),
    "postgresql": lambda url: url.startswith("postgresql") or url.startswith("postgres://"),
}

NAMED_PARAMETER = re.compile(r"(?<!:):([A-Za-z_][A-Za-z0-9_]*)")


def detect_database_dialect(database_url: str) -> str:
    """Detect database dialect from URL using enum + dictionary pattern."""
    for dialect_name, detector_func in DIALECT_DETECTORS.items():
        if detector_func(database_url):
            return dialect_name
    return DatabaseDialect.UNKNOWN.value


def redact_url(database_url: str) -> str:
    """Hide the password part of a connection URL for logging."""
    scheme, sep, rest = database_url.partition("://")
    if not sep or "@" not in rest:
        return database_url
    credentials, _, host = rest.rpartition("@")
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***@{host}"


def _convert_postgres(query: str, values: Values) -> Tuple[str, List[Any]]:
    """Rewrite ``:name`` placeholders as asyncpg ``$n`` positions.

    A name used twice maps to the same position.
    """
    if not values:
        return query, []

    params: List[Any] = []
    positions: Dict[str, int] = {}

    def position(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in positions:
            params.append(values.get(name))
            positions[name] = len(params)
        return f"${positions[name]}"

    return NAMED_PARAMETER.sub(position, query), params


def insert_statement(table: str, data: Dict[str, Any]) -> str:
    """INSERT statement with one named parameter per column of ``data``."""
    columns = ", ".join(data)
    placeholders = ", ".join(f":{column}" for column in data)
    return f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"


class _SQLiteBackend:
    """Single aiosqlite connection; writes outside a transaction autocommit."""

    def __init__(self, database_url: str):
        self.path = database_url.replace("sqlite:///", "")
        self.conn: Optional[aiosqlite.Connection] = None
        self.depth = 0

    async def open(self) -> None:
        self.conn = await aiosqlite.connect(self.path)
        self.conn.row_factory = aiosqlite.Row

    async def close(self) -> None:
        await self.conn.close()

    @asynccontextmanager
    async def transaction(self):
        await self.conn.execute("BEGIN")
        self.depth += 1
        try:
            yield self
            await self.conn.commit()
        except Exception:
            await self.conn.rollback()
            raise
        finally:
            self.depth -= 1

    async def execute(self, query: str, values: Values) -> int:
        cursor = await self.conn.execute(query, values or {})
        if self.depth == 0:
            await self.conn.commit()
        return cursor.rowcount

    async def fetch_one(self, query: str, values: Values) -> Optional[Row]:
        cursor = await self.conn.execute(query, values or {})
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def fetch_all(self, query: str, values: Values) -> List[Row]:
        cursor = await self.conn.execute(query, values or {})
        return [dict(row) for row in await cursor.fetchall()]


class _PostgresQueries:
    """Runs statements on an asyncpg pool or on one pinned connection."""

    def __init__(self, target=None):
        self.target = target

    async def execute(self, query: str, values: Values) -> int:
        pg_query, params = _convert_postgres(query, values)
        status = await self.target.execute(pg_query, *params)
        # asyncpg returns a command tag such as "INSERT 0 1"
        count = status.split()[-1] if status else ""
        return int(count) if count.isdigit() else 0

    async def fetch_one(self, query: str, values: Values) -> Optional[Row]:
        pg_query, params = _convert_postgres(query, values)
        row = await self.target.fetchrow(pg_query, *params)
        return dict(row) if row else None

    async def fetch_all(self, query: str, values: Values) -> List[Row]:
        pg_query, params = _convert_postgres(query, values)
        return [dict(row) for row in await self.target.fetch(pg_query, *params)]


class _PostgresBackend(_PostgresQueries):
    """asyncpg pool; a transaction pins one pooled connection to its scope."""

    def __init__(self, database_url: str):
        super().__init__()
        self.database_url = database_url

    async def open(self) -> None:
        self.target = await asyncpg.create_pool(self.database_url)

    async def close(self) -> None:
        await self.target.close()

    @asynccontextmanager
    async def transaction(self):
        pool = self.target
        conn = await pool.acquire()
        tx = conn.transaction()
        await tx.start()
        try:
            yield _PostgresQueries(conn)
            await tx.commit()
        except Exception:
            await tx.rollback()
            raise
        finally:
            await pool.release(conn)


BACKENDS = {
    DatabaseDialect.SQLITE.value: _SQLiteBackend,
    DatabaseDialect.POSTGRESQL.value: _PostgresBackend,
}


class TransactionScope:
    """Statements issued through this object run inside one transaction.

    On PostgreSQL the scope owns a pooled connection; statements issued on
    the ``AsyncDatabaseConnection`` itself keep using the pool.
    """

    def __init__(self, queries):
        self._queries = queries

    async def execute(self, query: str, values: Values = None) -> int:
        return await self._queries.execute(query, values)

    async def fetch_one(self, query: str, values: Values = None) -> Optional[Row]:
        return await self._queries.fetch_one(query, values)

    async def fetch_all(self, query: str, values: Values = None) -> List[Row]:
        return await self._queries.fetch_all(query, values)

    async def insert(self, table: str, data: Dict[str, Any]) -> int:
        return await self.execute(insert_statement(table, data), data)


class AsyncDatabaseConnection:
    """Async database connection manager.

    Queries are written once with ``:named`` parameters and run unchanged on
    SQLite and PostgreSQL. The connection opens lazily on first use.
    """

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.dialect = detect_database_dialect(database_url)
        self._backend = None

        logger.info(f"Database initialized: {redact_url(database_url)}")

    @property
    def connected(self) -> bool:
        return self._backend is not None

    async def connect(self):
        """Connect to database."""
        if self._backend is not None:
            return

        backend_class = BACKENDS.get(self.dialect)
        if backend_class is None:
            raise ValueError(f"Unsupported database URL: {redact_url(self.database_url)}")

        backend = backend_class(self.database_url)
        await backend.open()
        self._backend = backend
        logger.info("Database connected")

    async def disconnect(self):
        """Disconnect from database."""
        if self._backend is None:
            return

        await self._backend.close()
        self._backend = None
        logger.info("Database disconnected")

    @asynccontextmanager
    async def transaction(self):
        """Yield a ``TransactionScope`` committed on exit, rolled back on error."""
        await self.connect()
        async with self._backend.transaction() as queries:
            yield TransactionScope(queries)

    async def execute(self, query: str, values: Values = None) -> int:
        """Execute a query and return affected rows."""
        await self.connect()
        return await self._backend.execute(query, values)

    async def fetch_one(self, query: str, values: Values = None) -> Optional[Row]:
        await self.connect()
        return await self._backend.fetch_one(query, values)

    async def fetch_all(self, query: str, values: Values = None) -> List[Row]:
        await self.connect()
        return await self._backend.fetch_all(query, values)

    async def insert(self, table: str, data: Dict[str, Any]) -> int:
        """Insert one record built from a column/value mapping."""
        return await self.execute(insert_statement(table, data), data)
