"""SQLite implementation of the driver contract.

Thin wrapper around aiosqlite.Connection. No placeholder translation needed
since SQLite already uses ``?``. The connection is opened in autocommit mode.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import aiosqlite

from sqlkit.db.rows import report_driver_error, shape_row
from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.dialect import DriverKind

if TYPE_CHECKING:
    from sqlkit.db.backend import Params, Row

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


def database_path(params: dict[str, str]) -> str:
    """Pick the database file from parsed connection-string components."""
    return params.get("dbname") or params.get("path") or MEMORY_DATABASE


class SQLiteStatement:
    """Deferred statement. SQLite compiles at execute time."""

    def __init__(self, connection: SQLiteConnection, sql: str) -> None:
        """Initialize with the owning connection and SQL text."""
        self._connection = connection
        self._sql = sql
        self._cursor: aiosqlite.Cursor | None = None

    async def execute(self, params: Params | None = None) -> int:
        """Execute the statement and return the affected-row count."""
        try:
            self._cursor = await self._connection.raw.execute(self._sql, tuple(params or ()))
        except Exception as exc:
            report_driver_error(self._connection.get_attributes(), exc, self._sql)
            raise
        rc = self._cursor.rowcount
        return rc if rc is not None else -1

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self._cursor is None:
            return None
        raw = await self._cursor.fetchone()
        if raw is None:
            return None
        return shape_row(self._columns(), raw, self._connection.get_attributes())

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        if self._cursor is None:
            return []
        columns = self._columns()
        attributes = self._connection.get_attributes()
        return [shape_row(columns, raw, attributes) for raw in await self._cursor.fetchall()]

    async def close(self) -> None:
        """Close the underlying cursor."""
        if self._cursor is not None:
            await self._cursor.close()
            self._cursor = None

    def _columns(self) -> list[str]:
        description = self._cursor.description if self._cursor else None
        return [col[0] for col in description or ()]


class SQLiteConnection:
    """SQLite implementation of the Connection protocol.

    The raw aiosqlite connection is exposed as ``raw`` for SQLite-specific
    operations (PRAGMA, extension loading) outside the engine.
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        """Initialize with an aiosqlite connection."""
        self.raw = conn
        self._attributes = ConnectionAttributes.driver_defaults()

    @classmethod
    async def open(cls, params: dict[str, str]) -> SQLiteConnection:
        """Open the database named by the connection-string components."""
        path = database_path(params)
        conn = await aiosqlite.connect(path, isolation_level=None)
        logger.debug("Opened SQLite database %s", path)
        return cls(conn)

    @property
    def driver_kind(self) -> DriverKind:
        """Always ``DriverKind.SQLITE``."""
        return DriverKind.SQLITE

    def get_attributes(self) -> ConnectionAttributes:
        """Return the attributes currently in effect."""
        return self._attributes

    def set_attributes(self, attributes: ConnectionAttributes) -> None:
        """Replace the attributes in effect."""
        self._attributes = attributes

    async def prepare(self, sql: str) -> SQLiteStatement:
        """Wrap the SQL; compilation happens on execute."""
        return SQLiteStatement(self, sql)

    async def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """Rowid of the last inserted row on this connection. Sequence name is ignored."""
        cursor = await self.raw.execute("SELECT last_insert_rowid()")
        try:
            row = await cursor.fetchone()
        finally:
            await cursor.close()
        return row[0] if row else None

    async def close(self) -> None:
        """Close the database connection."""
        await self.raw.close()
