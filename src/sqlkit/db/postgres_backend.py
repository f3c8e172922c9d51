"""PostgreSQL implementation of the driver contract.

Uses asyncpg, which prepares statements server-side. Engine SQL uses ``?``
placeholders; this backend translates them to ``$N`` at prepare time.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import asyncpg

from sqlkit.db.rows import report_driver_error, shape_row
from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.dialect import DriverKind

if TYPE_CHECKING:
    from sqlkit.db.backend import Params, Row

logger = logging.getLogger(__name__)

# Quoted spans are matched first so a ``?`` inside them is left alone
_PLACEHOLDER_RE = re.compile(r"""'(?:[^']|'')*'|"(?:[^"]|"")*"|\?""")


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``$1, $2, ...`` for asyncpg.

    String literals and quoted identifiers (with doubled quotes as escapes)
    are copied through unchanged.
    """
    counter = 0

    def _replace(match: re.Match[str]) -> str:
        nonlocal counter
        if match.group() != "?":
            return match.group()
        counter += 1
        return f"${counter}"

    return _PLACEHOLDER_RE.sub(_replace, sql)


def _parse_rowcount(status: str | None) -> int:
    """Parse the affected row count from a command status tag.

    Examples: "INSERT 0 1" → 1, "UPDATE 3" → 3, "DELETE 0" → 0.
    """
    if not status:
        return -1
    parts = status.split()
    if len(parts) >= 2:
        try:
            return int(parts[-1])
        except ValueError:
            pass
    return -1


def connect_kwargs(
    params: dict[str, str], username: str | None, password: str | None
) -> dict[str, Any]:
    """Map connection-string components to ``asyncpg.connect`` keywords."""
    kwargs: dict[str, Any] = {}
    if "host" in params:
        kwargs["host"] = params["host"]
    if "port" in params:
        kwargs["port"] = int(params["port"])
    if "dbname" in params:
        kwargs["database"] = params["dbname"]
    user = username or params.get("user")
    if user:
        kwargs["user"] = user
    secret = password or params.get("password")
    if secret:
        kwargs["password"] = secret
    if "client_encoding" in params:
        kwargs["server_settings"] = {"client_encoding": params["client_encoding"]}
    return kwargs


class PostgresStatement:
    """Wraps an asyncpg.PreparedStatement.

    asyncpg returns results eagerly, so ``execute`` buffers the rows and
    ``fetchone`` walks the buffer.
    """

    def __init__(
        self, connection: PostgresConnection, prepared: asyncpg.PreparedStatement
    ) -> None:
        """Initialize with the owning connection and a prepared statement."""
        self._connection = connection
        self._prepared = prepared
        self._rows: list[asyncpg.Record] = []
        self._index = 0

    async def execute(self, params: Params | None = None) -> int:
        """Execute with bound values; return the row count from the status tag."""
        try:
            self._rows = await self._prepared.fetch(*(params or ()))
        except Exception as exc:
            report_driver_error(self._connection.get_attributes(), exc)
            raise
        self._index = 0
        return _parse_rowcount(self._prepared.get_statusmsg())

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        if self._index >= len(self._rows):
            return None
        record = self._rows[self._index]
        self._index += 1
        return self._shape(record)

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        remaining = [self._shape(r) for r in self._rows[self._index :]]
        self._index = len(self._rows)
        return remaining

    async def close(self) -> None:
        """Drop buffered rows."""
        self._rows = []
        self._index = 0

    def _shape(self, record: asyncpg.Record) -> Row:
        return shape_row(list(record.keys()), record.values(), self._connection.get_attributes())


class PostgresConnection:
    """PostgreSQL implementation of the Connection protocol."""

    def __init__(self, conn: asyncpg.Connection) -> None:
        """Initialize with an asyncpg connection."""
        self.raw = conn
        self._attributes = ConnectionAttributes.driver_defaults()

    @classmethod
    async def open(
        cls,
        params: dict[str, str],
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 10.0,
    ) -> PostgresConnection:
        """Connect with asyncpg using the connection-string components."""
        conn = await asyncpg.connect(**connect_kwargs(params, username, password), timeout=timeout)
        return cls(conn)

    @property
    def driver_kind(self) -> DriverKind:
        """Always ``DriverKind.POSTGRESQL``."""
        return DriverKind.POSTGRESQL

    def get_attributes(self) -> ConnectionAttributes:
        """Return the attributes currently in effect."""
        return self._attributes

    def set_attributes(self, attributes: ConnectionAttributes) -> None:
        """Replace the attributes in effect."""
        self._attributes = attributes

    async def prepare(self, sql: str) -> PostgresStatement:
        """Prepare server-side after translating placeholders."""
        try:
            prepared = await self.raw.prepare(_translate_placeholders(sql))
        except Exception as exc:
            report_driver_error(self._attributes, exc, sql)
            raise
        return PostgresStatement(self, prepared)

    async def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """``currval`` of the named sequence, or ``lastval()`` without one."""
        if sequence_name:
            return await self.raw.fetchval("SELECT currval($1::regclass)", sequence_name)
        return await self.raw.fetchval("SELECT lastval()")

    async def close(self) -> None:
        """Close the connection."""
        await self.raw.close()
