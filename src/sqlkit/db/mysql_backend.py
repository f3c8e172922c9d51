"""MySQL implementation of the driver contract.

Uses aiomysql, which interpolates bound values client-side (``%s``
paramstyle). Engine SQL uses ``?`` placeholders; this backend rewrites them
when values are bound.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

import aiomysql

from sqlkit.db.rows import report_driver_error, shape_row
from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.dialect import DriverKind

if TYPE_CHECKING:
    from sqlkit.db.backend import Params, Row

logger = logging.getLogger(__name__)

# Quoted spans are matched first so a ``?`` inside them is left alone.
# MySQL string literals also accept backslash escapes.
_PLACEHOLDER_RE = re.compile(
    r"""'(?:[^'\\]|''|\\.)*'|"(?:[^"\\]|""|\\.)*"|`(?:[^`]|``)*`|\?""", re.DOTALL
)


def _translate_placeholders(sql: str) -> str:
    """Convert ``?`` placeholders to ``%s``, escaping literal ``%`` first.

    String literals and quoted identifiers are copied through unchanged
    apart from the ``%`` escaping, which applies to the whole statement.
    """
    return _PLACEHOLDER_RE.sub(
        lambda m: "%s" if m.group() == "?" else m.group(), sql.replace("%", "%%")
    )


def connect_kwargs(
    params: dict[str, str], username: str | None, password: str | None
) -> dict[str, Any]:
    """Map connection-string components to ``aiomysql.connect`` keywords."""
    kwargs: dict[str, Any] = {"autocommit": True}
    if "host" in params:
        kwargs["host"] = params["host"]
    if "port" in params:
        kwargs["port"] = int(params["port"])
    if "dbname" in params:
        kwargs["db"] = params["dbname"]
    if "charset" in params:
        kwargs["charset"] = params["charset"]
    user = username or params.get("user")
    if user:
        kwargs["user"] = user
    secret = password or params.get("password")
    if secret:
        kwargs["password"] = secret
    return kwargs


class MySQLStatement:
    """Statement executed through an aiomysql cursor."""

    def __init__(self, connection: MySQLConnection, sql: str) -> None:
        """Initialize with the owning connection and SQL text."""
        self._connection = connection
        self._sql = sql
        self._cursor: aiomysql.Cursor | None = None

    async def execute(self, params: Params | None = None) -> int:
        """Execute the statement and return the affected-row count."""
        if self._cursor is None:
            self._cursor = await self._connection.raw.cursor()
        try:
            if params:
                rc = await self._cursor.execute(_translate_placeholders(self._sql), tuple(params))
            else:
                rc = await self._cursor.execute(self._sql)
        except Exception as exc:
            report_driver_error(self._connection.get_attributes(), exc, self._sql)
            raise
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


class MySQLConnection:
    """MySQL implementation of the Connection protocol.

    aiomysql always binds client-side, so ``emulate_prepares`` starts out
    true and setting it only records the requested value.
    """

    def __init__(self, conn: aiomysql.Connection) -> None:
        """Initialize with an aiomysql connection."""
        self.raw = conn
        self._attributes = ConnectionAttributes.driver_defaults(emulate_prepares=True)

    @classmethod
    async def open(
        cls,
        params: dict[str, str],
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 10.0,
    ) -> MySQLConnection:
        """Connect with aiomysql using the connection-string components."""
        conn = await aiomysql.connect(
            **connect_kwargs(params, username, password), connect_timeout=timeout
        )
        return cls(conn)

    @property
    def driver_kind(self) -> DriverKind:
        """Always ``DriverKind.MYSQL``."""
        return DriverKind.MYSQL

    def get_attributes(self) -> ConnectionAttributes:
        """Return the attributes currently in effect."""
        return self._attributes

    def set_attributes(self, attributes: ConnectionAttributes) -> None:
        """Replace the attributes in effect."""
        self._attributes = attributes

    async def prepare(self, sql: str) -> MySQLStatement:
        """Wrap the SQL; the server sees it on execute."""
        return MySQLStatement(self, sql)

    async def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """``LAST_INSERT_ID()`` for this connection. Sequence name is ignored."""
        cursor = await self.raw.cursor()
        try:
            await cursor.execute("SELECT LAST_INSERT_ID()")
            row = await cursor.fetchone()
        finally:
            await cursor.close()
        return row[0] if row else None

    async def close(self) -> None:
        """Send QUIT and close the connection."""
        await self.raw.ensure_closed()
