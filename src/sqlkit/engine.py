"""SQL execution engine over a single lazily opened connection.

Every public operation runs inside an attribute bracket: the engine's desired
``ConnectionAttributes`` are applied on entry and the previous attributes are
restored on every exit path, including failures. Brackets on one engine are
serialized behind an ``asyncio.Lock``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from types import TracebackType
from typing import Any, TypeVar

from sqlkit.db.backend import Connection, Opener, Params, Row, Statement
from sqlkit.db.connection import open_connection
from sqlkit.errors import (
    ArgumentError,
    ExecutionError,
    SqlConnectionError,
    SqlKitError,
    StatementError,
)
from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.descriptor import ConnectionDescriptor
from sqlkit.models.dialect import DriverKind, quote_char_for
from sqlkit.models.dsn import DSN

logger = logging.getLogger(__name__)

T = TypeVar("T")

TableName = str | Sequence[str]


class Engine:
    """Parameterized CRUD and query operations with dialect-aware quoting.

    Build one with ``from_connection``, ``from_dsn`` or ``from_descriptor``.
    Values are always bound positionally with ``?`` placeholders; they are
    never interpolated into SQL text.
    """

    def __init__(
        self,
        connection: Connection | None = None,
        dsn: DSN | None = None,
        *,
        driver_kind: DriverKind | str | None = None,
        opener: Opener | None = None,
        attributes: ConnectionAttributes | None = None,
    ) -> None:
        """Initialize with exactly one of an open connection or a DSN."""
        if (connection is None) == (dsn is None):
            raise ArgumentError("Engine needs exactly one of an open connection or a DSN")
        self._connection = connection
        self._dsn = dsn
        self._driver_kind = DriverKind(driver_kind) if driver_kind is not None else None
        self._opener: Opener = opener or open_connection
        self._desired_attributes = attributes or ConnectionAttributes()
        self._saved_attributes: ConnectionAttributes | None = None
        self._closed = False
        self._lock = asyncio.Lock()
        self._open_lock = asyncio.Lock()

    @classmethod
    def from_connection(cls, connection: Connection, **kwargs: Any) -> Engine:
        """Wrap an already open connection. The engine takes ownership of it."""
        return cls(connection=connection, **kwargs)

    @classmethod
    def from_dsn(cls, dsn: DSN, **kwargs: Any) -> Engine:
        """Create an engine that opens ``dsn`` on first use."""
        return cls(dsn=dsn, **kwargs)

    @classmethod
    def from_descriptor(cls, descriptor: ConnectionDescriptor, **kwargs: Any) -> Engine:
        """Create an engine from structured connection parameters."""
        kwargs.setdefault("driver_kind", descriptor.driver_kind)
        return cls(dsn=descriptor.to_dsn(), **kwargs)

    @property
    def dsn(self) -> DSN | None:
        """The DSN used to open the connection, if the engine was built from one."""
        return self._dsn

    @property
    def driver_kind(self) -> DriverKind | None:
        """The resolved driver kind, or None until it is known."""
        return self._driver_kind

    @property
    def desired_attributes(self) -> ConnectionAttributes:
        """Attributes applied for the duration of each operation."""
        return self._desired_attributes

    @property
    def saved_attributes(self) -> ConnectionAttributes | None:
        """Attributes captured by the most recent ``connect()``, until restored."""
        return self._saved_attributes

    @property
    def is_connected(self) -> bool:
        """True while the engine holds an open connection."""
        return self._connection is not None and not self._closed

    # -- Connection lifecycle --

    async def ensure_connected(self) -> Connection:
        """Open the connection if needed and resolve the driver kind."""
        async with self._open_lock:
            if self._closed:
                raise SqlConnectionError("Engine is closed")
            if self._connection is None:
                self._connection = await self._open()
            if self._driver_kind is None:
                try:
                    self._driver_kind = DriverKind(self._connection.driver_kind)
                except ValueError as exc:
                    raise SqlConnectionError(
                        f"Unsupported driver kind: {self._connection.driver_kind!r}"
                    ) from exc
            return self._connection

    async def connect(self) -> Connection:
        """Ensure a connection and apply the desired attributes, saving the previous ones."""
        connection = await self.ensure_connected()
        self._saved_attributes = connection.get_attributes()
        connection.set_attributes(self._desired_attributes)
        return connection

    def disconnect(self) -> None:
        """Restore the attributes saved by ``connect()``."""
        if self._connection is None or self._saved_attributes is None:
            return
        self._connection.set_attributes(self._saved_attributes)
        self._saved_attributes = None

    async def close(self) -> None:
        """Close the owned connection. The engine cannot be used afterwards."""
        async with self._lock:
            if self._connection is not None and not self._closed:
                await self._connection.close()
                logger.info("Closed %s connection", self._driver_kind or "database")
            self._closed = True

    async def __aenter__(self) -> Engine:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _open(self) -> Connection:
        if self._dsn is None:
            raise SqlConnectionError("No DSN to open a connection from")
        try:
            return await self._opener(
                self._dsn.connection_string, self._dsn.username, self._dsn.password
            )
        except SqlKitError:
            raise
        except Exception as exc:
            raise SqlConnectionError.from_driver(exc) from exc

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[Connection]:
        """Attribute bracket: configure on entry, restore on every exit."""
        async with self._lock:
            connection = await self.connect()
            try:
                yield connection
            finally:
                self.disconnect()

    # -- Identifier quoting --

    async def quote_identifier(self, name: str) -> str:
        """Quote a single identifier for the connected dialect."""
        await self.ensure_connected()
        return self._quote(name)

    async def quote_table_name(self, name: TableName) -> str:
        """Quote a table name; a sequence of parts is quoted part-wise and dot-joined."""
        await self.ensure_connected()
        return self._quote_table(name)

    def _quote(self, name: str) -> str:
        char = quote_char_for(self._driver_kind)
        return char + name.replace(char, char + char) + char

    def _quote_table(self, name: TableName) -> str:
        if isinstance(name, str):
            return self._quote(name)
        return ".".join(self._quote(part) for part in name)

    def _predicates(self, mapping: Mapping[str, Any], joiner: str) -> str:
        return joiner.join(f"{self._quote(column)} = ?" for column in mapping)

    # -- CRUD --

    async def insert(self, table: TableName, values: Mapping[str, Any]) -> None:
        """Insert one row built from a column → value mapping.

        An empty mapping inserts a row of column defaults.
        """
        async with self._session() as connection:
            target = self._quote_table(table)
            if not values:
                sql = (
                    f"INSERT INTO {target} () VALUES ();"
                    if self._driver_kind is DriverKind.MYSQL
                    else f"INSERT INTO {target} DEFAULT VALUES;"
                )
                await self._exec(connection, sql, None)
                return
            columns = ", ".join(self._quote(column) for column in values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {target} ({columns}) VALUES ({placeholders});"
            await self._exec(connection, sql, list(values.values()))

    async def update(
        self, table: TableName, values: Mapping[str, Any], where: Mapping[str, Any]
    ) -> int:
        """Update rows matching every ``where`` equality. Returns the affected-row count."""
        if not values:
            raise ArgumentError("update() needs at least one column to set")
        if not where:
            raise ArgumentError("update() needs at least one where predicate")
        async with self._session() as connection:
            sql = (
                f"UPDATE {self._quote_table(table)}"
                f" SET {self._predicates(values, ', ')}"
                f" WHERE {self._predicates(where, ' AND ')};"
            )
            return await self._exec(connection, sql, [*values.values(), *where.values()])

    async def delete(self, table: TableName, where: Mapping[str, Any]) -> int:
        """Delete rows matching every ``where`` equality. Returns the affected-row count."""
        if not where:
            raise ArgumentError("delete() needs at least one where predicate")
        async with self._session() as connection:
            sql = (
                f"DELETE FROM {self._quote_table(table)}"
                f" WHERE {self._predicates(where, ' AND ')};"
            )
            return await self._exec(connection, sql, list(where.values()))

    async def exec(self, statement: str, params: Params | None = None) -> int:
        """Prepare and execute a statement. Returns the driver-reported row count."""
        async with self._session() as connection:
            return await self._exec(connection, statement, params)

    async def select_row(self, query: str, params: Params | None = None) -> Row | None:
        """Fetch the first row of a query, or None when no row matched."""
        return await self._select(query, params, lambda stmt: stmt.fetchone())

    async def select_all(self, query: str, params: Params | None = None) -> list[Row]:
        """Fetch every row of a query; an empty list when nothing matched."""
        return await self._select(query, params, lambda stmt: stmt.fetchall())

    async def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """Id generated by the last insert, exactly as the driver reports it."""
        async with self._session() as connection:
            try:
                return await connection.last_insert_id(sequence_name)
            except Exception as exc:
                raise ExecutionError.from_driver(exc) from exc

    # -- Statement helpers --

    async def _exec(self, connection: Connection, sql: str, params: Params | None) -> int:
        statement = await self._prepare(connection, sql)
        try:
            return await self._execute(statement, params)
        finally:
            await statement.close()

    async def _select(
        self,
        query: str,
        params: Params | None,
        fetch: Callable[[Statement], Awaitable[T]],
    ) -> T:
        async with self._session() as connection:
            statement = await self._prepare(connection, query)
            try:
                await self._execute(statement, params)
                try:
                    return await fetch(statement)
                except Exception as exc:
                    raise ExecutionError.from_driver(exc) from exc
            finally:
                await statement.close()

    async def _prepare(self, connection: Connection, sql: str) -> Statement:
        logger.debug("Preparing: %s", sql)
        try:
            return await connection.prepare(sql)
        except Exception as exc:
            raise StatementError.from_driver(exc) from exc

    async def _execute(self, statement: Statement, params: Params | None) -> int:
        try:
            return await statement.execute(list(params) if params is not None else None)
        except Exception as exc:
            raise ExecutionError.from_driver(exc) from exc
