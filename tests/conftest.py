"""Shared test fixtures."""

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from sqlkit.db.rows import shape_row
from sqlkit.engine import Engine
from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.descriptor import ConnectionDescriptor
from sqlkit.models.dialect import DriverKind


class FakeStatement:
    """In-process statement that records what the engine sends it."""

    def __init__(self, conn: "FakeConnection", sql: str):
        self.conn = conn
        self.sql = sql
        self.params: list[Any] | None = None
        self.closed = False
        self._rows = list(conn.rows)
        self._index = 0

    async def execute(self, params=None) -> int:
        self.params = params
        self.conn.in_flight += 1
        self.conn.max_in_flight = max(self.conn.max_in_flight, self.conn.in_flight)
        try:
            # Yield so concurrent engine calls get a chance to interleave
            await asyncio.sleep(0)
            self.conn.executed.append((self.sql, params))
            self.conn.attributes_during_execute.append(self.conn.get_attributes())
            if self.conn.execute_error is not None:
                raise self.conn.execute_error
            return self.conn.rowcount
        finally:
            self.conn.in_flight -= 1

    async def fetchone(self):
        if self._index >= len(self._rows):
            return None
        row = self._rows[self._index]
        self._index += 1
        return shape_row(list(row), row.values(), self.conn.get_attributes())

    async def fetchall(self):
        remaining = self._rows[self._index :]
        self._index = len(self._rows)
        attrs = self.conn.get_attributes()
        return [shape_row(list(row), row.values(), attrs) for row in remaining]

    async def close(self) -> None:
        self.closed = True


class FakeConnection:
    """Controllable stand-in for a driver connection."""

    def __init__(self, driver_kind: DriverKind = DriverKind.MYSQL):
        self._driver_kind = driver_kind
        self._attributes = ConnectionAttributes.driver_defaults()
        self.rows: list[dict[str, Any]] = []
        self.rowcount = 1
        self.prepare_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.executed: list[tuple[str, Any]] = []
        self.statements: list[FakeStatement] = []
        self.attributes_during_execute: list[ConnectionAttributes] = []
        self.insert_id: Any = 42
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    @property
    def driver_kind(self) -> DriverKind:
        return self._driver_kind

    def get_attributes(self) -> ConnectionAttributes:
        return self._attributes

    def set_attributes(self, attributes: ConnectionAttributes) -> None:
        self._attributes = attributes

    async def prepare(self, sql: str) -> FakeStatement:
        if self.prepare_error is not None:
            raise self.prepare_error
        stmt = FakeStatement(self, sql)
        self.statements.append(stmt)
        return stmt

    async def last_insert_id(self, sequence_name=None):
        return self.insert_id if sequence_name is None else f"{sequence_name}:{self.insert_id}"

    async def close(self) -> None:
        self.closed = True


class FakeOpener:
    """Opener that hands out a prepared FakeConnection and records calls."""

    def __init__(self, conn: FakeConnection | None = None, error: Exception | None = None):
        self.conn = conn or FakeConnection()
        self.error = error
        self.calls: list[tuple[str, str | None, str | None]] = []

    async def __call__(self, connection_string, username, password):
        self.calls.append((connection_string, username, password))
        if self.error is not None:
            raise self.error
        return self.conn


@pytest.fixture
def mysql_conn():
    """Fake MySQL connection."""
    return FakeConnection(DriverKind.MYSQL)


@pytest.fixture
def pg_conn():
    """Fake PostgreSQL connection."""
    return FakeConnection(DriverKind.POSTGRESQL)


@pytest.fixture
def mysql_engine(mysql_conn):
    """Engine over the fake MySQL connection."""
    return Engine.from_connection(mysql_conn)


@pytest.fixture
def pg_engine(pg_conn):
    """Engine over the fake PostgreSQL connection."""
    return Engine.from_connection(pg_conn)


@pytest_asyncio.fixture
async def sqlite_engine():
    """Engine over a real in-memory SQLite database with a users table."""
    descriptor = ConnectionDescriptor(driver_kind=DriverKind.SQLITE, db_name=":memory:")
    engine = Engine.from_descriptor(descriptor)
    await engine.exec(
        'CREATE TABLE "users" (id INTEGER PRIMARY KEY, name TEXT NOT NULL, score INTEGER)'
    )
    yield engine
    await engine.close()
