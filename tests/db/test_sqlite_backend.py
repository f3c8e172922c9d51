"""Tests for the aiosqlite adapter."""

import pytest
import pytest_asyncio

from sqlkit.db.sqlite_backend import MEMORY_DATABASE, SQLiteConnection, database_path
from sqlkit.models.attributes import ConnectionAttributes, FetchShape
from sqlkit.models.dialect import DriverKind


@pytest_asyncio.fixture
async def conn():
    """Adapter connection over an in-memory database with one table."""
    c = await SQLiteConnection.open({})
    stmt = await c.prepare("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
    await stmt.execute()
    await stmt.close()
    yield c
    await c.close()


def test_database_path():
    assert database_path({"dbname": "/tmp/a.db", "path": "/tmp/b.db"}) == "/tmp/a.db"
    assert database_path({"path": "/tmp/b.db"}) == "/tmp/b.db"
    assert database_path({"host": "127.0.0.1"}) == MEMORY_DATABASE


@pytest.mark.asyncio
async def test_driver_kind(conn):
    assert conn.driver_kind is DriverKind.SQLITE


@pytest.mark.asyncio
async def test_starts_with_tuple_rows(conn):
    stmt = await conn.prepare("SELECT 1 AS one")
    await stmt.execute()
    assert await stmt.fetchone() == (1,)
    assert conn.get_attributes().fetch_shape is FetchShape.TUPLE


@pytest.mark.asyncio
async def test_mapping_rows_after_set_attributes(conn):
    conn.set_attributes(ConnectionAttributes())
    insert = await conn.prepare("INSERT INTO items (label) VALUES (?)")
    assert await insert.execute(["a"]) == 1
    await insert.close()

    stmt = await conn.prepare("SELECT id, label FROM items")
    await stmt.execute()
    assert await stmt.fetchall() == [{"id": 1, "label": "a"}]
    assert await stmt.fetchone() is None


@pytest.mark.asyncio
async def test_last_insert_id(conn):
    for label in ("a", "b", "c"):
        stmt = await conn.prepare("INSERT INTO items (label) VALUES (?)")
        await stmt.execute([label])
        await stmt.close()
    assert await conn.last_insert_id() == 3


@pytest.mark.asyncio
async def test_fetch_before_execute(conn):
    stmt = await conn.prepare("SELECT 1")
    assert await stmt.fetchone() is None
    assert await stmt.fetchall() == []


@pytest.mark.asyncio
async def test_bad_sql_raises_on_execute(conn):
    stmt = await conn.prepare("SELECT * FROM nope")
    with pytest.raises(Exception, match="nope"):
        await stmt.execute()
