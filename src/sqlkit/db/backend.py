"""Driver contract: the capabilities the engine needs from a database driver.

The engine programs against these protocols. Each adapter (SQLite, Postgres,
MySQL) provides a concrete implementation. All SQL handed to an adapter uses
``?`` placeholders; adapters translate to their driver's paramstyle.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from sqlkit.models.attributes import ConnectionAttributes
from sqlkit.models.dialect import DriverKind

Row = dict[str, Any] | tuple[Any, ...]
"""A fetched row: an ordered mapping or a tuple, per the fetch-shape attribute."""

Params = Sequence[Any]


@runtime_checkable
class Statement(Protocol):
    """A prepared statement bound to one connection."""

    async def execute(self, params: Params | None = None) -> int:
        """Execute with positional bound values; return the affected-row count."""
        ...

    async def fetchone(self) -> Row | None:
        """Fetch the next row, or None if exhausted."""
        ...

    async def fetchall(self) -> list[Row]:
        """Fetch all remaining rows."""
        ...

    async def close(self) -> None:
        """Release driver resources held by the statement."""
        ...


@runtime_checkable
class Connection(Protocol):
    """An open connection to one database."""

    @property
    def driver_kind(self) -> DriverKind:
        """The backend this connection talks to."""
        ...

    def get_attributes(self) -> ConnectionAttributes:
        """Return the attributes currently in effect."""
        ...

    def set_attributes(self, attributes: ConnectionAttributes) -> None:
        """Replace the attributes in effect."""
        ...

    async def prepare(self, sql: str) -> Statement:
        """Prepare a statement for execution."""
        ...

    async def last_insert_id(self, sequence_name: str | None = None) -> Any:
        """Return the id generated by the last insert, as the driver reports it."""
        ...

    async def close(self) -> None:
        """Close the connection."""
        ...


Opener = Callable[[str, str | None, str | None], Awaitable[Connection]]
"""``open(connection_string, username, password) -> Connection``."""
