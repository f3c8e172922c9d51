"""Open driver connections from connection strings."""

import logging

from sqlkit.config import get_connect_timeout
from sqlkit.db.backend import Connection
from sqlkit.errors import SqlConnectionError
from sqlkit.models.dialect import DriverKind
from sqlkit.models.dsn import DSN, parse_connection_string

logger = logging.getLogger(__name__)


async def open_connection(
    connection_string: str,
    username: str | None = None,
    password: str | None = None,
    *,
    timeout: float | None = None,
) -> Connection:
    """Open a connection for the driver named by the connection-string prefix.

    Driver modules are imported on demand, so only the library for the
    backend in use has to be importable.
    """
    driver_name, params = parse_connection_string(connection_string)
    try:
        kind = DriverKind(driver_name)
    except ValueError:
        raise SqlConnectionError(f"Unsupported driver: {driver_name!r}") from None

    if timeout is None:
        timeout = get_connect_timeout()

    redacted = DSN(connection_string=connection_string).redacted()
    logger.info("Opening %s connection (%s)", kind.value, redacted)

    if kind is DriverKind.SQLITE:
        return await _open_sqlite(params)
    if kind is DriverKind.POSTGRESQL:
        return await _open_postgres(params, username, password, timeout=timeout)
    return await _open_mysql(params, username, password, timeout=timeout)


async def _open_sqlite(params: dict[str, str]) -> Connection:
    """Open an aiosqlite connection."""
    from sqlkit.db.sqlite_backend import SQLiteConnection

    return await SQLiteConnection.open(params)


async def _open_postgres(
    params: dict[str, str], username: str | None, password: str | None, *, timeout: float
) -> Connection:
    """Open an asyncpg connection."""
    from sqlkit.db.postgres_backend import PostgresConnection

    return await PostgresConnection.open(params, username, password, timeout=timeout)


async def _open_mysql(
    params: dict[str, str], username: str | None, password: str | None, *, timeout: float
) -> Connection:
    """Open an aiomysql connection."""
    from sqlkit.db.mysql_backend import MySQLConnection

    return await MySQLConnection.open(params, username, password, timeout=timeout)
