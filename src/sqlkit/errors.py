"""Error taxonomy for driver and argument failures.

Every error carries its ``kind``, the originating message, and the native
driver code when the driver exposes one. Native codes are carried through
as-is; no code-to-kind mapping is applied.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a failure."""

    ARGUMENT = "argument"
    CONNECTION = "connection"
    STATEMENT = "statement"
    EXECUTION = "execution"


def native_error_code(exc: BaseException) -> str | int | None:
    """Extract the driver's native error code from an exception, if any.

    asyncpg exposes ``sqlstate``, sqlite3 exposes ``sqlite_errorcode`` and
    PyMySQL errors carry the numeric code as their first argument.
    """
    for attr in ("sqlstate", "sqlite_errorcode"):
        code = getattr(exc, attr, None)
        if code is not None:
            return code  # type: ignore[no-any-return]
    if exc.args and isinstance(exc.args[0], int) and len(exc.args) > 1:
        return exc.args[0]
    return None


class SqlKitError(Exception):
    """Base class for every error raised by sqlkit."""

    kind: ErrorKind

    def __init__(self, message: str = "", *, code: str | int | None = None) -> None:
        """Initialize with the originating message and optional native code."""
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_driver(cls, exc: BaseException) -> SqlKitError:
        """Translate a native driver exception, keeping its message and code."""
        message = str(exc) or type(exc).__name__
        return cls(message, code=native_error_code(exc))


class ArgumentError(SqlKitError, ValueError):
    """The caller passed an unusable argument (e.g. an empty where-mapping)."""

    kind = ErrorKind.ARGUMENT


class SqlConnectionError(SqlKitError):
    """Opening the underlying connection failed."""

    kind = ErrorKind.CONNECTION


class StatementError(SqlKitError):
    """Preparing a statement failed."""

    kind = ErrorKind.STATEMENT


class ExecutionError(SqlKitError):
    """Executing a prepared statement or fetching its rows failed."""

    kind = ErrorKind.EXECUTION
