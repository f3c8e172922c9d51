"""Driver-agnostic SQL execution layer."""

from sqlkit.engine import Engine
from sqlkit.errors import (
    ArgumentError,
    ErrorKind,
    ExecutionError,
    SqlConnectionError,
    SqlKitError,
    StatementError,
)
from sqlkit.models.attributes import ColumnCase, ConnectionAttributes, ErrorMode, FetchShape
from sqlkit.models.descriptor import ConnectionDescriptor
from sqlkit.models.dialect import DriverKind, suggest_charset, suggest_port
from sqlkit.models.dsn import DSN

__all__ = [
    "ArgumentError",
    "ColumnCase",
    "ConnectionAttributes",
    "ConnectionDescriptor",
    "DSN",
    "DriverKind",
    "Engine",
    "ErrorKind",
    "ErrorMode",
    "ExecutionError",
    "FetchShape",
    "SqlConnectionError",
    "SqlKitError",
    "StatementError",
    "suggest_charset",
    "suggest_port",
]
