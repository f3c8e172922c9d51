"""Environment-variable-based configuration."""

import logging
import os
import sys

from sqlkit.models.descriptor import ConnectionDescriptor
from sqlkit.models.dialect import DriverKind


def get_log_level() -> str:
    """Return the logging level from SQLKIT_LOG_LEVEL."""
    return os.environ.get("SQLKIT_LOG_LEVEL", "WARNING").upper()


def get_connect_timeout() -> float:
    """Return the connect timeout in seconds from SQLKIT_CONNECT_TIMEOUT."""
    return float(os.environ.get("SQLKIT_CONNECT_TIMEOUT", "10.0"))


def get_driver_kind() -> DriverKind:
    """Return the driver kind from SQLKIT_DRIVER."""
    return DriverKind(os.environ.get("SQLKIT_DRIVER", DriverKind.SQLITE.value).lower())


def descriptor_from_env() -> ConnectionDescriptor:
    """Build a connection descriptor from SQLKIT_* variables.

    Unset variables keep the descriptor's dialect defaults.
    """
    overrides: dict[str, object] = {}
    for field, var in (
        ("hostname", "SQLKIT_HOST"),
        ("db_name", "SQLKIT_DBNAME"),
        ("charset", "SQLKIT_CHARSET"),
        ("username", "SQLKIT_USER"),
        ("password", "SQLKIT_PASSWORD"),
    ):
        value = os.environ.get(var)
        if value is not None:
            overrides[field] = value
    port = os.environ.get("SQLKIT_PORT")
    if port:
        overrides["port"] = int(port)
    return ConnectionDescriptor(driver_kind=get_driver_kind(), **overrides)


def configure_logging() -> None:
    """Send sqlkit logs to stderr at SQLKIT_LOG_LEVEL."""
    logging.basicConfig(
        level=getattr(logging, get_log_level()),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
