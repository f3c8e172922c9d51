"""Driver kinds and the per-dialect lookup table."""

from dataclasses import dataclass
from enum import StrEnum


class DriverKind(StrEnum):
    """SQL backend identifier used as the connection string prefix."""

    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


@dataclass(frozen=True, slots=True)
class Dialect:
    """Per-backend quoting and connection defaults."""

    quote_char: str
    default_port: int | None
    default_charset: str | None
    charset_key: str


DIALECTS: dict[DriverKind, Dialect] = {
    DriverKind.MYSQL: Dialect(
        quote_char="`", default_port=3306, default_charset="utf8mb4", charset_key="charset"
    ),
    DriverKind.POSTGRESQL: Dialect(
        quote_char='"', default_port=5432, default_charset="UTF8", charset_key="client_encoding"
    ),
    DriverKind.SQLITE: Dialect(
        quote_char='"', default_port=None, default_charset=None, charset_key="charset"
    ),
}


def lookup_dialect(driver_kind: DriverKind | str | None) -> Dialect | None:
    """Return the dialect for a driver kind, or None if it is not recognized."""
    try:
        return DIALECTS[DriverKind(driver_kind)]
    except ValueError:
        return None


def suggest_port(driver_kind: DriverKind | str | None) -> int | None:
    """Default port for the driver kind (None for sqlite and unknown kinds)."""
    dialect = lookup_dialect(driver_kind)
    return dialect.default_port if dialect else None


def suggest_charset(driver_kind: DriverKind | str | None) -> str | None:
    """Default client charset for the driver kind (None for sqlite and unknown kinds)."""
    dialect = lookup_dialect(driver_kind)
    return dialect.default_charset if dialect else None


def quote_char_for(driver_kind: DriverKind | str | None) -> str:
    """Identifier quote character: backtick for MySQL, double quote otherwise."""
    dialect = lookup_dialect(driver_kind)
    return dialect.quote_char if dialect else '"'
