"""Structured connection parameters that reduce to a DSN."""

from typing import Any

from pydantic import BaseModel, Field, model_validator

from sqlkit.models.dialect import DriverKind, lookup_dialect, suggest_charset, suggest_port
from sqlkit.models.dsn import DSN

HOST_LOOPBACK_NAME = "localhost"
HOST_LOOPBACK_IP = "127.0.0.1"
HOST_DEFAULT = HOST_LOOPBACK_IP


class ConnectionDescriptor(BaseModel):
    """Mutable set of connection parameters for one backend.

    ``port`` and ``charset`` default to the dialect's suggestion unless passed
    explicitly (``port=None`` keeps the port unset). Every field except
    ``driver_kind`` may be reassigned before calling ``to_dsn()``.
    """

    driver_kind: DriverKind = Field(frozen=True)
    hostname: str | None = HOST_DEFAULT
    port: int | None = None
    db_name: str | None = None
    charset: str | None = None
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _apply_dialect_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            kind = data.get("driver_kind")
            data.setdefault("port", suggest_port(kind))
            data.setdefault("charset", suggest_charset(kind))
        return data

    def effective_hostname(self) -> str | None:
        """Hostname as emitted into the DSN.

        ``localhost`` bound to a non-default port is rewritten to the loopback
        IP, since some client libraries resolve the name to a local socket and
        silently ignore the port.
        """
        if self.hostname is None:
            return None
        if (
            self.hostname == HOST_LOOPBACK_NAME
            and self.port is not None
            and self.port != suggest_port(self.driver_kind)
        ):
            return HOST_LOOPBACK_IP
        return self.hostname

    def to_dsn(self) -> DSN:
        """Build a fresh DSN from the current field values."""
        components: list[str] = []

        hostname = self.effective_hostname()
        if hostname is not None:
            components.append(f"host={hostname}")
        if self.port is not None:
            components.append(f"port={self.port}")
        if self.db_name is not None:
            components.append(f"dbname={self.db_name}")
        if self.charset is not None:
            dialect = lookup_dialect(self.driver_kind)
            charset_key = dialect.charset_key if dialect else "charset"
            components.append(f"{charset_key}={self.charset}")
        if self.username is not None:
            components.append(f"user={self.username}")
        if self.password is not None:
            components.append(f"password={self.password}")

        return DSN(
            connection_string=f"{self.driver_kind.value}:" + ";".join(components),
            username=self.username,
            password=self.password,
        )
