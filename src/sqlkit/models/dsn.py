"""Normalized connection string plus credentials."""

from pydantic import BaseModel, ConfigDict, Field


class DSN(BaseModel):
    """Immutable connection string and credentials used to open a connection.

    ``str(dsn)`` is the connection string itself, in the form
    ``<driver>:key1=val1;key2=val2``.
    """

    model_config = ConfigDict(frozen=True)

    connection_string: str
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    def __str__(self) -> str:
        return self.connection_string

    @property
    def driver_name(self) -> str:
        """The prefix before the first ``:``."""
        return self.connection_string.partition(":")[0]

    def redacted(self) -> str:
        """Connection string with any password component masked, for logging."""
        driver, params = parse_connection_string(self.connection_string)
        if "password" not in params:
            return self.connection_string
        parts = [
            f"{key}=***" if key == "password" else f"{key}={value}"
            for key, value in params.items()
        ]
        return f"{driver}:" + ";".join(parts)


def parse_connection_string(text: str) -> tuple[str, dict[str, str]]:
    """Split a connection string into its driver prefix and components.

    Components without ``=`` are kept under the ``path`` key, so
    ``sqlite:/tmp/app.db`` and ``sqlite::memory:`` parse to a path.
    """
    driver, _, rest = text.partition(":")
    params: dict[str, str] = {}
    if not rest:
        return driver, params
    if "=" not in rest:
        params["path"] = rest
        return driver, params
    for component in rest.split(";"):
        if not component:
            continue
        key, sep, value = component.partition("=")
        if sep:
            params[key.strip()] = value
        else:
            params["path"] = component
    return driver, params
