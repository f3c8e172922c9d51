"""Connection attributes configured around every engine operation."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ErrorMode(StrEnum):
    """How an adapter reports driver failures."""

    STRICT = "strict"  # raise only
    WARN = "warn"  # log at WARNING, then raise


class FetchShape(StrEnum):
    """Shape of fetched rows."""

    MAPPING = "mapping"
    TUPLE = "tuple"


class ColumnCase(StrEnum):
    """Case folding applied to column names in fetched rows."""

    NATURAL = "natural"
    LOWER = "lower"
    UPPER = "upper"


class ConnectionAttributes(BaseModel):
    """Snapshot of the attributes in effect on a connection.

    The default instance is what the engine applies for each operation.
    """

    model_config = ConfigDict(frozen=True)

    error_mode: ErrorMode = ErrorMode.STRICT
    fetch_shape: FetchShape = FetchShape.MAPPING
    emulate_prepares: bool = False
    case: ColumnCase = ColumnCase.NATURAL
    stringify_fetches: bool = False

    @classmethod
    def driver_defaults(cls, *, emulate_prepares: bool = False) -> "ConnectionAttributes":
        """State a freshly opened adapter connection starts in."""
        return cls(fetch_shape=FetchShape.TUPLE, emulate_prepares=emulate_prepares)
