"""Row shaping and error reporting shared by the driver adapters."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from sqlkit.models.attributes import ColumnCase, ConnectionAttributes, ErrorMode, FetchShape

logger = logging.getLogger(__name__)


def fold_column(name: str, case: ColumnCase) -> str:
    """Apply the column-case attribute to a column name."""
    if case is ColumnCase.LOWER:
        return name.lower()
    if case is ColumnCase.UPPER:
        return name.upper()
    return name


def shape_row(
    columns: Sequence[str], values: Iterable[Any], attributes: ConnectionAttributes
) -> dict[str, Any] | tuple[Any, ...]:
    """Build a row from column names and raw values per the connection attributes."""
    if attributes.stringify_fetches:
        values = [None if v is None else str(v) for v in values]
    if attributes.fetch_shape is FetchShape.TUPLE:
        return tuple(values)
    return {
        fold_column(column, attributes.case): value
        for column, value in zip(columns, values, strict=True)
    }


def report_driver_error(
    attributes: ConnectionAttributes, exc: BaseException, sql: str | None = None
) -> None:
    """Log a driver failure when the connection is in warn error mode."""
    if attributes.error_mode is ErrorMode.WARN:
        logger.warning("Driver error%s: %s", f" for {sql!r}" if sql else "", exc)
