"""Tests for row shaping and warn-mode error reporting."""

import logging

from sqlkit.db.rows import fold_column, report_driver_error, shape_row
from sqlkit.models.attributes import ColumnCase, ConnectionAttributes, ErrorMode, FetchShape


def test_mapping_preserves_column_order():
    row = shape_row(["b", "a"], (2, 1), ConnectionAttributes())
    assert row == {"b": 2, "a": 1}
    assert list(row) == ["b", "a"]


def test_tuple_shape():
    attrs = ConnectionAttributes(fetch_shape=FetchShape.TUPLE)
    assert shape_row(["a", "b"], [1, None], attrs) == (1, None)


def test_stringify_keeps_nulls():
    attrs = ConnectionAttributes(stringify_fetches=True)
    assert shape_row(["n", "x"], (5, None), attrs) == {"n": "5", "x": None}


def test_column_case():
    assert fold_column("UserId", ColumnCase.NATURAL) == "UserId"
    assert fold_column("UserId", ColumnCase.LOWER) == "userid"
    assert fold_column("UserId", ColumnCase.UPPER) == "USERID"
    attrs = ConnectionAttributes(case=ColumnCase.LOWER)
    assert shape_row(["ID"], (1,), attrs) == {"id": 1}


def test_warn_mode_logs(caplog):
    attrs = ConnectionAttributes(error_mode=ErrorMode.WARN)
    with caplog.at_level(logging.WARNING, logger="sqlkit.db.rows"):
        report_driver_error(attrs, RuntimeError("boom"), "SELECT 1")
    assert "boom" in caplog.text
    assert "SELECT 1" in caplog.text


def test_strict_mode_is_silent(caplog):
    with caplog.at_level(logging.WARNING, logger="sqlkit.db.rows"):
        report_driver_error(ConnectionAttributes(), RuntimeError("boom"))
    assert caplog.records == []


def test_driver_defaults():
    defaults = ConnectionAttributes.driver_defaults()
    assert defaults.fetch_shape is FetchShape.TUPLE
    assert defaults.emulate_prepares is False
    assert ConnectionAttributes.driver_defaults(emulate_prepares=True).emulate_prepares is True
    assert defaults != ConnectionAttributes()
