"""Tests for environment-based configuration."""

import pytest

from sqlkit.config import descriptor_from_env, get_connect_timeout, get_driver_kind, get_log_level
from sqlkit.models.dialect import DriverKind

_VARS = (
    "SQLKIT_DRIVER",
    "SQLKIT_HOST",
    "SQLKIT_PORT",
    "SQLKIT_DBNAME",
    "SQLKIT_CHARSET",
    "SQLKIT_USER",
    "SQLKIT_PASSWORD",
    "SQLKIT_LOG_LEVEL",
    "SQLKIT_CONNECT_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


def test_defaults():
    assert get_log_level() == "WARNING"
    assert get_connect_timeout() == 10.0
    assert get_driver_kind() is DriverKind.SQLITE


def test_log_level_is_upper_cased(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SQLKIT_LOG_LEVEL", "debug")
    assert get_log_level() == "DEBUG"


def test_descriptor_defaults_from_driver(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SQLKIT_DRIVER", "MySQL")
    monkeypatch.setenv("SQLKIT_DBNAME", "app")
    monkeypatch.setenv("SQLKIT_USER", "root")

    d = descriptor_from_env()

    assert d.driver_kind is DriverKind.MYSQL
    assert str(d.to_dsn()) == (
        "mysql:host=127.0.0.1;port=3306;dbname=app;charset=utf8mb4;user=root"
    )


def test_descriptor_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SQLKIT_DRIVER", "postgresql")
    monkeypatch.setenv("SQLKIT_HOST", "localhost")
    monkeypatch.setenv("SQLKIT_PORT", "6543")
    monkeypatch.setenv("SQLKIT_PASSWORD", "pw")

    d = descriptor_from_env()

    assert d.port == 6543
    assert d.password == "pw"
    assert d.effective_hostname() == "127.0.0.1"
