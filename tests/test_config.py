"""Unit tests for configuration loading."""

import pytest

from config import load_config
from core.exceptions import ConfigurationError

ENV_VARS = (
    "ENVIRONMENT",
    "DEBUG",
    "DATABASE_PATH",
    "DB_POOL_SIZE",
    "DB_BUSY_TIMEOUT",
    "LOG_FOLDER",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def no_env_file(tmp_path):
    return str(tmp_path / "missing.env")


def test_defaults(no_env_file):
    config = load_config(no_env_file)

    assert config.environment == "development"
    assert config.debug is False
    assert config.database_path == "data/passes.sqlite"
    assert config.db_pool_size == 4
    assert config.db_busy_timeout == 5000
    assert config.log_level == "INFO"
    assert config.log_file.endswith("passes.log")


def test_environment_overrides(monkeypatch, no_env_file):
    monkeypatch.setenv("DATABASE_PATH", "/tmp/other.sqlite")
    monkeypatch.setenv("DB_POOL_SIZE", "2")
    monkeypatch.setenv("DEBUG", "yes")

    config = load_config(no_env_file)

    assert config.database_path == "/tmp/other.sqlite"
    assert config.db_pool_size == 2
    assert config.debug is True
    assert config.log_level == "DEBUG"


def test_invalid_integer_falls_back(monkeypatch, no_env_file):
    monkeypatch.setenv("DB_BUSY_TIMEOUT", "soon")
    assert load_config(no_env_file).db_busy_timeout == 5000


def test_non_positive_pool_size_rejected(monkeypatch, no_env_file):
    monkeypatch.setenv("DB_POOL_SIZE", "0")
    with pytest.raises(ConfigurationError):
        load_config(no_env_file)


def test_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DATABASE_PATH=from_file.sqlite\nLOG_LEVEL=WARNING\n", encoding="utf-8")

    config = load_config(str(env_file))

    assert config.database_path == "from_file.sqlite"
    assert config.log_level == "WARNING"
