"""Unit tests for core.config — settings from env and .env."""

from pathlib import Path

import pytest

from easydb.core.config import Settings, load_settings

_DB_KEYS = (
    "DB_HOST",
    "DB_PORT",
    "DB_NAME",
    "DB_USER",
    "DB_PASS",
    "DB_CHARSET",
    "DB_DEBUG",
    "DB_CONNECT_TIMEOUT",
    "DB_STATEMENT_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _DB_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_env_file(tmp_path: Path) -> None:
    s = load_settings(tmp_path / "missing.env")
    assert s.DB_HOST is None
    assert s.DB_PORT == 3306
    assert s.DB_CHARSET == "utf8mb4"
    assert s.DB_DEBUG is False
    assert s.DB_STATEMENT_TIMEOUT is None


def test_reads_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local database\n"
        "DB_HOST=db.local\n"
        "DB_NAME=shop\n"
        "DB_USER=shop\n"
        "DB_PASS=pa=ss\n"
        "DB_DEBUG=true\n"
    )
    s = load_settings(env_file)
    assert s.DB_HOST == "db.local"
    assert s.DB_NAME == "shop"
    assert s.DB_PASS == "pa=ss"
    assert s.DB_DEBUG is True


def test_environment_overrides_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DB_HOST=from-file\n")
    monkeypatch.setenv("DB_HOST", "from-env")
    monkeypatch.setenv("DB_PORT", "3310")
    s = load_settings(env_file)
    assert s.DB_HOST == "from-env"
    assert s.DB_PORT == 3310


def test_empty_values_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DB_PORT", "")
    assert Settings(_env_file=None).DB_PORT == 3306
