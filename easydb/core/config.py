"""
Connection settings for the MySQL backend.

Values come from the process environment and, when present, a ``.env`` file.
A missing ``.env`` is fine: every field has a default and incomplete
connection settings are reported by ``core.connect`` when the connection is
opened, not here.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DB_HOST: str | None = None
    DB_PORT: int = 3306
    DB_NAME: str | None = None
    DB_USER: str | None = None
    DB_PASS: str | None = None
    DB_CHARSET: str = "utf8mb4"
    DB_DEBUG: bool = False

    # seconds
    DB_CONNECT_TIMEOUT: int = 10
    # milliseconds; None or 0 disables the per-statement cap
    DB_STATEMENT_TIMEOUT: int | None = None


def load_settings(env_file: str | Path | None = ".env") -> Settings:
    """Read settings from the environment plus *env_file* (skipped if absent)."""
    return Settings(_env_file=env_file)
