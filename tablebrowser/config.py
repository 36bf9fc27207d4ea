"""Application configuration — env vars, YAML files, defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


def _repo_root() -> Path:
    """Find the repository root (directory containing pyproject.toml)."""
    current = Path(__file__).resolve().parent.parent
    if (current / "pyproject.toml").exists():
        return current
    return Path.cwd()


REPO_ROOT = _repo_root()


def _env_overrides(
    settings_cls: type[BaseSettings], exclude: set[str] | None = None
) -> dict[str, Any]:
    """Fields of ``settings_cls`` that the environment sets explicitly."""
    return settings_cls().model_dump(exclude_unset=True, exclude=exclude)


class DatabaseConfig(BaseSettings):
    # DATABASE_URL is the conventional name; TB_DB_URL wins if both are set
    url: str = Field(default="", validation_alias=AliasChoices("TB_DB_URL", "DATABASE_URL"))
    schema_name: str | None = None
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: float = 30.0
    ssl_mode: str = ""
    # table name -> identifier column used by the cell editor
    key_columns: dict[str, str] = Field(default_factory=dict)

    model_config = {"env_prefix": "TB_DB_", "populate_by_name": True}


class ServerConfig(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"

    model_config = {"env_prefix": "TB_SERVER_"}


class AppConfig(BaseSettings):
    """Top-level application configuration."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Environment & Sentry
    environment: str = "production"
    sentry_dsn: str = ""

    # Paths
    static_dir: Path = REPO_ROOT / "static"

    model_config = {"env_prefix": "TB_"}

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> AppConfig:
        """Load config from YAML file, with env var overrides.

        Values passed to a settings class outrank its env vars, so the
        environment is merged over the file explicitly, section by section.
        """
        if path is None:
            path = REPO_ROOT / "config" / "app.yml"

        values: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                values = yaml.safe_load(f) or {}

        for key, section_cls in (("database", DatabaseConfig), ("server", ServerConfig)):
            section = values.get(key) or {}
            values[key] = section_cls(**{**section, **_env_overrides(section_cls)})
        values.update(_env_overrides(cls, exclude={"database", "server"}))

        return cls(**values)
