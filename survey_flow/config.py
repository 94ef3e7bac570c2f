"""Configuration utilities for the survey flow service.

This module loads application configuration with the following rules:
- Primary source: `survey_config.json` at the project root.
- Overrides: optional text files under `config/`, then environment variables.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_SURVEY_CONFIG = Path("survey_config.json")
DEFAULT_DSN = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        # Unreadable override is ignored; lower-precedence source applies
        logger.warning("config_override_unreadable path=%s error=%s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _as_bool(text: object) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    dsn: str
    echo: bool = Field(default=False)

    @field_validator("dsn")
    @classmethod
    def dsn_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.dsn must be a non-empty string")
        return v


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"logging.level must be one of {sorted(_LOG_LEVELS)}")
        return level


class CompletionConfig(BaseModel):
    # Decimal places kept in completion percentages
    precision: int = Field(default=2, ge=0, le=6)


class ClientConfig(BaseModel):
    mount_static: bool = Field(default=True)


class AppConfig(BaseModel):
    database: DatabaseConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    completion: CompletionConfig = Field(default_factory=CompletionConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            data = json.loads(path.read_text(encoding="utf-8"))
            return data if isinstance(data, dict) else {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("config_json_unreadable path=%s error=%s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) survey_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_SURVEY_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    dsn = (
        _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.dsn")
        or DEFAULT_DSN
    )
    echo_text = _env("DATABASE_ECHO") or _read_config_file("database.echo") or _base("database.echo", "false")
    level = _env("LOG_LEVEL") or _read_config_file("logging.level") or _base("logging.level", "INFO")
    precision_text = (
        _env("COMPLETION_PRECISION")
        or _read_config_file("completion.precision")
        or _base("completion.precision", "2")
    )
    mount_text = (
        _env("CLIENT_MOUNT_STATIC")
        or _read_config_file("client.mount_static")
        or _base("client.mount_static", "true")
    )

    try:
        cfg = AppConfig(
            database=DatabaseConfig(dsn=dsn, echo=_as_bool(echo_text)),
            logging=LoggingConfig(level=level),
            completion=CompletionConfig(precision=str(precision_text).strip()),
            client=ClientConfig(mount_static=_as_bool(mount_text)),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("config_invalid error=%s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "CompletionConfig",
    "ClientConfig",
    "load_config",
]
