"""Configuration loading for the grant form service.

This module loads application configuration with the following rules:
- Primary source: `grantforms_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
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
ROOT_CONFIG = Path("grantforms_config.json")
logger = logging.getLogger(__name__)

ENVIRONMENTS = ("development", "test", "staging", "production")


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("config_override_unreadable path=%s error=%s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _truthy(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    url: str

    @field_validator("url")
    @classmethod
    def url_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.url must be a non-empty string")
        return v


class BankCheckConfig(BaseModel):
    enabled: bool = Field(default=False)
    url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_seconds: float = Field(default=5.0, gt=0)

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("bank_check.url must be an http(s) URL")
        return v


class UploadConfig(BaseModel):
    max_bytes: int = Field(default=12 * 1024 * 1024, gt=0)
    # None keeps uploads in memory
    root: Optional[str] = None


class FormsConfig(BaseModel):
    # Empty means every registered form is served
    enabled: tuple[str, ...] = ()
    preflight_timeout_seconds: float = Field(default=10.0, gt=0)


class AppConfig(BaseModel):
    environment: str = "development"
    database: DatabaseConfig
    bank_check: BankCheckConfig = Field(default_factory=BankCheckConfig)
    uploads: UploadConfig = Field(default_factory=UploadConfig)
    forms: FormsConfig = Field(default_factory=FormsConfig)

    @field_validator("environment")
    @classmethod
    def environment_must_be_known(cls, v: str) -> str:
        if v not in ENVIRONMENTS:
            raise ValueError(f"environment must be one of {list(ENVIRONMENTS)}")
        return v


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("config_json_unreadable path=%s error=%s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) grantforms_config.json at project root (primary base)
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    environment = (_env("APP_ENVIRONMENT") or _read_config_file("app.environment") or _base("environment", "development")).strip()

    # Database
    db_url = _env("DATABASE_URL") or _read_config_file("database.url") or _base("database.url") or "sqlite+pysqlite:///:memory:"

    # Bank account verification
    bank_enabled = _env("BANK_CHECK_ENABLED") or _read_config_file("bank_check.enabled") or _base("bank_check.enabled", "false")
    bank_url = _env("BANK_CHECK_URL") or _read_config_file("bank_check.url") or _base("bank_check.url")
    bank_key = _env("BANK_CHECK_API_KEY") or _read_config_file("bank_check.api_key") or _base("bank_check.api_key")
    bank_timeout = _env("BANK_CHECK_TIMEOUT_SECONDS") or _read_config_file("bank_check.timeout_seconds") or _base("bank_check.timeout_seconds", "5")

    # Uploads
    upload_max = _env("UPLOAD_MAX_BYTES") or _read_config_file("uploads.max_bytes") or _base("uploads.max_bytes", str(12 * 1024 * 1024))
    upload_root = _env("UPLOAD_ROOT") or _read_config_file("uploads.root") or _base("uploads.root")

    # Forms
    forms_enabled = _env("FORMS_ENABLED") or _read_config_file("forms.enabled") or _base("forms.enabled", "")
    preflight_timeout = _env("PREFLIGHT_TIMEOUT_SECONDS") or _read_config_file("forms.preflight_timeout_seconds") or _base("forms.preflight_timeout_seconds", "10")

    try:
        cfg = AppConfig(
            environment=environment,
            database=DatabaseConfig(url=db_url),
            bank_check=BankCheckConfig(
                enabled=_truthy(bank_enabled),
                url=bank_url or None,
                api_key=bank_key or None,
                timeout_seconds=float(str(bank_timeout).strip()),
            ),
            uploads=UploadConfig(max_bytes=int(str(upload_max).strip()), root=upload_root or None),
            forms=FormsConfig(
                enabled=tuple(s.strip() for s in str(forms_enabled).split(",") if s.strip()),
                preflight_timeout_seconds=float(str(preflight_timeout).strip()),
            ),
        )
        return cfg
    except PydanticValidationError as e:
        logger.error("config_invalid error=%s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "BankCheckConfig",
    "UploadConfig",
    "FormsConfig",
    "load_config",
]
