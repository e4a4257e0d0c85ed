"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app and the operational
scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path

import os

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationMissingError(RuntimeError):
    """Raised when required settings are absent or hold unusable values."""

    def __init__(self, missing: list[str], invalid: list[str] | None = None) -> None:
        self.missing = missing
        self.invalid = invalid or []
        problems = []
        if self.missing:
            problems.append(f"Missing env vars: {', '.join(self.missing)}")
        if self.invalid:
            problems.append(f"Invalid env vars: {'; '.join(self.invalid)}")
        super().__init__(". ".join(problems) or "Invalid settings")


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        os.environ[key] = value.strip().strip('"').strip("'")


_load_env_file()


class NotionSettings(BaseSettings):
    """Credentials and tuning for the Notion database backing the dashboard."""

    model_config = SettingsConfigDict(extra="ignore")

    api_key: str = Field(..., min_length=1, validation_alias="NOTION_API_KEY")
    database_id: str = Field(..., min_length=1, validation_alias="NOTION_DATABASE_ID")
    api_version: str = Field("2022-06-28", validation_alias="NOTION_VERSION")
    base_url: str = Field(
        "https://api.notion.com/v1", validation_alias="NOTION_BASE_URL"
    )
    page_size: int = Field(
        100,
        ge=1,
        le=100,
        validation_alias="NOTION_PAGE_SIZE",
        description="Rows requested per database query page (Notion caps this at 100).",
    )
    timeout_seconds: float = Field(10.0, gt=0, validation_alias="NOTION_TIMEOUT_SECONDS")


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    notion: NotionSettings = Field(default_factory=NotionSettings)


def _classify_errors(exc: ValidationError) -> tuple[list[str], list[str]]:
    missing: set[str] = set()
    invalid: set[str] = set()
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc") or ("unknown",))
        if error.get("type") == "missing":
            missing.add(location)
        else:
            invalid.add(f"{location}: {error.get('msg')}")
    return sorted(missing), sorted(invalid)


def load_settings() -> AppSettings:
    """Build settings from the environment, failing loudly on missing values."""
    try:
        notion = NotionSettings()  # type: ignore[call-arg]
        return AppSettings(notion=notion)  # type: ignore[call-arg]
    except ValidationError as exc:
        missing, invalid = _classify_errors(exc)
        raise ConfigurationMissingError(missing, invalid) from exc


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return load_settings()


__all__ = [
    "AppSettings",
    "ConfigurationMissingError",
    "NotionSettings",
    "get_settings",
    "load_settings",
]
