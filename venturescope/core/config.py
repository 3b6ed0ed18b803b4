"""Configuration module for the VentureScope application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from venturescope.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    APP_URL: str
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    JWT_SECRET: str
    SESSION_TTL_DAYS: int
    STRIPE_SECRET_KEY: str | None
    STRIPE_WEBHOOK_SECRET: str | None
    STRIPE_ANGEL_PRICE_ID: str | None
    STRIPE_PRO_PRICE_ID: str | None
    STRIPE_ENTERPRISE_PRICE_ID: str | None
    STORAGE_URL: str
    STORAGE_SERVICE_KEY: str | None
    STORAGE_BUCKET: str
    SIGNED_URL_TTL_SECONDS: int
    LLM_API_URL: str
    LLM_API_KEY: str | None
    LLM_ASSESSMENT_MODEL: str
    LLM_CLASSIFICATION_MODEL: str
    LLM_TIMEOUT_SECONDS: int
    LLM_MAX_RETRIES: int
    INTAKE_RATE_LIMIT_MAX: int
    INTAKE_RATE_LIMIT_WINDOW_HOURS: int
    REDIS_URL: str
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="VentureScope",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        APP_URL=os.getenv("APP_URL", "http://localhost:3000").rstrip("/"),
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./venturescope.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        SESSION_TTL_DAYS=int(os.getenv("SESSION_TTL_DAYS", "30")),
        STRIPE_SECRET_KEY=_optional("STRIPE_SECRET_KEY"),
        STRIPE_WEBHOOK_SECRET=_optional("STRIPE_WEBHOOK_SECRET"),
        STRIPE_ANGEL_PRICE_ID=_optional("STRIPE_ANGEL_PRICE_ID"),
        STRIPE_PRO_PRICE_ID=_optional("STRIPE_PRO_PRICE_ID"),
        STRIPE_ENTERPRISE_PRICE_ID=_optional("STRIPE_ENTERPRISE_PRICE_ID"),
        STORAGE_URL=os.getenv("STORAGE_URL", "http://localhost:54321").rstrip("/"),
        STORAGE_SERVICE_KEY=_optional("STORAGE_SERVICE_KEY"),
        STORAGE_BUCKET=os.getenv("STORAGE_BUCKET", "documents"),
        SIGNED_URL_TTL_SECONDS=int(os.getenv("SIGNED_URL_TTL_SECONDS", "3600")),
        LLM_API_URL=os.getenv("LLM_API_URL", "https://api.anthropic.com/v1/messages"),
        LLM_API_KEY=_optional("LLM_API_KEY"),
        LLM_ASSESSMENT_MODEL=os.getenv("LLM_ASSESSMENT_MODEL", "claude-sonnet-4-20250514"),
        LLM_CLASSIFICATION_MODEL=os.getenv("LLM_CLASSIFICATION_MODEL", "claude-3-5-haiku-20241022"),
        LLM_TIMEOUT_SECONDS=int(os.getenv("LLM_TIMEOUT_SECONDS", "120")),
        LLM_MAX_RETRIES=int(os.getenv("LLM_MAX_RETRIES", "2")),
        INTAKE_RATE_LIMIT_MAX=int(os.getenv("INTAKE_RATE_LIMIT_MAX", "5")),
        INTAKE_RATE_LIMIT_WINDOW_HOURS=int(os.getenv("INTAKE_RATE_LIMIT_WINDOW_HOURS", "1")),
        REDIS_URL=redis_url,
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.SESSION_TTL_DAYS < 1:
        raise ConfigurationError("SESSION_TTL_DAYS must be >= 1.")
    if config.SIGNED_URL_TTL_SECONDS < 1:
        raise ConfigurationError("SIGNED_URL_TTL_SECONDS must be >= 1.")
    if config.LLM_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("LLM_TIMEOUT_SECONDS must be >= 1.")
    if config.LLM_MAX_RETRIES < 0:
        raise ConfigurationError("LLM_MAX_RETRIES must be >= 0.")
    if config.INTAKE_RATE_LIMIT_MAX < 1:
        raise ConfigurationError("INTAKE_RATE_LIMIT_MAX must be >= 1.")
    if config.INTAKE_RATE_LIMIT_WINDOW_HOURS < 1:
        raise ConfigurationError("INTAKE_RATE_LIMIT_WINDOW_HOURS must be >= 1.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses placeholder value.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
