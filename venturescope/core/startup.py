"""Fail-fast checks run before the API or workers accept traffic."""

from __future__ import annotations

import logging

from venturescope.core.config import get_config
from venturescope.core.logging_config import configure_logging
from venturescope.database.db import get_active_database_url, verify_database_connection

logger = logging.getLogger(__name__)

# Integrations that degrade a feature instead of blocking startup when unset.
_OPTIONAL_INTEGRATIONS = (
    ("STRIPE_SECRET_KEY", "startup.billing.stripe_not_configured"),
    ("STORAGE_SERVICE_KEY", "startup.storage.service_key_missing"),
    ("LLM_API_KEY", "startup.llm.api_key_missing"),
)


def validate_startup_config() -> None:
    config = get_config()
    database_url = get_active_database_url()
    if not verify_database_connection():
        if config.DB_CONNECTIVITY_REQUIRED:
            raise RuntimeError("Database connectivity check failed.")
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )
    if config.is_production and database_url.startswith("sqlite"):
        logger.warning("startup.production.sqlite_detected", extra={"event": "startup.production.sqlite_detected"})

    for setting, event in _OPTIONAL_INTEGRATIONS:
        if not getattr(config, setting, None):
            logger.warning(event, extra={"event": event})

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "database_url_scheme": database_url.split("://", 1)[0],
            "db_connectivity_required": config.DB_CONNECTIVITY_REQUIRED,
        },
    )


def bootstrap() -> None:
    configure_logging()
    validate_startup_config()
