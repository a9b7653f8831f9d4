"""Fail-fast checks run before the engagement services take traffic."""

from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from engagements.core.config import Config, get_config
from engagements.core.exceptions import ConfigurationError
from engagements.core.logging_config import configure_logging
from engagements.database.db import get_active_database_url, get_engine, verify_database_connection
from engagements.models import Base

logger = logging.getLogger(__name__)


def missing_tables(engine: Engine) -> list[str]:
    """Engagement tables the bound database does not have yet."""
    present = set(inspect(engine).get_table_names())
    return sorted(name for name in Base.metadata.tables if name not in present)


def _check_database(config: Config, require_schema: bool) -> None:
    if not verify_database_connection():
        if config.DB_CONNECTIVITY_REQUIRED:
            raise ConfigurationError("Database connectivity check failed.")
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )
        return

    missing = missing_tables(get_engine())
    if not missing:
        return
    if require_schema:
        raise ConfigurationError(f"Database schema is missing tables: {', '.join(missing)}. Run init_db first.")
    logger.warning(
        "startup.database.schema_incomplete",
        extra={"event": "startup.database.schema_incomplete", "missing_tables": missing},
    )


def validate_startup_config(require_schema: bool = False) -> None:
    """Check connectivity and schema, then log the effective engagement settings.

    ``require_schema`` turns missing engagement tables into a hard failure.
    Migrations run through ``init_db`` leave it off since they create them.
    """
    config = get_config()
    _check_database(config, require_schema)

    active_database_url = get_active_database_url()
    if config.is_production and active_database_url.startswith("sqlite"):
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )

    logger.info(
        "startup.config.validated",
        extra={
            "event": "startup.config.validated",
            "env": config.ENV,
            "app_version": config.APP_VERSION,
            "database_url_scheme": active_database_url.split("://", 1)[0],
            "default_currency": config.DEFAULT_CURRENCY,
            "expiring_soon_days": config.EXPIRING_SOON_DAYS,
        },
    )


def bootstrap(require_schema: bool = False) -> None:
    configure_logging()
    validate_startup_config(require_schema=require_schema)
