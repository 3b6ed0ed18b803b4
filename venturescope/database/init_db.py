"""Apply migrations to the configured database and optionally seed a demo workspace.

Run with ``python -m venturescope.database.init_db [--seed-demo]``.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig
from sqlalchemy.orm import Session

import venturescope.database.db as db_module
from venturescope.core.config import get_config
from venturescope.core.exceptions import ConfigurationError
from venturescope.core.startup import bootstrap
from venturescope.models import Company, CompanyStage, User
from venturescope.services.auth_service import AuthService

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]

DEMO_EMAIL = "demo@venturescope.local"
DEMO_PASSWORD = "venturescope-demo"
DEMO_COMPANIES = (
    ("Nimbus Labs", CompanyStage.SEED, "Developer tools"),
    ("Harbor Health", CompanyStage.SERIES_A, "Healthcare"),
    ("Gridline Energy", CompanyStage.PRE_SEED, "Climate"),
)


def _build_alembic_config(database_url: str) -> AlembicConfig:
    cfg = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", database_url)
    return cfg


def seed_demo_workspace(db: Session) -> int | None:
    """Create a demo owner, organization and pipeline. Returns the org id, or None if already seeded."""
    if db.query(User.id).filter(User.email == DEMO_EMAIL).first() is not None:
        return None

    issued = AuthService(db).signup(
        email=DEMO_EMAIL,
        password=DEMO_PASSWORD,
        name="Demo Partner",
        organization_name="Demo Ventures",
    )
    for position, (name, stage, sector) in enumerate(DEMO_COMPANIES):
        db.add(
            Company(
                org_id=issued.org_id,
                name=name,
                stage=stage,
                sector=sector,
                pipeline_position=position,
                created_by=issued.user_id,
            )
        )
    db.commit()
    logger.info("database.demo.seeded", extra={"event": "database.demo.seeded", "org_id": issued.org_id})
    return issued.org_id


def init_db(seed_demo: bool = False) -> None:
    bootstrap()
    active_url = db_module.get_active_database_url()
    command.upgrade(_build_alembic_config(active_url), "head")
    logger.info(
        "database.migrations.applied",
        extra={"event": "database.migrations.applied", "database_scheme": active_url.split("://", 1)[0]},
    )

    if seed_demo:
        if get_config().is_production:
            raise ConfigurationError("Refusing to seed demo data in production.")
        with db_module.get_db_session() as db:
            seed_demo_workspace(db)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Apply VentureScope migrations.")
    parser.add_argument("--seed-demo", action="store_true", help="create a demo organization with sample companies")
    init_db(seed_demo=parser.parse_args().seed_demo)
