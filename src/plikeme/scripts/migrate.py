# src/plikeme/scripts/migrate.py
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from plikeme.core.settings import settings

MIGRATIONS_DIR = os.path.abspath(
    os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")
)


def alembic_config(database_url: str | None = None) -> Config:
    """Alembic config pointing at the project's migrations folder."""
    cfg = Config(os.path.join(MIGRATIONS_DIR, "alembic.ini"))
    cfg.set_main_option("script_location", MIGRATIONS_DIR)
    cfg.set_main_option("sqlalchemy.url", database_url or settings.effective_database_url)
    cfg.attributes["configure_logger"] = False
    return cfg


def run_upgrade_head(database_url: str | None = None) -> None:
    command.upgrade(alembic_config(database_url), "head")


if __name__ == "__main__":
    run_upgrade_head()
