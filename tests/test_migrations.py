"""Alembic migrations apply and revert cleanly on a scratch database."""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from brickbase.config import settings

MIGRATIONS = Path(__file__).resolve().parents[1] / "src" / "brickbase" / "db" / "migrations"


def test_upgrade_creates_partial_indexes_and_downgrade_drops(tmp_path, monkeypatch):
    db_file = tmp_path / "migrate.db"
    monkeypatch.setattr(settings, "database_url", f"sqlite+aiosqlite:///{db_file}")

    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS))

    command.upgrade(cfg, "head")

    engine = create_engine(f"sqlite:///{db_file}")
    try:
        assert {"users", "agreements", "apartments", "events"} <= set(
            inspect(engine).get_table_names()
        )
        indexes = {ix["name"] for ix in inspect(engine).get_indexes("agreements")}
        assert {"uq_agreements_active_email", "uq_agreements_checked_apartment"} <= indexes

        command.downgrade(cfg, "base")
        assert "agreements" not in inspect(engine).get_table_names()
    finally:
        engine.dispose()
