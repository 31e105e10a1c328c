"""Tests for the Alembic migration environment."""

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from saasboard.db.session import Database

ROOT = Path(__file__).resolve().parent.parent


def _alembic_config() -> Config:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return cfg


def _table_info(url: str) -> dict[str, set[str]]:
    async def run():
        database = Database(url)
        await database.connect()
        try:
            async with database.engine.connect() as conn:
                return await conn.run_sync(
                    lambda sync_conn: {
                        name: {c["name"] for c in inspect(sync_conn).get_columns(name)}
                        for name in inspect(sync_conn).get_table_names()
                    }
                )
        finally:
            await database.disconnect()

    return asyncio.run(run())


def test_upgrade_and_downgrade_on_sqlite(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrate.db'}"
    monkeypatch.setenv("DATABASE_URL", url)
    cfg = _alembic_config()

    command.upgrade(cfg, "head")
    tables = _table_info(url)
    assert {"users", "subscriptions", "analytics_events"} <= set(tables)
    assert "stripe_customer_id" in tables["subscriptions"]
    assert "metadata" in tables["analytics_events"]

    command.downgrade(cfg, "base")
    assert set(_table_info(url)) == {"alembic_version"}
