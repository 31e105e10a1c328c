"""Tests for the saasboard CLI."""

import asyncio

from sqlalchemy import func, select
from typer.testing import CliRunner

from saasboard.cli import app
from saasboard.db.session import Database
from saasboard.models.enums import Plan, Role
from saasboard.models.event import Event
from saasboard.models.user import User
from saasboard.services.user_service import get_user_by_email

runner = CliRunner()


def _database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'cli.db'}"


def _query(url: str, work):
    async def run():
        database = Database(url)
        await database.connect()
        try:
            async with database.session() as session:
                return await work(session)
        finally:
            await database.disconnect()

    return asyncio.run(run())


def test_init_db_creates_tables(tmp_path):
    url = _database_url(tmp_path)
    result = runner.invoke(app, ["init-db", "--database-url", url])
    assert result.exit_code == 0, result.output

    count = _query(url, lambda s: s.scalar(select(func.count()).select_from(User)))
    assert count == 0


def test_seed_is_idempotent(tmp_path):
    url = _database_url(tmp_path)

    result = runner.invoke(app, ["seed", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "created" in result.output

    result = runner.invoke(app, ["seed", "--database-url", url])
    assert result.exit_code == 0, result.output
    assert "exists" in result.output

    admin = _query(url, lambda s: get_user_by_email(s, "admin@example.com"))
    assert admin.role == Role.ADMIN
    assert admin.subscription.plan == Plan.ENTERPRISE

    tester = _query(url, lambda s: get_user_by_email(s, "test@example.com"))
    assert tester.role == Role.USER
    assert tester.subscription.plan == Plan.FREE

    users = _query(url, lambda s: s.scalar(select(func.count()).select_from(User)))
    events = _query(url, lambda s: s.scalar(select(func.count()).select_from(Event)))
    assert users == 2
    assert events == 50


def test_create_user_and_set_role(tmp_path):
    url = _database_url(tmp_path)
    runner.invoke(app, ["init-db", "--database-url", url])

    result = runner.invoke(
        app,
        ["create-user", "ops@example.com", "--password", "secret123", "--plan", "pro", "--database-url", url],
    )
    assert result.exit_code == 0, result.output

    result = runner.invoke(app, ["set-role", "ops@example.com", "admin", "--database-url", url])
    assert result.exit_code == 0, result.output

    user = _query(url, lambda s: get_user_by_email(s, "ops@example.com"))
    assert user.role == Role.ADMIN
    assert user.subscription.plan == Plan.PRO


def test_create_user_duplicate_fails(tmp_path):
    url = _database_url(tmp_path)
    runner.invoke(app, ["init-db", "--database-url", url])
    args = ["create-user", "dup@example.com", "--password", "secret123", "--database-url", url]

    assert runner.invoke(app, args).exit_code == 0
    result = runner.invoke(app, args)
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_set_role_unknown_user(tmp_path):
    url = _database_url(tmp_path)
    runner.invoke(app, ["init-db", "--database-url", url])
    result = runner.invoke(app, ["set-role", "nobody@example.com", "admin", "--database-url", url])
    assert result.exit_code == 1
