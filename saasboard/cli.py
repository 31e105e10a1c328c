"""CLI for SaaS Board using Typer: database setup, seeding, user admin, dev server."""

import asyncio
import logging
import random
from datetime import timedelta
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from saasboard.constants import SEED_EVENT_NAMES
from saasboard.db.session import Database
from saasboard.errors import AppError
from saasboard.models.enums import Plan, Role
from saasboard.models.event import Event
from saasboard.utils import now_utc, setup_logging

load_dotenv(override=False)

# CLI styles
STYLE_HEADER = "bold blue"
STYLE_SUCCESS = "bold green"
STYLE_WARNING = "bold yellow"
STYLE_ERROR = "bold red"

SEED_PASSWORD = "password123"
SEED_EVENTS_PER_USER = 25
SEED_EVENT_SPREAD_DAYS = 14

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="saasboard",
    help="SaaS Board - accounts, billing and usage analytics.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

DatabaseUrlOption = Annotated[
    Optional[str],
    typer.Option("--database-url", help="Database URL (defaults to DATABASE_URL from settings)"),
]


def _database_url(database_url: str | None) -> str:
    if database_url:
        return database_url
    from saasboard.config import get_settings
    return get_settings().database_url


async def _with_database(database_url: str, work):
    """Connect, run ``work(database)``, always disconnect."""
    database = Database(database_url)
    await database.connect()
    try:
        return await work(database)
    finally:
        await database.disconnect()


def _fail(message: str) -> None:
    console.print(f"[{STYLE_ERROR}]{message}[/{STYLE_ERROR}]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    setup_logging("DEBUG" if verbose else "WARNING")


@app.command("init-db")
def init_db(database_url: DatabaseUrlOption = None) -> None:
    """Create all tables (development; use Alembic for PostgreSQL)."""
    url = _database_url(database_url)

    async def work(database: Database) -> None:
        await database.create_all()

    asyncio.run(_with_database(url, work))
    console.print(f"[{STYLE_SUCCESS}]Database tables created.[/{STYLE_SUCCESS}]")


async def _seed_events(database: Database, user_id: int, count: int) -> None:
    now = now_utc()
    async with database.session() as db:
        for _ in range(count):
            db.add(
                Event(
                    user_id=user_id,
                    event=random.choice(SEED_EVENT_NAMES),
                    event_metadata={"source": "seed"},
                    created_at=now - timedelta(
                        days=random.randrange(SEED_EVENT_SPREAD_DAYS),
                        minutes=random.randrange(24 * 60),
                    ),
                )
            )
        await db.commit()


@app.command()
def seed(database_url: DatabaseUrlOption = None) -> None:
    """Create demo users with sample events. Existing users are left alone."""
    from saasboard.services.user_service import create_user, get_user_by_email

    url = _database_url(database_url)
    accounts = [
        ("admin@example.com", "Admin User", Role.ADMIN, Plan.ENTERPRISE),
        ("test@example.com", "Test User", Role.USER, Plan.FREE),
    ]

    async def work(database: Database) -> list[tuple[str, str]]:
        await database.create_all()
        results = []
        for email, name, role, plan in accounts:
            async with database.session() as db:
                if await get_user_by_email(db, email):
                    results.append((email, "exists"))
                    continue
                user = await create_user(db, email, SEED_PASSWORD, name=name, role=role, plan=plan)
            await _seed_events(database, user.id, SEED_EVENTS_PER_USER)
            results.append((email, "created"))
        return results

    results = asyncio.run(_with_database(url, work))

    table = Table(title="Seed accounts", header_style=STYLE_HEADER)
    table.add_column("Email")
    table.add_column("Status")
    for email, status in results:
        style = STYLE_SUCCESS if status == "created" else STYLE_WARNING
        table.add_row(email, f"[{style}]{status}[/{style}]")
    console.print(table)
    console.print(f"Password for new accounts: [bold]{SEED_PASSWORD}[/bold]")


@app.command("create-user")
def create_user_command(
    email: Annotated[str, typer.Argument(help="Email address")],
    password: Annotated[str, typer.Option(prompt=True, hide_input=True, help="Password")],
    name: Annotated[Optional[str], typer.Option(help="Display name")] = None,
    role: Annotated[Role, typer.Option(case_sensitive=False, help="Role")] = Role.USER,
    plan: Annotated[Plan, typer.Option(case_sensitive=False, help="Initial plan")] = Plan.FREE,
    database_url: DatabaseUrlOption = None,
) -> None:
    """Create a user with the given role and plan."""
    from saasboard.services.user_service import create_user

    url = _database_url(database_url)

    async def work(database: Database):
        async with database.session() as db:
            return await create_user(db, email, password, name=name, role=role, plan=plan)

    try:
        user = asyncio.run(_with_database(url, work))
    except AppError as e:
        _fail(e.message)
    console.print(f"[{STYLE_SUCCESS}]Created user {user.email} (id={user.id}, role={user.role.value})[/{STYLE_SUCCESS}]")


@app.command("set-role")
def set_role_command(
    email: Annotated[str, typer.Argument(help="Email address")],
    role: Annotated[Role, typer.Argument(case_sensitive=False, help="New role")],
    database_url: DatabaseUrlOption = None,
) -> None:
    """Change an existing user's role."""
    from saasboard.services.user_service import set_role

    url = _database_url(database_url)

    async def work(database: Database):
        async with database.session() as db:
            return await set_role(db, email, role)

    try:
        user = asyncio.run(_with_database(url, work))
    except AppError as e:
        _fail(e.message)
    console.print(f"[{STYLE_SUCCESS}]{user.email} is now {user.role.value}[/{STYLE_SUCCESS}]")


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port")] = 8000,
    reload: Annotated[bool, typer.Option(help="Auto-reload on code changes")] = False,
) -> None:
    """Run the web app with uvicorn."""
    import uvicorn

    uvicorn.run("saasboard.app:create_app", factory=True, host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
