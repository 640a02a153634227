"""BrickBase CLI — run the server and bootstrap the database.

Usage:
    brickbase serve                          # Run the API with uvicorn
    brickbase init-db                        # Create tables (dev / first run)
    brickbase grant-role admin@example.com admin   # Bootstrap the first admin

Roles can only be changed by an admin through the API, so the very first
admin has to be granted from here.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys

import click

from brickbase.db.models import ROLES


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Inside an already running event loop (CliRunner under an async test)
    the coroutine is run on a worker thread with its own loop.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


async def _init_db() -> None:
    from brickbase.db.engine import engine
    from brickbase.db.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await engine.dispose()


async def _grant_role(email: str, role: str) -> str:
    from brickbase.db.engine import async_session_factory, engine
    from brickbase.services.user_service import UserService

    async with async_session_factory() as session:
        user = await UserService(session).grant_role(email, role)
        result = f"{user.email} is now {user.role}"
    await engine.dispose()
    return result


@click.group()
@click.version_option(package_name="brickbase")
def cli():
    """BrickBase tenancy management backend."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default: settings.host)")
@click.option("--port", default=None, type=int, help="Port (default: settings.port)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    from brickbase.config import settings

    uvicorn.run(
        "brickbase.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("init-db")
def init_db():
    """Create all tables and indexes that do not exist yet."""
    _run(_init_db())
    click.secho("Database initialised.", fg="green")


@cli.command("grant-role")
@click.argument("email")
@click.argument("role", type=click.Choice(ROLES))
def grant_role(email: str, role: str):
    """Give EMAIL the ROLE, creating the user if needed."""
    try:
        message = _run(_grant_role(email, role))
    except Exception as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    click.secho(message, fg="green")
