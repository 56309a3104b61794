"""
Dota Companion CLI - Command Line Interface for the companion backend

Provides commands for:
- Running the API server
- Converting Steam ids
- Looking up player stats and the hero catalog
- Managing the user database
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dotacompanion import __version__
from dotacompanion.core.config import AppConfig, configure_logging, load_config
from dotacompanion.core.errors import DotaCompanionError
from dotacompanion.core.schemas import HeroInfo, PlayerStatsResponse
from dotacompanion.core.steam_id import to_account_id, to_steam_id64
from dotacompanion.infra.database import (
    DatabaseManager,
    get_user_by_email,
    get_user_by_steam_id,
    set_user_admin,
)
from dotacompanion.integrations.opendota import OpenDotaClient
from dotacompanion.stats.aggregator import ProfileAggregator
from dotacompanion.stats.roles import DEFAULT_HERO_ROLES, load_hero_roles

app = typer.Typer(
    name="dotacompanion",
    help="Dota 2 companion backend - player profiles, stats and accounts",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold red]Dota Companion[/bold red] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Enable verbose output"),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (.yaml, .toml or .json); defaults to the standard locations",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Dota Companion - Dota 2 companion backend"""
    config = load_config(config_file)
    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config.logging)
    ctx.obj = config


def _aggregator(config: AppConfig, http: httpx.AsyncClient) -> ProfileAggregator:
    providers = config.providers
    hero_roles = (
        load_hero_roles(config.stats.hero_roles_file)
        if config.stats.hero_roles_file
        else DEFAULT_HERO_ROLES
    )
    return ProfileAggregator(
        OpenDotaClient(providers.opendota_url, providers.timeout_seconds, http=http),
        hero_roles=hero_roles,
        recent_limit=config.stats.recent_matches_limit,
        top_heroes_limit=config.stats.top_heroes_limit,
        request_timeout=config.stats.request_timeout_seconds,
        cdn_url=providers.opendota_cdn_url,
    )


async def _fetch_stats(config: AppConfig, steam_id: str) -> PlayerStatsResponse:
    async with httpx.AsyncClient(timeout=config.providers.timeout_seconds) as http:
        return await _aggregator(config, http).get_player_stats(steam_id)


async def _fetch_heroes(config: AppConfig) -> dict[int, HeroInfo]:
    async with httpx.AsyncClient(timeout=config.providers.timeout_seconds) as http:
        return await _aggregator(config, http).get_heroes_data()


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload (development)"),
    log_level: str = typer.Option("info", "--log-level", help="uvicorn log level"),
) -> None:
    """Run the API server."""
    import uvicorn

    config: AppConfig = ctx.obj
    host = host or config.server.host
    port = port or config.server.port
    console.print(f"[bold red]Dota Companion[/bold red] API on http://{host}:{port}")

    uvicorn.run(
        "dotacompanion.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


@app.command("account-id")
def account_id(
    steam_id: str = typer.Argument(..., help="Steam64 id or 32-bit account id"),
) -> None:
    """Convert a Steam id to the 32-bit account id used by OpenDota."""
    try:
        value = to_account_id(steam_id)
    except DotaCompanionError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Account ID", str(value))
    table.add_row("Steam64 ID", to_steam_id64(value))
    console.print(table)


@app.command()
def stats(
    ctx: typer.Context,
    steam_id: str = typer.Argument(..., help="Steam64 id or 32-bit account id"),
) -> None:
    """Show a player's stats and recent matches."""
    try:
        with console.status("Fetching player stats..."):
            result = asyncio.run(_fetch_stats(ctx.obj, steam_id))
    except DotaCompanionError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    s = result.stats
    console.print(
        Panel(
            f"Matches: [bold]{s.total_matches}[/bold]  "
            f"W/L: [green]{s.wins}[/green]/[red]{s.losses}[/red]  "
            f"Win rate: [bold]{s.win_rate}%[/bold]\n"
            f"Main roles: {', '.join(s.main_roles)}",
            title=f"Player {steam_id}",
        )
    )

    table = Table(title="Recent Matches")
    table.add_column("Match", style="cyan")
    table.add_column("Date")
    table.add_column("Hero")
    table.add_column("Result")
    table.add_column("K/D/A", justify="right")
    for match in result.recent_matches:
        colour = "green" if match.result == "win" else "red"
        table.add_row(
            match.match_id,
            match.date,
            match.hero_name,
            f"[{colour}]{match.result}[/{colour}]",
            f"{match.kills}/{match.deaths}/{match.assists}",
        )
    console.print(table)


@app.command()
def heroes(ctx: typer.Context) -> None:
    """List the hero catalog."""
    with console.status("Fetching hero catalog..."):
        catalog = asyncio.run(_fetch_heroes(ctx.obj))

    if not catalog:
        console.print("[yellow]Warning:[/yellow] Hero catalog unavailable")
        raise typer.Exit(1)

    table = Table(title=f"Heroes ({len(catalog)})")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="green")
    for hero_id in sorted(catalog):
        table.add_row(str(hero_id), catalog[hero_id].name)
    console.print(table)


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """Create the database tables."""
    config: AppConfig = ctx.obj
    db = DatabaseManager(config.database.url)
    db.dispose()
    console.print("[green]Database ready[/green]")


@app.command("grant-admin")
def grant_admin(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Email or Steam64 id of the user"),
    revoke: bool = typer.Option(False, "--revoke", help="Remove admin rights instead"),
) -> None:
    """Grant (or revoke) admin rights."""
    config: AppConfig = ctx.obj
    db = DatabaseManager(config.database.url)
    try:
        with db.session_scope() as session:
            if "@" in identifier:
                user = get_user_by_email(session, identifier)
            else:
                user = get_user_by_steam_id(session, identifier)
            if user is None:
                console.print(f"[red]Error:[/red] No user matches '{identifier}'")
                raise typer.Exit(1)
            set_user_admin(session, user, is_admin=not revoke)
            console.print(
                f"User {user.id} is {'no longer' if revoke else 'now'} an [bold]admin[/bold]"
            )
    finally:
        db.dispose()


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
