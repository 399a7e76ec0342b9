"""CLI commands for brewlog."""

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import click
import structlog
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.table import Table

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from brews.cards import project
from brews.client import ProxyClient, ProxyClientError
from brews.drafts import BrewDraft
from brews.session import BrewSession
from brews.view import ActiveFilters, BrewListView, Page
from cli.config import load_config_model
from cli.config_models import BrewlogConfig
from cli.logging_config import setup_logging
from shared_types import CoffeeField

console = Console()
logger = structlog.get_logger()

T = TypeVar("T")


def build_session(config: BrewlogConfig, token: Optional[str]) -> BrewSession:
    client = ProxyClient(config.client.proxy_url, timeout=config.client.timeout)
    return BrewSession(
        client=client,
        brew_table=config.store.brew_table,
        token=token,
        view=BrewListView(page_size=config.client.page_size),
    )


def run_with_session(ctx: click.Context, fn: Callable[[BrewSession], Awaitable[T]]) -> T:
    """Run ``fn`` against a fresh session, reporting proxy errors and exiting 1."""
    config: BrewlogConfig = ctx.obj["config"]
    session = build_session(config, ctx.obj["token"])

    async def runner() -> T:
        try:
            return await fn(session)
        finally:
            await session.client.close()

    try:
        return asyncio.run(runner())
    except ProxyClientError as e:
        outcome = session.handle_error(e)
        console.print(f"[red]Error:[/] {outcome.message}")
        if outcome.login_required:
            console.print("[yellow]Set a fresh token with --token or BREWLOG_TOKEN.[/]")
        sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--token", envvar="BREWLOG_TOKEN", help="Bearer token from the identity provider")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Config file path")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, token: Optional[str], config_path: Optional[Path]):
    """Brewlog - coffee brew tracker."""
    try:
        config = load_config_model(config_path)
    except ValueError as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(1)
    setup_logging(
        json_mode=config.logging.json_mode,
        level="DEBUG" if verbose else config.logging.level,
    )
    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["token"] = token or config.client.token


@cli.command()
@click.pass_context
def whoami(ctx: click.Context):
    """Show which coffee catalog you read from."""

    async def flow(session: BrewSession):
        if not session.logged_in:
            console.print("[yellow]Not logged in; using the community catalog.[/]")
            return
        catalog = await session.load_user_config()
        if catalog.has_personal_base:
            console.print(f"[green]Personal catalog:[/] base {catalog.base_id}")
        else:
            console.print("[cyan]Community catalog[/] (no personal base configured)")

    run_with_session(ctx, flow)


@cli.command()
@click.pass_context
def coffees(ctx: click.Context):
    """List coffees that are open and can be brewed."""

    async def flow(session: BrewSession):
        if session.logged_in:
            await session.load_user_config()
        return await session.load_coffees()

    records = run_with_session(ctx, flow)
    if not records:
        console.print("[yellow]No open coffees found.[/]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Coffee", style="cyan")
    table.add_column("Roaster")
    table.add_column("Origin")
    table.add_column("Process", style="dim")
    for r in records:
        table.add_row(
            r.id,
            str(r.get(CoffeeField.NAME) or f"Coffee {r.id}"),
            str(r.get(CoffeeField.ROASTER) or ""),
            str(r.get(CoffeeField.ORIGIN) or ""),
            str(r.get(CoffeeField.PROCESS) or ""),
        )
    console.print(table)


def render_page(page: Page) -> None:
    if page.total_items == 0:
        console.print("[yellow]No brews yet. Start tracking your coffee![/]")
        return

    table = Table(show_header=True)
    table.add_column("Date", style="cyan")
    table.add_column("Coffee")
    table.add_column("Brewer", style="green")
    table.add_column("Details", style="dim")
    table.add_column("Rating", justify="right")
    for record in page.items:
        card = project(record)
        details = ", ".join(
            f"{label}: {value}" for label, value in card.details if label != "Brewer"
        )
        brewer = dict(card.details).get("Brewer", "")
        table.add_row(card.date, card.coffee_name, brewer, details, card.rating or "")
    console.print(table)
    console.print(f"[dim]Page {page.page} of {page.total_pages} ({page.total_items} brews)[/]")


@cli.command()
@click.option("--coffee", help="Only brews of this coffee")
@click.option("--varietal", help="Only brews of this varietal")
@click.option("--brewer", help="Only brews made with this brewer")
@click.option("--creator", help="Only brews logged by this email")
@click.option("-p", "--page", default=1, help="Page number")
@click.option("--facets", is_flag=True, help="Show available filter values")
@click.pass_context
def brews(ctx, coffee, varietal, brewer, creator, page: int, facets: bool):
    """Show brew history, newest first."""

    async def flow(session: BrewSession) -> BrewListView:
        await session.load_brews()
        return session.view

    view = run_with_session(ctx, flow)

    if facets:
        for label, values in (
            ("Coffees", view.facets.coffees),
            ("Varietals", view.facets.varietals),
            ("Brewers", view.facets.brewers),
            ("Creators", view.facets.creators),
        ):
            console.print(f"[bold]{label}:[/] {', '.join(values) if values else '-'}")
        return

    view.set_filters(ActiveFilters(coffee=coffee, varietal=varietal, brewer=brewer, creator=creator))
    render_page(view.go_to(page))


@cli.command("log")
@click.option("--coffee", "coffee_id", required=True, help="Coffee record id (see `brewlog coffees`)")
@click.option("--brewer", required=True, help="Brewer, e.g. V60")
@click.option("--dose", required=True, type=float, help="Dose in grams")
@click.option("--drink-weight", required=True, type=float, help="Drink weight in grams")
@click.option("--rating", required=True, type=int, help="Enjoyment 0-10")
@click.option("--method", "brew_method", help="Brew method")
@click.option("--grinder", help="Grinder used")
@click.option("--grind-size", help="Grind size")
@click.option("--time", "total_brew_time", type=int, help="Total brew time in seconds")
@click.option("--pours", type=int, help="Number of pours")
@click.option("--temp", "water_temperature", type=float, help="Water temperature (°C)")
@click.option("--notes", help="Tasting notes")
@click.option("--recipe", help="Recipe text")
@click.pass_context
def log_brew(ctx, coffee_id: str, **options):
    """Log a new brew."""

    async def flow(session: BrewSession):
        await session.load_user_config()
        await session.load_coffees()
        try:
            choice = session.coffee_choice(coffee_id)
        except KeyError:
            console.print(f"[red]Error:[/] coffee {coffee_id} not found or not open")
            return None
        try:
            draft = BrewDraft(
                coffee=choice,
                brewer=options["brewer"],
                dose=options["dose"],
                drink_weight=options["drink_weight"],
                enjoyment=options["rating"],
                brew_method=options["brew_method"],
                grinder=options["grinder"],
                grind_size=options["grind_size"],
                total_brew_time=options["total_brew_time"],
                pours=options["pours"],
                water_temperature=options["water_temperature"],
                notes=options["notes"],
                recipe=options["recipe"],
            )
        except PydanticValidationError as e:
            for err in e.errors():
                field = ".".join(str(p) for p in err["loc"])
                console.print(f"[red]Invalid {field}:[/] {err['msg']}")
            return None
        return await session.submit_brew(draft)

    if not ctx.obj["token"]:
        console.print("[red]Error:[/] logging a brew requires a token (--token or BREWLOG_TOKEN)")
        sys.exit(1)

    record = run_with_session(ctx, flow)
    if record is None:
        sys.exit(1)
    console.print(f"[green]Brew saved successfully![/] ({record.id})")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Bind address")
@click.option("--port", default=8000, envvar="PORT", help="Port")
def serve(host: str, port: int):
    """Run the proxy web service."""
    import uvicorn

    uvicorn.run("web.app:app", host=host, port=port)


if __name__ == "__main__":
    cli()
