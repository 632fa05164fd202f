"""EstiMate Pro CLI.

Commands:
- init: Initialize database schema
- create-admin: Create (or promote) an admin account
- estimate: Evaluate a pricing profile against a survey from JSON files
- web serve: Run the API server
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from estimatepro.config import get_config
from estimatepro.db.connection import close_db, get_session, init_db
from estimatepro.db.repository import create_builder, get_builder_by_email
from estimatepro.estimate.engine import compute_estimate
from estimatepro.models import PricingProfile, SurveyResponse
from estimatepro.reporting.formatting import format_currency
from estimatepro.web.auth import hash_password

app = typer.Typer(
    name="estimatepro",
    help="EstiMate Pro - bathroom renovation estimates and quotes",
    no_args_is_help=True,
)

web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()


@app.command()
def init(
    drop: bool = typer.Option(False, "--drop", help="Drop existing tables"),
):
    """Initialize database schema."""
    config = get_config()
    console.print(f"[bold]Initializing database:[/bold] {config.db.url}")

    async def _init():
        if drop:
            console.print("[yellow]Dropping existing tables...[/yellow]")
        await init_db(drop=drop)
        await close_db()

    asyncio.run(_init())
    console.print("[bold green]✓[/bold green] Database initialized")


@app.command(name="create-admin")
def create_admin(
    email: str = typer.Option(..., "--email", help="Admin login email"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True, help="Admin password"),
    name: str = typer.Option("System Admin", "--name", help="Contact name"),
):
    """Create an admin account, or promote an existing account to admin."""
    config = get_config()

    async def _create() -> bool:
        async with get_session() as session:
            existing = await get_builder_by_email(session, email)
            if existing is not None:
                existing.role = "admin"
            else:
                await create_builder(
                    session,
                    email=email,
                    password_hash=hash_password(password),
                    contact_name=name,
                    role="admin",
                    trial_days=config.auth.trial_days,
                    slug_bytes=config.survey.slug_bytes,
                )
        await close_db()
        return existing is None

    created = asyncio.run(_create())
    if created:
        console.print(f"[bold green]✓[/bold green] Admin {email} created")
    else:
        console.print(f"[yellow]{email} already exists; promoted to admin[/yellow]")


def _load_json(path: Path) -> dict | list:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"{path}: {exc}") from exc


@app.command()
def estimate(
    pricing_file: Path = typer.Argument(..., help="Pricing profile JSON (object or list of items)"),
    survey_file: Path = typer.Argument(..., help="Survey response JSON"),
    as_json: bool = typer.Option(False, "--json", help="Print the estimate as JSON"),
):
    """Evaluate a pricing profile against a survey response."""
    pricing = _load_json(pricing_file)
    if isinstance(pricing, list):
        pricing = {"pricingItems": pricing}

    try:
        profile = PricingProfile.model_validate(pricing)
        survey = SurveyResponse.model_validate(_load_json(survey_file))
    except ValidationError as exc:
        console.print(f"[red]Invalid input:[/red] {exc}")
        raise typer.Exit(1) from exc

    result = compute_estimate(profile, survey, get_config().estimate)

    if as_json:
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        return

    table = Table(title=f"Estimate for {survey.client_name or 'client'}")
    table.add_column("Item", style="cyan")
    table.add_column("Type")
    table.add_column("Applicability")
    table.add_column("Quantity", justify="right")
    table.add_column("Total", justify="right", style="green")

    for line in result.line_items:
        table.add_row(
            line.item_name,
            line.price_type.value,
            line.applicability,
            line.quantity_label,
            format_currency(line.total),
        )

    console.print(table)
    console.print(f"[bold]Base estimate:[/bold] {format_currency(result.base_estimate)}")
    console.print(f"[bold]High estimate:[/bold] {format_currency(result.high_estimate)}")


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI server."""
    import uvicorn

    typer.echo(f"Starting EstiMate Pro API on http://{host}:{port}")
    uvicorn.run("estimatepro.web.app:app", host=host, port=port, reload=reload, workers=1)


if __name__ == "__main__":
    app()
