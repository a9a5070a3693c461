"""Command-line interface using Typer."""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from structure_treasury import __version__
from structure_treasury.config import get_settings

app = typer.Typer(
    name="structure-treasury",
    help="Structure Treasury - structure lifecycle and treasury reconciliation service",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"Structure Treasury version: {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
):
    """Structure Treasury CLI."""
    pass


@app.command()
def serve(
    host: str = typer.Option(None, "--host", help="Host to bind to"),
    port: int = typer.Option(None, "--port", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"[green]Starting Structure Treasury API on {host}:{port}[/green]")
    uvicorn.run(
        "structure_treasury.main:app",
        host=host,
        port=port,
        reload=reload,
    )


@app.command("init-db")
def init_db():
    """Create the database tables."""
    from structure_treasury.core.database import close_db
    from structure_treasury.core.database import init_db as create_tables
    from structure_treasury.core.logging import configure_logging

    configure_logging(get_settings().log_level)

    async def do_init():
        try:
            await create_tables()
        finally:
            await close_db()

    console.print("[yellow]Creating database tables...[/yellow]")
    asyncio.run(do_init())
    console.print("[green]✓ Database ready[/green]")


@app.command()
def status():
    """Show service configuration."""
    settings = get_settings()

    console.print(f"[bold]Structure Treasury v{__version__}[/bold]")

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Database", settings.database_url.split("@")[-1])
    table.add_row("Assembly cost per leg", f"{settings.assembly_cost_per_leg}")
    table.add_row("Cash tolerance", f"{settings.cash_tolerance}")
    table.add_row("Guarantee tolerance", f"{settings.guarantee_tolerance}")
    table.add_row("Option margin %", f"{settings.default_option_margin_percent}")
    table.add_row("Stock margin %", f"{settings.default_stock_margin_percent}")
    table.add_row("Stock guarantee %", f"{settings.default_stock_guarantee_percent}")
    console.print(table)
    console.print("[green]Status: Ready[/green]")


if __name__ == "__main__":
    app()
