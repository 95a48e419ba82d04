"""
Culina - CLI Entry Point.

Usage:
    culina serve                         Run the HTTP API
    culina generate "PROMPT" --user-id   Generate one recipe
    culina usage --user-id ID            Show this month's generation usage
    culina health                        Check configuration
    culina db                            Check database tables
    culina --help                        Show help
"""

import asyncio
import logging

import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.spinner import Spinner

app = typer.Typer(
    name="culina",
    help="Culina - AI recipe generation backend.",
    add_completion=False,
)
console = Console()

TABLES = [
    "recipes",
    "recipe_ingredients",
    "recipe_steps",
    "user_preferences",
    "user_ai_usage",
    "user_subscription",
]


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port", envvar="PORT"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("culina.web.app:app", host=host, port=port)


@app.command()
def generate(
    prompt: str = typer.Argument(..., help="What to cook, in your own words"),
    user_id: str = typer.Option(..., "--user-id", "-u", help="User the recipe belongs to"),
    log_prompts: bool = typer.Option(False, "--log-prompts", "-l", help="Log prompts to prompt_logs/"),
) -> None:
    """Generate and save one recipe (counts against the user's quota)."""
    from culina.config import get_settings
    from culina.db.client import get_service_client
    from culina.generation.pipeline import GenerationPipeline
    from culina.llm.prompt_logger import enable_prompt_logging, get_session_log_dir

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)

    if log_prompts:
        enable_prompt_logging(True)

    pipeline = GenerationPipeline.from_settings(settings, get_service_client(settings))

    with Live(Spinner("dots", text="Generating..."), console=console, transient=True):
        result = asyncio.run(pipeline.run(prompt, user_id))

    if result.success:
        body = f"[bold green]Recipe created[/bold green]\nid: {result.recipe_id}"
        if result.warnings:
            body += f"\n[yellow]Not fully saved: {', '.join(result.warnings)}[/yellow]"
        console.print(Panel.fit(body, border_style="green"))
    elif result.quota_exceeded:
        console.print("[yellow]Monthly generation quota exceeded.[/yellow]")
    else:
        console.print(f"[red]❌ Generation failed [{result.error_code}]: {result.error}[/red]")

    if log_prompts:
        log_dir = get_session_log_dir()
        if log_dir:
            console.print(f"\n[dim]📝 Prompts logged to: {log_dir}[/dim]")

    if not result.success:
        raise typer.Exit(1)


@app.command()
def usage(
    user_id: str = typer.Option(..., "--user-id", "-u", help="User to report on"),
) -> None:
    """Show this month's AI generation usage for a user."""
    from culina.config import get_settings
    from culina.db.client import get_service_client
    from culina.quota.ledger import QuotaLedger

    settings = get_settings()
    ledger = QuotaLedger(get_service_client(settings), settings)
    record = asyncio.run(ledger.usage_summary(user_id))

    console.print(f"\n[bold]Usage for {record.month}[/bold]")
    console.print(f"  Generations: {record.generation_count}/{record.monthly_limit}")
    console.print(f"  Remaining:   {record.remaining}")


@app.command()
def health() -> None:
    """Check system health and configuration."""
    from culina.config import get_settings

    console.print("\n[bold]Culina Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("✅ Configuration loaded")
        console.print(f"   Environment: {settings.culina_env}")
        console.print(f"   Log level: {settings.log_level}")
        console.print(f"   Locale: {settings.culina_locale}")

        if settings.supabase_url.startswith("https://"):
            console.print("✅ Supabase URL configured")
        else:
            console.print("❌ Supabase URL missing or invalid")

        if settings.ai_gateway_api_key:
            console.print(f"✅ Completion gateway key configured ({settings.ai_model})")
        else:
            console.print("❌ Completion gateway key missing")

        console.print(
            f"ℹ️  Limits: free={settings.free_monthly_limit}/month, pro={settings.pro_monthly_limit}/month"
        )
        console.print("\n[green]All checks passed![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def db() -> None:
    """Check database connection and the tables the pipeline uses."""
    from culina.config import get_settings
    from culina.db.client import get_service_client

    console.print("\n[bold]Database Connection Check[/bold]\n")

    try:
        client = get_service_client(get_settings())
        console.print("✅ Connected to Supabase")

        console.print("\n[bold]Table Status:[/bold]")
        for table in TABLES:
            try:
                result = client.table(table).select("*", count="exact").limit(0).execute()
                count = result.count if hasattr(result, "count") else "?"
                console.print(f"  ✅ {table}: {count} rows")
            except Exception as e:
                console.print(f"  ❌ {table}: {e}")

        console.print("\n[green]Database check complete![/green]")

    except Exception as e:
        console.print(f"\n[red]❌ Database connection failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from culina import __version__

    console.print(f"Culina version {__version__}")


if __name__ == "__main__":
    app()
