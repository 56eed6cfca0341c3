"""
Typer CLI for EduAgent.

Commands:
    eduagent db init            - Initialize database tables
    eduagent agent run          - Run the agent loop until interrupted
    eduagent agent tick         - Run a single agent cycle
    eduagent roadmap create     - Generate and store a new roadmap
    eduagent roadmap list       - List roadmaps with progress
    eduagent roadmap show       - Show a roadmap's days
    eduagent roadmap delete     - Delete a roadmap and its content
    eduagent api serve          - Start the FastAPI server
    eduagent info               - Show configuration

Usage:
    eduagent --help
    eduagent roadmap create "Python async programming" --days 14 --minutes 45
    eduagent agent run
"""

from __future__ import annotations

import asyncio

import typer
from rich import print as rprint
from rich.console import Console
from rich.table import Table

from config import get_settings
from src.core.exceptions import EduAgentError
from src.core.logging_setup import configure_logging
from src.core.types import DayStatus, describe_decision

app = typer.Typer(
    help="EduAgent CLI: adaptive lessons, quizzes and roadmaps",
    no_args_is_help=True,
)

console = Console()

DAY_STYLES = {
    DayStatus.COMPLETED: "[green]✓ completed[/green]",
    DayStatus.AVAILABLE: "[cyan]● available[/cyan]",
    DayStatus.LOCKED: "[dim]○ locked[/dim]",
}


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging for every command."""
    settings = get_settings()
    configure_logging("DEBUG" if verbose else settings.log_level, settings.log_file)


def _run(coro):
    """Run a coroutine, turning domain errors into a clean exit."""
    try:
        return asyncio.run(coro)
    except EduAgentError as e:
        rprint(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)


# ========================================
# Database Commands
# ========================================

db_app = typer.Typer(help="Database management")
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """
    Initialize database tables from SQLAlchemy models.

    Safe to run multiple times (idempotent).
    """
    from src.db.database import dispose_engine, init_db

    async def _init() -> None:
        try:
            await init_db()
        finally:
            await dispose_engine()

    _run(_init())
    rprint("[green]✓[/green] Database initialized!")


# ========================================
# Agent Commands
# ========================================

agent_app = typer.Typer(help="Autonomous agent loop")
app.add_typer(agent_app, name="agent")


@agent_app.command("run")
def agent_run() -> None:
    """Run the agent on its tick interval until Ctrl+C / SIGTERM."""
    from src.agent.runner import run_agent

    settings = get_settings()
    rprint("\n[bold cyan]🤖 EduAgent runner[/bold cyan]")
    rprint(f"  Tick interval: {settings.agent_tick_interval_seconds}s")
    rprint(f"  LLM provider: {settings.llm_provider}\n")
    run_agent(settings)


@agent_app.command("tick")
def agent_tick() -> None:
    """Run a single agent cycle and show the decisions taken."""
    from src.agent.bootstrap import build_agent

    async def _tick():
        orchestrator, close = build_agent()
        try:
            return await orchestrator.step()
        finally:
            await close()

    result = _run(_tick())

    table = Table(title=f"Tick {result.tick_id[:8]}", show_header=True)
    table.add_column("Decision", style="cyan")
    table.add_column("Details")
    for decision in result.decisions:
        details = describe_decision(decision)
        kind = details.pop("type")
        table.add_row(kind, ", ".join(f"{k}={v}" for k, v in details.items()))
    console.print(table)

    rprint(f"\nProcessed: {result.processed}")
    if result.errors:
        rprint(f"[yellow]⚠[/yellow] {len(result.errors)} error(s):")
        for error in result.errors:
            rprint(f"  [red]-[/red] {error}")


# ========================================
# Roadmap Commands
# ========================================

roadmap_app = typer.Typer(help="Learning roadmaps")
app.add_typer(roadmap_app, name="roadmap")


async def _with_roadmaps(action):
    from src.agent.bootstrap import build_roadmaps

    service, close = build_roadmaps()
    try:
        return await action(service)
    finally:
        await close()


@roadmap_app.command("create")
def roadmap_create(
    topic: str = typer.Argument(..., help="What to learn"),
    days: int = typer.Option(14, "--days", "-d", min=3, max=90, help="Number of days"),
    minutes: int = typer.Option(30, "--minutes", "-m", min=30, max=240, help="Minutes per day"),
    owner: str = typer.Option("user_default", "--owner", help="Roadmap owner id"),
) -> None:
    """Generate a day-by-day roadmap for a topic."""
    rprint(f"\n[bold cyan]Generating {days}-day roadmap:[/bold cyan] {topic}")
    roadmap_id = _run(
        _with_roadmaps(lambda service: service.create_roadmap(owner, topic, days, minutes))
    )
    rprint(f"[green]✓[/green] Roadmap created: {roadmap_id}")


@roadmap_app.command("list")
def roadmap_list(
    owner: str = typer.Option("user_default", "--owner", help="Roadmap owner id"),
) -> None:
    """List roadmaps with progress."""
    summaries = _run(_with_roadmaps(lambda service: service.get_user_roadmaps(owner)))
    if not summaries:
        rprint("[yellow]⚠[/yellow] No roadmaps yet")
        return

    table = Table(title=f"Roadmaps for {owner}", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Topic", style="cyan")
    table.add_column("Status")
    table.add_column("Day", justify="right")
    table.add_column("Progress", justify="right", style="green")
    for summary in summaries:
        roadmap = summary.roadmap
        table.add_row(
            roadmap.id[:8],
            roadmap.topic,
            roadmap.status.value,
            f"{min(roadmap.current_day, roadmap.total_days)}/{roadmap.total_days}",
            f"{summary.progress}%",
        )
    console.print(table)


@roadmap_app.command("show")
def roadmap_show(roadmap_id: str = typer.Argument(..., help="Roadmap id")) -> None:
    """Show a roadmap's days and their status."""
    details = _run(_with_roadmaps(lambda service: service.get_roadmap_details(roadmap_id)))
    if details is None:
        rprint(f"[red]✗[/red] Roadmap not found: {roadmap_id}")
        raise typer.Exit(code=1)

    table = Table(title=details.roadmap.topic, show_header=True)
    table.add_column("Day", justify="right")
    table.add_column("Topic", style="cyan")
    table.add_column("Status")
    for day in details.days:
        table.add_row(str(day.day_number), day.topic, DAY_STYLES[day.status])
    console.print(table)


@roadmap_app.command("delete")
def roadmap_delete(
    roadmap_id: str = typer.Argument(..., help="Roadmap id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a roadmap with all of its days and generated content."""
    if not yes:
        typer.confirm(f"Delete roadmap {roadmap_id}?", abort=True)
    _run(_with_roadmaps(lambda service: service.delete_roadmap(roadmap_id)))
    rprint("[green]✓[/green] Roadmap deleted")


# ========================================
# API Commands
# ========================================

api_app = typer.Typer(help="HTTP API")
app.add_typer(api_app, name="api")


@api_app.command("serve")
def api_serve(
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Start the FastAPI server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


# ========================================


@app.command("info")
def show_info() -> None:
    """Show configuration."""
    settings = get_settings()

    table = Table(title="EduAgent Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Database", settings.database_url.split("@")[-1])
    table.add_row("LLM Provider", settings.llm_provider)
    table.add_row("LLM Configured", "yes" if settings.has_ai_configured() else "no")
    table.add_row("Tick Interval", f"{settings.agent_tick_interval_seconds}s")
    table.add_row("Log Level", settings.log_level)

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
