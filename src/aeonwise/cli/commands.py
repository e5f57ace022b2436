"""CLI commands for AeonWise.

Commands:
- init-db: Create the SQLite database
- sectionize: Split lesson text into typed sections
- score / rank / ranks / leaderboard: Points and rank tiers
- lesson / narrate: Browse course lessons and generate narration
- ask / path: AI assistant
- serve: Run the Web API
"""

import json
import logging
import sys
from pathlib import Path

import structlog
import typer
import yaml
from rich.console import Console

from aeonwise.config.app_config import load_app_config
from aeonwise.core.catalog import CourseNotFoundError, get_lesson
from aeonwise.core.models import Profile
from aeonwise.core.narration import lesson_script, section_script
from aeonwise.core.ranking import (
    RANKS,
    calculate_points,
    calculate_rank,
    get_rank,
    points_to_next_rank,
    rank_progress,
)
from aeonwise.core.sectionizer import sectionize as do_sectionize
from aeonwise.db.database import Database, init_db
from aeonwise.db.profiles_repository import LEADERBOARD_FILTERS, list_leaderboard
from aeonwise.services.assistant import MockAssistant, get_assistant
from aeonwise.services.speech import NarrationService, get_speech_provider

app = typer.Typer(
    name="aeonwise",
    help="AeonWise learning platform: courses, ranks, skill swaps and an AI assistant.",
    no_args_is_help=True,
)

console = Console()


def _stderr_logger(*args) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger so redirected streams are honored
    return structlog.PrintLogger(sys.stderr)


def _configure_logging(level: int) -> None:
    """Send log lines to stderr so stdout carries only command output."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
    )


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs on stderr"),
) -> None:
    ctx.obj = {"verbose": verbose}
    _configure_logging(logging.DEBUG if verbose else logging.WARNING)


def _open_db(db_path: str | None) -> Database:
    path = Path(db_path) if db_path else load_app_config().db_path
    return init_db(path)


def _lesson_or_exit(course_id: str, lesson_id: str):
    try:
        return get_lesson(course_id, lesson_id)
    except CourseNotFoundError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _rank_title(name: str) -> str:
    rank = get_rank(name)
    return rank.title if rank else name


@app.command(name="init-db")
def init_database(
    db_path: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Create the database and its tables."""
    db = _open_db(db_path)
    console.print(f"[green]✓ Database ready[/green]  [dim]{db.path}[/dim]")


@app.command()
def sectionize(
    file: str = typer.Argument(..., help="Markdown-like lesson text file"),
    merge_quotes: bool = typer.Option(
        False, "--merge-quotes", help="Merge consecutive quote lines into one section"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print sections as JSON"),
) -> None:
    """Split lesson text into heading/paragraph/code/list/quote sections."""
    path = Path(file).expanduser()
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        raise typer.Exit(code=1)

    sections = do_sectionize(path.read_text(encoding="utf-8"), merge_quotes=merge_quotes)

    if as_json:
        typer.echo(json.dumps([s.to_dict() for s in sections], indent=2, ensure_ascii=False))
        return

    from rich.table import Table

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID")
    table.add_column("Type")
    table.add_column("Content")
    for s in sections:
        kind = s.type
        if s.level is not None:
            kind = f"{kind} (h{s.level})"
        elif s.language:
            kind = f"{kind} ({s.language})"
        first_line = s.content.split("\n", 1)[0]
        table.add_row(s.id, kind, first_line[:80])
    console.print(table)
    console.print(f"[dim]{len(sections)} sections[/dim]")


@app.command()
def score(
    profile_file: str = typer.Argument(..., help="Profile as YAML or JSON"),
) -> None:
    """Compute the points and rank of a profile file."""
    path = Path(profile_file).expanduser()
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        raise typer.Exit(code=1)

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        console.print(f"[red]✗ Invalid profile file: {e}[/red]")
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        console.print("[red]✗ Profile file must contain a mapping[/red]")
        raise typer.Exit(code=1)

    profile = Profile.from_dict(data)
    points = calculate_points(profile)
    rank = calculate_rank(points)
    nxt = points_to_next_rank(points)

    console.print(f"[bold]{profile.username or path.stem}[/bold]")
    console.print(f"  [dim]points:[/dim] {points}")
    console.print(f"  [dim]rank:[/dim]   {_rank_title(rank)} ({rank})")
    if nxt.points_needed:
        console.print(f"  [dim]next:[/dim]   {_rank_title(nxt.next_rank)} in {nxt.points_needed} points")
    else:
        console.print("  [dim]next:[/dim]   top rank reached")


@app.command()
def rank(points: int = typer.Argument(..., help="Points total")) -> None:
    """Show the rank for a points total."""
    name = calculate_rank(points)
    nxt = points_to_next_rank(points)
    console.print(f"{_rank_title(name)} [dim]({name})[/dim]")
    console.print(f"  [dim]progress:[/dim] {rank_progress(points):.1f}%")
    if nxt.points_needed:
        console.print(f"  [dim]next:[/dim]     {_rank_title(nxt.next_rank)} in {nxt.points_needed} points")


@app.command()
def ranks() -> None:
    """List the rank tiers."""
    from rich.table import Table

    table = Table(show_header=True, header_style="bold")
    table.add_column("Rank")
    table.add_column("Name")
    table.add_column("From", justify="right")
    for r in RANKS:
        table.add_row(r.title, r.name, str(r.threshold))
    console.print(table)


@app.command()
def leaderboard(
    filter: str = typer.Option("all", "--filter", "-f", help="all, top10 or masters"),
    db_path: str | None = typer.Option(None, "--db", help="Database file (default from config)"),
) -> None:
    """Show profiles ranked by points."""
    if filter not in LEADERBOARD_FILTERS:
        console.print(
            f"[red]✗ Unknown filter '{filter}'. Use one of: {', '.join(LEADERBOARD_FILTERS)}[/red]"
        )
        raise typer.Exit(code=1)

    entries = list_leaderboard(_open_db(db_path), filter)
    if not entries:
        console.print("[yellow]No profiles yet[/yellow]")
        return

    from rich.table import Table

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("User")
    table.add_column("Points", justify="right")
    table.add_column("Rank")
    for e in entries:
        table.add_row(str(e["position"]), e["username"], str(e["points"]), _rank_title(e["rank"]))
    console.print(table)


@app.command()
def lesson(
    course_id: str = typer.Argument(..., help="Course ID (e.g., 'python-basics')"),
    lesson_id: str = typer.Argument(..., help="Lesson ID (e.g., 'variables')"),
) -> None:
    """Render a lesson in the terminal."""
    from rich.markdown import Markdown
    from rich.panel import Panel

    found = _lesson_or_exit(course_id, lesson_id)
    console.print(Panel(f"[bold]{found.title}[/bold]\n{found.estimated_time} min", expand=False))
    if found.key_points:
        for point in found.key_points:
            console.print(f"  • {point}")
        console.print()
    console.print(Markdown(found.content))
    if found.exercise:
        console.print(Panel(found.exercise.description, title="Exercise", expand=False))


@app.command()
def narrate(
    course_id: str = typer.Argument(..., help="Course ID"),
    lesson_id: str = typer.Argument(..., help="Lesson ID"),
    section_id: str | None = typer.Option(None, "--section", "-s", help="Narrate one section only"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the script without synthesizing"),
) -> None:
    """Generate narration audio for a lesson or one of its sections."""
    config = load_app_config()
    found = _lesson_or_exit(course_id, lesson_id)

    section = None
    if section_id:
        section = next((s for s in do_sectionize(found.content) if s.id == section_id), None)
        if section is None:
            console.print(f"[red]✗ Section '{section_id}' not found in lesson '{lesson_id}'[/red]")
            raise typer.Exit(code=1)

    script = section_script(section) if section else lesson_script(found)
    if dry_run:
        console.print(script)
        return

    service = NarrationService(get_speech_provider(config), config.audio_cache_dir)
    if not service.provider.is_configured:
        console.print(
            f"[yellow]⚠ Speech is not configured. Set {config.speech.api_key_env} "
            f"or use --dry-run.[/yellow]"
        )
        raise typer.Exit(code=1)

    path = service.narrate(script)
    if path is None:
        console.print("[red]✗ Narration failed; see log for details[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]✓ Audio ready[/green]  [dim]{path}[/dim]")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Your question"),
    course_id: str = typer.Option("python-basics", "--course", "-c", help="Course ID"),
    lesson_id: str = typer.Option("variables", "--lesson", "-l", help="Lesson ID"),
    mock: bool = typer.Option(False, "--mock", help="Use canned answers, no model calls"),
) -> None:
    """Ask the AI assistant a question about a lesson."""
    from rich.markdown import Markdown

    found = _lesson_or_exit(course_id, lesson_id)
    assistant = MockAssistant() if mock else get_assistant(load_app_config())
    answer = assistant.answer_question(question, found.content, found.title)

    console.print(Markdown(answer.answer))
    console.print(
        f"\n[dim]confidence {answer.confidence:.2f} · {', '.join(answer.sources)}[/dim]"
    )


@app.command()
def path(
    goal: str = typer.Argument(..., help="Learning goal (e.g., 'Web Development')"),
    mock: bool = typer.Option(False, "--mock", help="Use canned content, no model calls"),
) -> None:
    """Generate a learning path for a goal."""
    assistant = MockAssistant() if mock else get_assistant(load_app_config())
    steps = assistant.generate_learning_path(goal)

    console.print(f"[bold]Learning path: {goal}[/bold]")
    for i, step in enumerate(steps, start=1):
        console.print(f"  {i}. {step}")


@app.command()
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    if not (ctx.obj or {}).get("verbose"):
        _configure_logging(logging.INFO)

    console.print(f"[blue]Serving AeonWise API on http://{host}:{port}[/blue]")
    uvicorn.run(
        "aeonwise.web.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
