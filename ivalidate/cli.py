"""Command-line interface for the idea validation pipeline."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ivalidate import __version__
from ivalidate.config import configure_logging, get_settings
from ivalidate.errors import IdeaValidationError
from ivalidate.models.enums import StepStatus
from ivalidate.models.validation import RefinedIdea, StepRecord, ValidationTrigger
from ivalidate.pipeline import PipelineResult, build_progress, create_validation, run_validation_pipeline
from ivalidate.storage import RecordStore, generate_id

app = typer.Typer(
    name="ivalidate",
    help="iValidate - Evidence-based startup idea validation",
    add_completion=False,
)
console = Console()

_STEP_STYLES = {
    StepStatus.PENDING: "dim",
    StepStatus.PROCESSING: "yellow",
    StepStatus.COMPLETED: "green",
    StepStatus.FAILED: "red",
}


async def _validate(
    description: str,
    refined: Optional[RefinedIdea],
    validation_id: str,
) -> PipelineResult:
    from ivalidate.llm import OllamaTextProvider
    from ivalidate.research import refine_idea
    from ivalidate.sources import RedditDiscussionSource

    settings = get_settings()
    store = RecordStore.from_settings(settings)
    provider = OllamaTextProvider()

    if refined is None:
        console.print("[yellow]Refining idea...[/yellow]")
        refined = await refine_idea(description, provider, settings)
        _display_refined(refined)

    trigger = ValidationTrigger(id=validation_id, idea_description=description, refined_idea=refined)
    await create_validation(trigger, store)
    return await run_validation_pipeline(
        trigger, store, provider, RedditDiscussionSource(settings), settings
    )


@app.command()
def validate(
    description: str = typer.Argument(..., help="Free-form idea description"),
    one_liner: Optional[str] = typer.Option(None, "--one-liner", help="Refined one-sentence idea"),
    audience: Optional[str] = typer.Option(None, "--audience", help="Target audience"),
    problem: Optional[str] = typer.Option(None, "--problem", help="Problem the idea solves"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the Markdown evidence report to this file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """Validate an idea in the foreground and print its score."""
    configure_logging("DEBUG" if verbose else "WARNING", json_output=False)

    refined = None
    if one_liner or audience or problem:
        if not (one_liner and audience and problem):
            console.print("[red]Error:[/red] --one-liner, --audience and --problem must be given together")
            raise typer.Exit(code=2)
        refined = RefinedIdea(one_liner=one_liner, target_audience=audience, problem=problem)

    validation_id = generate_id()
    console.print(
        Panel.fit(
            "[bold blue]iValidate[/bold blue]\n"
            f"Validating idea [dim]({validation_id})[/dim]...",
            border_style="blue",
        )
    )

    try:
        result = asyncio.run(_validate(description, refined, validation_id))
    except IdeaValidationError as e:
        console.print(f"\n[red]Error:[/red] {e}")
        sys.exit(1)

    _display_steps(result.steps)

    if not result.success:
        console.print(f"\n[red]Validation failed:[/red] {result.error}")
        sys.exit(1)

    _display_score(result)

    if output and result.formatted_report:
        output.write_text(result.formatted_report, encoding="utf-8")
        console.print(f"\n[green]Report saved to:[/green] {output}")


@app.command()
def status(validation_id: str = typer.Argument(..., help="Validation run id")) -> None:
    """Show the progress of a validation run."""
    configure_logging("WARNING", json_output=False)
    store = RecordStore.from_settings(get_settings())

    try:
        record = asyncio.run(store.load_validation(validation_id))
    except (IdeaValidationError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if record is None:
        console.print(f"[red]No validation found with ID:[/red] {validation_id}")
        sys.exit(1)

    snapshot = build_progress(record)
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("Status", snapshot.status.value)
    table.add_row("Progress", f"{snapshot.progress}%")
    table.add_row("Current step", snapshot.current_step)
    if snapshot.estimated_time_remaining is not None:
        table.add_row("Time remaining", f"~{snapshot.estimated_time_remaining} min")
    if snapshot.error_message:
        table.add_row("Error", f"[red]{snapshot.error_message}[/red]")
    if snapshot.completed_at:
        table.add_row("Completed", snapshot.completed_at.isoformat())
    console.print(table)

    _display_steps(snapshot.processing_steps)


@app.command("cleanup-cache")
def cleanup_cache() -> None:
    """Remove expired and unreadable cache entries."""
    configure_logging("WARNING", json_output=False)
    store = RecordStore.from_settings(get_settings())
    removed = asyncio.run(store.cleanup_cache())
    console.print(f"[green]Removed {removed} cache entries[/green]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8100, help="Port"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("ivalidate.api.main:app", host=host, port=port, reload=False)


@app.command()
def info() -> None:
    """Display system information and configuration."""
    from ivalidate.llm.client import get_llm_settings

    settings = get_settings()
    llm = get_llm_settings()

    console.print(Panel.fit("[bold blue]iValidate[/bold blue]", border_style="blue"))

    table = Table(show_header=False, box=None)
    table.add_column("Setting", style="dim")
    table.add_column("Value")
    table.add_row("Version", __version__)
    table.add_row("LLM Model", llm.model_name)
    table.add_row("Ollama URL", llm.ollama_base_url)
    table.add_row("Data Directory", str(settings.data_dir))
    table.add_row("Discussion Source", settings.discussion_base_url)
    table.add_row("Provider Attempts", str(settings.provider_max_attempts))
    console.print(table)


def _display_refined(refined: RefinedIdea) -> None:
    table = Table(show_header=False, box=None)
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("One-liner", refined.one_liner)
    table.add_row("Audience", refined.target_audience)
    table.add_row("Problem", refined.problem)
    console.print(table)


def _display_steps(steps: list[StepRecord]) -> None:
    table = Table(title="Pipeline Steps")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Status")
    table.add_column("Details")

    for step in steps:
        style = _STEP_STYLES.get(step.status, "")
        details = step.error_message or step.description
        table.add_row(str(step.index), step.title, f"[{style}]{step.status.value}[/{style}]", details)

    console.print(table)


def _display_score(result: PipelineResult) -> None:
    score = result.final_score
    if score is None:
        return

    console.print("\n[bold]Validation Score[/bold]")
    console.print("-" * 40)

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="dim")
    table.add_column("Value")
    table.add_row("Overall", f"[bold]{score.overall.score}/100[/bold] (Grade {score.overall.grade.value})")
    table.add_row("Market demand", f"{score.market_demand.score}/100")
    table.add_row("Competition", f"{score.competition.score}/100")
    table.add_row("Confidence", f"{score.overall.confidence}%")
    table.add_row("Data points", str(result.total_data_points))
    if result.analysis:
        table.add_row("Recommendation", result.analysis.recommendation.value)
    console.print(table)

    if result.evidence_report:
        console.print("\n[bold]Key findings[/bold]")
        for finding in result.evidence_report.overall.key_findings:
            console.print(f"  [green]✓[/green] {finding}")


if __name__ == "__main__":
    app()
