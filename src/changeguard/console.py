"""Rich console utilities for the changeguard CLI."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from changeguard.domain.models import PipelineResult

# Shared console instances
console = Console()
error_console = Console(stderr=True)


def print_header(title: str, subtitle: str | None = None) -> None:
    """Print a styled header panel."""
    content = Text(title, style="bold blue")
    if subtitle:
        content.append(f"\n{subtitle}", style="dim")
    console.print(Panel(content, expand=False))


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))


def print_success(message: str) -> None:
    """Print success message."""
    console.print(Panel(message, title="Success", border_style="green"))


def print_failure(message: str, details: str | None = None) -> None:
    """Print failure message."""
    content = Text(message, style="bold red")
    if details:
        content.append(f"\n{details}", style="dim")
    console.print(Panel(content, title="Failed", border_style="red"))


def print_run_info(
    workspace: str,
    artifact_dir: str,
    max_attempts: int,
    timeout: float,
    log_file: str | None,
) -> None:
    """Print run configuration info table."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    table.add_row("Workspace", workspace)
    table.add_row("Artifacts", artifact_dir)
    table.add_row("Max attempts", str(max_attempts))
    table.add_row("Worker timeout", f"{timeout:g}s")
    table.add_row("Log file", log_file or "N/A")

    console.print(table)


def print_summary(result: PipelineResult) -> None:
    """Print the attempt history of a finished request."""
    console.print("\n[bold]Attempt history:[/bold]")

    table = Table(show_header=True, box=None)
    table.add_column("Attempt", style="cyan", width=8)
    table.add_column("Tier", style="magenta", width=10)
    table.add_column("Files", width=6)
    table.add_column("Passed", width=8)
    table.add_column("Outcome (summary)")

    for record in result.attempts:
        files = str(len(record.manifest.files_modified)) if record.manifest else "-"
        if record.report is not None:
            summary = record.report.summary
            passed = f"{summary.passed}/{summary.total}"
            if record.report.all_passed:
                outcome = "all tests passed"
            else:
                outcome = "; ".join(f.details.reason for f in record.report.failures)
        else:
            passed = "-"
            outcome = record.worker_failure or "cancelled"
        table.add_row(str(record.attempt), record.model_tier.value, files, passed, outcome[:80])

    console.print(table)

    terminal = result.terminal
    for failing in terminal.failing_requirements:
        console.print(f"  [red]{failing.requirement_id}[/red]: {'; '.join(failing.reasons)}")
