"""
changeguard command line.

Usage:
    changeguard "align the comment field with the account column"
    changeguard --workspace ../app --max-attempts 5 add a notes field to contractors
    changeguard --config changeguard.json -v "fix the contractor api response"

Exit status is 0 when the request completes and 1 otherwise.
"""

from __future__ import annotations

import dataclasses
import sys
from pathlib import Path

import click

from changeguard.application import ChangeRequestOrchestrator
from changeguard.config import PipelineConfig, load_config
from changeguard.console import (
    print_error,
    print_failure,
    print_header,
    print_run_info,
    print_success,
    print_summary,
)
from changeguard.domain.exceptions import ConfigurationError
from changeguard.domain.interfaces import WorkerRunnerInterface
from changeguard.infrastructure.persistence import (
    FilesystemArtifactStore,
    FilesystemPipelineEventStore,
)
from changeguard.infrastructure.workers import SubprocessWorkerRunner
from changeguard.logging_setup import setup_logging


def build_runner(config: PipelineConfig) -> WorkerRunnerInterface:
    return SubprocessWorkerRunner(timeout=config.worker_timeout)


def apply_overrides(
    config: PipelineConfig,
    workspace: str | None,
    artifact_dir: str | None,
    max_attempts: int | None,
    timeout: float | None,
) -> PipelineConfig:
    """CLI options win over config file values."""
    changes: dict[str, object] = {}
    if artifact_dir is not None:
        changes["artifact_dir"] = artifact_dir
    if max_attempts is not None:
        changes["max_attempts"] = max_attempts
    if timeout is not None:
        changes["worker_timeout"] = timeout
    worker_workspace = workspace if workspace is not None else config.worker.workspace
    # Workers may run with another cwd
    changes["worker"] = dataclasses.replace(
        config.worker, workspace=str(Path(worker_workspace).resolve())
    )
    return dataclasses.replace(config, **changes)


@click.command()
@click.argument("request", nargs=-1, required=True)
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(),
    help="Path to a JSON pipeline config",
)
@click.option(
    "--workspace",
    default=None,
    type=click.Path(file_okay=False),
    help="Root of the application being changed (default: .)",
)
@click.option(
    "--artifact-dir",
    default=None,
    type=click.Path(file_okay=False),
    help="Directory for the audit trail (default: .changeguard)",
)
@click.option(
    "--max-attempts",
    default=None,
    type=click.IntRange(min=1),
    help="Maximum Develop/Test attempts (default: 3)",
)
@click.option(
    "--timeout",
    default=None,
    type=click.FloatRange(min=0, min_open=True),
    help="Wall-clock seconds per worker call (default: 300)",
)
@click.option("--log-file", default=None, type=click.Path(), help="Path to log file")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging")
def main(
    request: tuple[str, ...],
    config_path: str | None,
    workspace: str | None,
    artifact_dir: str | None,
    max_attempts: int | None,
    timeout: float | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """Drive a free-text change request to a verified change."""
    text = " ".join(request)
    logger = setup_logging("changeguard", log_file, verbose)

    try:
        config = load_config(Path(config_path)) if config_path else PipelineConfig()
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        print_error(str(e), "Check that the config file exists and is valid.")
        sys.exit(1)
    config = apply_overrides(config, workspace, artifact_dir, max_attempts, timeout)

    print_header("changeguard", text)
    print_run_info(
        workspace=config.worker.workspace,
        artifact_dir=config.artifact_dir,
        max_attempts=config.max_attempts,
        timeout=config.worker_timeout,
        log_file=log_file,
    )

    store = FilesystemArtifactStore(config.artifact_dir)
    event_store = (
        FilesystemPipelineEventStore(config.artifact_dir) if config.record_events else None
    )
    orchestrator = ChangeRequestOrchestrator(build_runner(config), store, config, event_store)

    try:
        result = orchestrator.run(text)
    except Exception as e:
        logger.exception("Pipeline aborted")
        print_error(
            f"{type(e).__name__}: {e}",
            f"An error report was written under {config.artifact_dir}.",
        )
        sys.exit(1)

    print_summary(result)
    terminal = result.terminal
    if result.succeeded:
        print_success(f"Request {terminal.request_id} completed in {terminal.attempts} attempts")
        sys.exit(0)
    print_failure(
        f"Request {terminal.request_id} failed: {terminal.reason}",
        terminal.recommendation,
    )
    sys.exit(1)
