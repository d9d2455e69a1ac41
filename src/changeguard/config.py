"""Pipeline configuration: frozen settings and the JSON config loader."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import jsonschema

from changeguard.domain.exceptions import ConfigurationError
from changeguard.domain.models import ModelTier
from changeguard.schemas import validate_pipeline_config


@dataclass(frozen=True)
class WorkerSettings:
    """
    Everything a worker process needs to know about its environment.

    Travels inside every request envelope; workers read no environment
    variables.
    """

    workspace: str = "."
    layout_tolerance: float = 5.0
    inspector_url: str = "http://localhost:3001/inspect"
    app_base_url: str = "http://localhost:3000"
    api_endpoint: str = "/api/contractors"
    layout_surface: str = "/entities/contractors"
    layout_subject: str = "[data-field='comment']"
    layout_reference: str = "[data-field='accountName']"
    schema_sync_command: tuple[str, ...] = (
        "npx",
        "prisma",
        "db",
        "push",
        "--skip-generate",
    )
    schema_lint_command: tuple[str, ...] = ("npx", "prisma", "validate")
    command_timeout: float = 120.0
    probe_timeout: float = 10.0

    def to_dict(self) -> dict[str, Any]:
        """Wire form (camelCase), as carried in request envelopes."""
        return {
            "workspace": self.workspace,
            "layoutTolerance": self.layout_tolerance,
            "inspectorUrl": self.inspector_url,
            "appBaseUrl": self.app_base_url,
            "apiEndpoint": self.api_endpoint,
            "layoutSurface": self.layout_surface,
            "layoutSubject": self.layout_subject,
            "layoutReference": self.layout_reference,
            "schemaSyncCommand": list(self.schema_sync_command),
            "schemaLintCommand": list(self.schema_lint_command),
            "commandTimeout": self.command_timeout,
            "probeTimeout": self.probe_timeout,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkerSettings:
        """Inverse of to_dict; missing keys fall back to defaults."""
        defaults = cls()
        return cls(
            workspace=data.get("workspace", defaults.workspace),
            layout_tolerance=data.get("layoutTolerance", defaults.layout_tolerance),
            inspector_url=data.get("inspectorUrl", defaults.inspector_url),
            app_base_url=data.get("appBaseUrl", defaults.app_base_url),
            api_endpoint=data.get("apiEndpoint", defaults.api_endpoint),
            layout_surface=data.get("layoutSurface", defaults.layout_surface),
            layout_subject=data.get("layoutSubject", defaults.layout_subject),
            layout_reference=data.get("layoutReference", defaults.layout_reference),
            schema_sync_command=tuple(
                data.get("schemaSyncCommand", defaults.schema_sync_command)
            ),
            schema_lint_command=tuple(
                data.get("schemaLintCommand", defaults.schema_lint_command)
            ),
            command_timeout=data.get("commandTimeout", defaults.command_timeout),
            probe_timeout=data.get("probeTimeout", defaults.probe_timeout),
        )


@dataclass(frozen=True)
class PipelineConfig:
    """Orchestrator configuration."""

    max_attempts: int = 3
    worker_timeout: float = 300.0  # Wall-clock seconds per worker call
    artifact_dir: str = ".changeguard"
    record_events: bool = True
    baseline_model: str = "sonnet"
    elevated_model: str = "opus"
    worker: WorkerSettings = field(default_factory=WorkerSettings)

    def model_for(self, tier: ModelTier) -> str:
        return self.elevated_model if tier == ModelTier.ELEVATED else self.baseline_model


def _worker_settings_from_file(data: dict[str, Any]) -> WorkerSettings:
    known = {f.name for f in fields(WorkerSettings)}
    values = {k: v for k, v in data.items() if k in known}
    for key in ("schema_sync_command", "schema_lint_command"):
        if key in values:
            values[key] = tuple(values[key])
    return WorkerSettings(**values)


def load_config(path: Path) -> PipelineConfig:
    """
    Load pipeline configuration from a JSON file.

    Keys are snake_case; see pipeline_config.schema.json. Absent keys keep
    their defaults.

    Args:
        path: Path to the config file

    Returns:
        The validated PipelineConfig

    Raises:
        ConfigurationError: If the file is missing, not JSON, or invalid
    """
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    try:
        validate_pipeline_config(data)
    except jsonschema.ValidationError as e:
        location = ".".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigurationError(f"Invalid config in {path} at {location}: {e.message}") from e

    defaults = PipelineConfig()
    models = data.get("models", {})
    return PipelineConfig(
        max_attempts=data.get("max_attempts", defaults.max_attempts),
        worker_timeout=data.get("worker_timeout", defaults.worker_timeout),
        artifact_dir=data.get("artifact_dir", defaults.artifact_dir),
        record_events=data.get("record_events", defaults.record_events),
        baseline_model=models.get("baseline", defaults.baseline_model),
        elevated_model=models.get("elevated", defaults.elevated_model),
        worker=_worker_settings_from_file(data.get("worker", {})),
    )
