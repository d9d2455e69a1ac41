"""
Developer worker: applies requirements to the workspace as textual edits.

Target files come from the static lookup tables in domain.keywords and the
edits from workers.transformations. A file is written only when its
content actually changes, so re-applying a requirement is a no-op.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from changeguard.domain.exceptions import NonFatalSideEffectFailure
from changeguard.domain.interfaces import SchemaSyncInterface
from changeguard.domain.keywords import (
    API_FILE_TARGETS,
    CONTRACTOR_TYPES,
    FIX_STRATEGY_KEYWORDS,
    SCHEMA_FILE,
    TYPE_FILE_TARGETS,
    UI_FILE_TARGETS,
    has_any,
    lookup_files,
    tokenize,
)
from changeguard.domain.models import (
    Analysis,
    ChangeEntry,
    ChangeManifest,
    ModelTier,
    Requirement,
    RequirementType,
)
from changeguard.workers.transformations import (
    TransformationRule,
    select_rule,
    strategy_rules,
)

logger = logging.getLogger("changeguard.developer")


def fix_strategies(reasons: tuple[str, ...]) -> list[str]:
    """Fix strategies suggested by failure reasons, in table order."""
    tokens = set(tokenize(" ".join(reasons)))
    return [name for name, keywords in FIX_STRATEGY_KEYWORDS if has_any(tokens, keywords)]


def target_files(requirement_type: RequirementType, description: str) -> list[str]:
    """Candidate files for a requirement type and description."""
    tokens = set(tokenize(description))
    if requirement_type == RequirementType.UI:
        return lookup_files(tokens, UI_FILE_TARGETS)
    if requirement_type == RequirementType.API:
        return lookup_files(tokens, API_FILE_TARGETS)
    if requirement_type == RequirementType.DATABASE:
        return [SCHEMA_FILE, CONTRACTOR_TYPES]
    if requirement_type == RequirementType.GENERIC:
        files: list[str] = []
        for table in (UI_FILE_TARGETS, API_FILE_TARGETS, TYPE_FILE_TARGETS):
            for target in lookup_files(tokens, table):
                if target not in files:
                    files.append(target)
        return files
    return []


@dataclass
class _ManifestBuilder:
    changes: list[ChangeEntry] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    def record(self, file: str, requirement_id: str, description: str) -> None:
        self.changes.append(ChangeEntry(file, requirement_id, description))
        if file not in self.files:
            self.files.append(file)


class Developer:
    """Applies requirements to files under a workspace root."""

    def __init__(self, workspace: str | Path, schema_sync: SchemaSyncInterface):
        """
        Args:
            workspace: Root that target paths are relative to
            schema_sync: Pushes schema changes after database requirements
        """
        self._workspace = Path(workspace)
        self._schema_sync = schema_sync
        self._handlers: dict[
            RequirementType, Callable[[Requirement, dict[str, Requirement], _ManifestBuilder], None]
        ] = {
            RequirementType.UI: self._handle_standard,
            RequirementType.API: self._handle_standard,
            RequirementType.GENERIC: self._handle_standard,
            RequirementType.DATABASE: self._handle_database,
            RequirementType.FIX: self._handle_fix,
        }

    def develop(
        self,
        request_id: str,
        attempt: int,
        requirements: list[Requirement],
        model_tier: ModelTier,
        model: str,
        context: Analysis | None = None,
    ) -> ChangeManifest:
        """
        Apply every requirement in order and describe what changed.

        Per-file failures become notes; they never abort the other edits.

        Args:
            request_id: Change request id, echoed in the manifest
            attempt: Attempt number that produced this manifest
            requirements: Full requirement list, fix requirements included
            model_tier: Capability tier of this attempt
            model: Model name for the tier
            context: Request analysis, if available

        Returns:
            ChangeManifest for this attempt
        """
        if context is not None:
            logger.debug(
                "Context: areas=%s environment=%s",
                ",".join(context.affected_areas),
                context.target_environment.value,
            )
        logger.info(
            "Applying %d requirements (attempt %d, %s tier)",
            len(requirements),
            attempt,
            model_tier.value,
        )
        by_id = {r.id: r for r in requirements}
        builder = _ManifestBuilder()
        for requirement in requirements:
            self._handlers[requirement.type](requirement, by_id, builder)

        return ChangeManifest(
            request_id=request_id,
            attempt=attempt,
            model_tier=model_tier,
            model=model,
            changes=tuple(builder.changes),
            files_modified=tuple(builder.files),
            notes=tuple(builder.notes),
            created_at=datetime.now(timezone.utc).isoformat(),
        )

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _handle_standard(
        self,
        requirement: Requirement,
        by_id: dict[str, Requirement],
        builder: _ManifestBuilder,
    ) -> None:
        tokens = set(tokenize(requirement.description))
        for file in target_files(requirement.type, requirement.description):
            rule = select_rule(tokens, file)
            if rule is not None:
                self._apply(file, requirement, requirement.description, [rule], builder)

    def _handle_database(
        self,
        requirement: Requirement,
        by_id: dict[str, Requirement],
        builder: _ManifestBuilder,
    ) -> None:
        self._handle_standard(requirement, by_id, builder)
        self._sync_schema(builder)

    def _handle_fix(
        self,
        requirement: Requirement,
        by_id: dict[str, Requirement],
        builder: _ManifestBuilder,
    ) -> None:
        context = requirement.failure_context
        if context is None:
            logger.warning("Fix requirement %s has no failure context; skipped", requirement.id)
            builder.notes.append(f"{requirement.id}: skipped, no failure context")
            return

        origin = by_id.get(requirement.origin_requirement_id or context.requirement_id)
        if origin is None:
            logger.warning(
                "Fix requirement %s refers to unknown requirement %s; skipped",
                requirement.id,
                context.requirement_id,
            )
            builder.notes.append(f"{requirement.id}: skipped, unknown origin requirement")
            return

        description = " ".join((origin.description, *context.reasons))
        strategies = fix_strategies(context.reasons)
        logger.info(
            "Fix %s for %s: strategies %s",
            requirement.id,
            origin.id,
            ", ".join(strategies) or "none",
        )
        tokens = set(tokenize(description))
        for file in target_files(origin.type, origin.description):
            rules = strategy_rules(strategies, file)
            if not rules:
                rule = select_rule(tokens, file)
                rules = [rule] if rule is not None else []
            if rules:
                self._apply(file, requirement, description, rules, builder)

        if origin.type == RequirementType.DATABASE:
            self._sync_schema(builder)

    # =========================================================================
    # FILE EDITS
    # =========================================================================

    def _apply(
        self,
        file: str,
        requirement: Requirement,
        description: str,
        rules: list[TransformationRule],
        builder: _ManifestBuilder,
    ) -> None:
        """Run rules over one file and write it back only if it changed."""
        path = self._workspace / file
        try:
            original = path.read_text(encoding="utf-8")
            updated = original
            for rule in rules:
                updated = rule.transform(updated, description)
            if updated == original:
                logger.debug("%s already satisfies %s", file, requirement.id)
                return
            path.write_text(updated, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            logger.warning("Could not modify %s for %s: %s", file, requirement.id, e)
            builder.notes.append(f"{file}: {e}")
            return

        names = ", ".join(rule.name for rule in rules)
        logger.info("Modified %s (%s) for %s", file, names, requirement.id)
        builder.record(file, requirement.id, f"{names}: {requirement.description}")

    def _sync_schema(self, builder: _ManifestBuilder) -> None:
        try:
            self._schema_sync.sync()
        except NonFatalSideEffectFailure as e:
            logger.warning("Schema sync failed: %s", e)
            builder.notes.append(f"schema sync: {e}")
