"""
Schema collaborators backed by the Prisma CLI.

Both run a configurable command in the workspace with a wall-clock timeout.
"""

import logging
import subprocess
from collections.abc import Sequence

from changeguard.domain.exceptions import CheckerException, NonFatalSideEffectFailure
from changeguard.domain.interfaces import SchemaLinterInterface, SchemaSyncInterface

logger = logging.getLogger("changeguard.collaborators.prisma")

DEFAULT_SYNC_COMMAND = ("npx", "prisma", "db", "push", "--skip-generate")
DEFAULT_LINT_COMMAND = ("npx", "prisma", "validate")


def _run(command: Sequence[str], cwd: str, timeout: float) -> subprocess.CompletedProcess[str]:
    logger.debug("Running %s in %s", " ".join(command), cwd)
    return subprocess.run(
        list(command),
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


class PrismaSchemaSync(SchemaSyncInterface):
    """Pushes prisma/schema.prisma to the database (`prisma db push`)."""

    def __init__(
        self,
        workspace: str,
        command: Sequence[str] = DEFAULT_SYNC_COMMAND,
        timeout: float = 120.0,
    ):
        self._workspace = workspace
        self._command = tuple(command)
        self._timeout = timeout

    def sync(self) -> None:
        """
        Raises:
            NonFatalSideEffectFailure: On non-zero exit, timeout or a missing binary
        """
        try:
            result = _run(self._command, self._workspace, self._timeout)
        except subprocess.TimeoutExpired as e:
            raise NonFatalSideEffectFailure(
                f"schema sync timed out after {self._timeout:g}s"
            ) from e
        except OSError as e:
            raise NonFatalSideEffectFailure(f"schema sync could not start: {e}") from e

        if result.returncode != 0:
            tail = (result.stderr or result.stdout).strip()[-500:]
            raise NonFatalSideEffectFailure(
                f"schema sync exited with {result.returncode}: {tail}"
            )
        logger.info("Database schema updated")


class PrismaSchemaLinter(SchemaLinterInterface):
    """Validates prisma/schema.prisma (`prisma validate`)."""

    def __init__(
        self,
        workspace: str,
        command: Sequence[str] = DEFAULT_LINT_COMMAND,
        timeout: float = 120.0,
    ):
        self._workspace = workspace
        self._command = tuple(command)
        self._timeout = timeout

    def lint(self) -> list[str]:
        """
        Returns:
            Error lines reported by the linter; empty when the schema is valid

        Raises:
            CheckerException: On timeout or a missing binary
        """
        try:
            result = _run(self._command, self._workspace, self._timeout)
        except subprocess.TimeoutExpired as e:
            raise CheckerException(
                f"schema linter timed out after {self._timeout:g}s"
            ) from e
        except OSError as e:
            raise CheckerException(f"schema linter could not start: {e}") from e

        if result.returncode == 0:
            return []
        output = (result.stderr or "") + (result.stdout or "")
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        errors = [line for line in lines if "error" in line.lower()]
        return errors or lines or [f"linter exited with {result.returncode}"]
