"""
Worker runners: how the orchestrator reaches its workers.
"""

from changeguard.infrastructure.workers.mock import MockWorkerRunner
from changeguard.infrastructure.workers.subprocess_runner import SubprocessWorkerRunner

__all__ = [
    "MockWorkerRunner",
    "SubprocessWorkerRunner",
]
