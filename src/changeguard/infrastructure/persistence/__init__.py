"""
Persistence adapters for audit artifacts and pipeline events.
"""

from changeguard.infrastructure.persistence.events import (
    FilesystemPipelineEventStore,
    InMemoryPipelineEventStore,
)
from changeguard.infrastructure.persistence.filesystem import FilesystemArtifactStore
from changeguard.infrastructure.persistence.memory import InMemoryArtifactStore

__all__ = [
    "FilesystemArtifactStore",
    "FilesystemPipelineEventStore",
    "InMemoryArtifactStore",
    "InMemoryPipelineEventStore",
]
