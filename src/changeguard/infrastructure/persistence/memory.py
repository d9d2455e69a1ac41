"""
In-memory implementation of the artifact store.

Useful for testing and ephemeral runs.
"""

import copy
from typing import Any

from changeguard.domain.exceptions import ArtifactExistsError
from changeguard.domain.interfaces import ArtifactStoreInterface


class InMemoryArtifactStore(ArtifactStoreInterface):
    """Simple in-memory append-only store for testing."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._texts: dict[str, str] = {}
        self._order: list[str] = []

    def _claim(self, key: str) -> None:
        if key in self._documents or key in self._texts:
            raise ArtifactExistsError(f"Artifact already stored: {key}")
        self._order.append(key)

    def store_document(self, key: str, document: dict[str, Any]) -> str:
        self._claim(key)
        self._documents[key] = copy.deepcopy(document)
        return key

    def store_text(self, key: str, text: str) -> str:
        self._claim(key)
        self._texts[key] = text
        return key

    def get_document(self, key: str) -> dict[str, Any]:
        if key not in self._documents:
            raise KeyError(f"Document not found: {key}")
        return copy.deepcopy(self._documents[key])

    def get_text(self, key: str) -> str:
        if key not in self._texts:
            raise KeyError(f"Text not found: {key}")
        return self._texts[key]

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._order if k.startswith(prefix)]
