"""
Filesystem implementation of the artifact store.

Provides persistent, append-only storage for audit artifacts.
"""

import json
import threading
from pathlib import Path
from typing import Any

from changeguard.domain.exceptions import ArtifactExistsError
from changeguard.domain.interfaces import ArtifactStoreInterface


class FilesystemArtifactStore(ArtifactStoreInterface):
    """
    Persistent, append-only artifact store.

    Objects live under objects/<key>; index.json maps each key to its path
    and kind, in write order, and is rewritten atomically on every store.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)
        self._objects_dir = self._base_dir / "objects"
        self._index_path = self._base_dir / "index.json"
        self._lock = threading.Lock()
        self._index: dict[str, Any] = self._load_or_create_index()

    def _load_or_create_index(self) -> dict[str, Any]:
        """Load existing index or create new one."""
        self._base_dir.mkdir(parents=True, exist_ok=True)
        self._objects_dir.mkdir(parents=True, exist_ok=True)

        if self._index_path.exists():
            with open(self._index_path) as f:
                result: dict[str, Any] = json.load(f)
                return result

        return {"version": "1.0", "artifacts": {}}

    def _update_index_atomic(self) -> None:
        """Atomically update index.json using write-to-temp + rename."""
        temp_path = self._index_path.with_suffix(".tmp")
        with open(temp_path, "w") as f:
            json.dump(self._index, f, indent=2)
        temp_path.replace(self._index_path)  # Atomic on POSIX

    def _object_path(self, key: str) -> Path:
        path = (self._objects_dir / key).resolve()
        if not path.is_relative_to(self._objects_dir.resolve()):
            raise ValueError(f"Artifact key escapes the store: {key}")
        return path

    def _write(self, key: str, kind: str, content: str) -> str:
        with self._lock:
            if key in self._index["artifacts"]:
                raise ArtifactExistsError(f"Artifact already stored: {key}")
            object_path = self._object_path(key)
            object_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                with open(object_path, "x") as f:
                    f.write(content)
            except FileExistsError as e:
                raise ArtifactExistsError(f"Artifact already on disk: {key}") from e
            self._index["artifacts"][key] = {
                "path": str(object_path.relative_to(self._base_dir.resolve())),
                "kind": kind,
            }
            self._update_index_atomic()
        return key

    def store_document(self, key: str, document: dict[str, Any]) -> str:
        return self._write(key, "json", json.dumps(document, indent=2))

    def store_text(self, key: str, text: str) -> str:
        return self._write(key, "text", text)

    def _read(self, key: str, kind: str) -> str:
        entry = self._index["artifacts"].get(key)
        if entry is None or entry["kind"] != kind:
            raise KeyError(f"Artifact not found: {key}")
        with open(self._base_dir / entry["path"]) as f:
            return f.read()

    def get_document(self, key: str) -> dict[str, Any]:
        result: dict[str, Any] = json.loads(self._read(key, "json"))
        return result

    def get_text(self, key: str) -> str:
        return self._read(key, "text")

    def keys(self, prefix: str = "") -> list[str]:
        return [k for k in self._index["artifacts"] if k.startswith(prefix)]
