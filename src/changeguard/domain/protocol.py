"""
Worker protocol envelopes.

A worker is invoked with exactly one WorkerRequest and answers with exactly
one WorkerResponse. Payloads are plain JSON-compatible dicts; the typed
records inside them are converted by domain.serialization. Schema
validation of the wire form lives in changeguard.schemas.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from changeguard.domain.exceptions import ProtocolError


class WorkerRole(str, Enum):
    DEVELOPER = "developer"
    TESTER = "tester"


@dataclass(frozen=True)
class WorkerRequest:
    """Input envelope sent to a worker process."""

    role: WorkerRole
    request_id: str
    attempt: int
    settings: dict[str, Any] = field(default_factory=dict)
    payload: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "requestId": self.request_id,
            "attempt": self.attempt,
            "settings": self.settings,
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkerRequest":
        try:
            return cls(
                role=WorkerRole(data["role"]),
                request_id=data["requestId"],
                attempt=data["attempt"],
                settings=data.get("settings", {}),
                payload=data.get("payload", {}),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise ProtocolError(f"Invalid request envelope: {e}") from e


@dataclass(frozen=True)
class WorkerResponse:
    """
    Output envelope written by a worker process.

    Exactly one of payload (on success) or error (on failure) is set.
    """

    success: bool
    request_id: str
    payload: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def ok(cls, request_id: str, payload: dict[str, Any]) -> "WorkerResponse":
        return cls(success=True, request_id=request_id, payload=payload)

    @classmethod
    def failed(cls, request_id: str, error: str) -> "WorkerResponse":
        return cls(success=False, request_id=request_id, error=error)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success, "requestId": self.request_id}
        if self.success:
            data["payload"] = self.payload or {}
        else:
            data["error"] = self.error or ""
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkerResponse":
        try:
            if data["success"]:
                return cls.ok(data["requestId"], data["payload"])
            return cls.failed(data["requestId"], data["error"])
        except (KeyError, TypeError) as e:
            raise ProtocolError(f"Invalid response envelope: {e}") from e
