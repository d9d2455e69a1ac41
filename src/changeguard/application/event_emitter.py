"""Pipeline event emission service."""

import uuid
from datetime import datetime, timezone

from changeguard.domain.interfaces import PipelineEventStoreInterface
from changeguard.domain.models import ModelTier, PipelineState
from changeguard.domain.pipeline_event import PipelineEvent, PipelineEventType


class PipelineEventEmitter:
    """Emits pipeline events to a store.

    Provides convenience methods for emitting common pipeline events
    during a request's execution, handling ID generation and timestamps.
    """

    def __init__(
        self, event_store: PipelineEventStoreInterface, request_id: str
    ) -> None:
        self._store = event_store
        self._request_id = request_id

    def _emit(
        self,
        event_type: PipelineEventType,
        state: PipelineState,
        role: str | None = None,
        attempt: int | None = None,
        model_tier: ModelTier | None = None,
        summary: str = "",
    ) -> str:
        return self._store.store_event(
            PipelineEvent(
                event_id=str(uuid.uuid4()),
                event_type=event_type,
                request_id=self._request_id,
                state=state.value,
                role=role,
                attempt=attempt,
                model_tier=model_tier.value if model_tier else None,
                summary=summary[:500],
                created_at=self._now(),
            )
        )

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def state_enter(self, state: PipelineState, attempt: int | None = None) -> None:
        """Emit STATE_ENTER event when the request enters a state."""
        self._emit(PipelineEventType.STATE_ENTER, state, attempt=attempt)

    def worker_start(
        self, state: PipelineState, role: str, attempt: int, model_tier: ModelTier
    ) -> None:
        """Emit WORKER_START event before a worker is invoked."""
        self._emit(
            PipelineEventType.WORKER_START,
            state,
            role=role,
            attempt=attempt,
            model_tier=model_tier,
        )

    def worker_failure(
        self, state: PipelineState, role: str, attempt: int, detail: str
    ) -> None:
        """Emit WORKER_FAILURE event when a worker call consumed an attempt."""
        self._emit(
            PipelineEventType.WORKER_FAILURE,
            state,
            role=role,
            attempt=attempt,
            summary=detail,
        )

    def validation_pass(self, attempt: int) -> None:
        self._emit(PipelineEventType.VALIDATION_PASS, PipelineState.VALIDATE, attempt=attempt)

    def validation_fail(self, attempt: int, summary: str) -> None:
        self._emit(
            PipelineEventType.VALIDATION_FAIL,
            PipelineState.VALIDATE,
            attempt=attempt,
            summary=summary,
        )

    def escalate(self, attempt: int, model_tier: ModelTier) -> None:
        """Emit ESCALATE event when the capability tier is raised."""
        self._emit(
            PipelineEventType.ESCALATE,
            PipelineState.RETRY,
            attempt=attempt,
            model_tier=model_tier,
        )

    def terminal(self, state: PipelineState, attempts: int, reason: str) -> None:
        """Emit TERMINAL event when the request reaches Finalize or Fail."""
        self._emit(PipelineEventType.TERMINAL, state, attempt=attempts, summary=reason)
