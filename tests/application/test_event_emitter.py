"""Tests for PipelineEventEmitter."""

from changeguard.application.event_emitter import PipelineEventEmitter
from changeguard.domain.models import ModelTier, PipelineState
from changeguard.domain.pipeline_event import PipelineEventType
from changeguard.infrastructure.persistence import InMemoryPipelineEventStore


class TestPipelineEventEmitter:
    """Tests for event construction."""

    def test_events_are_tagged_with_request_and_state(self) -> None:
        """Every event carries the request id, a state value and a timestamp."""
        store = InMemoryPipelineEventStore()
        emitter = PipelineEventEmitter(store, "req-1")

        emitter.state_enter(PipelineState.DEVELOP, attempt=1)
        emitter.worker_start(PipelineState.DEVELOP, "developer", 1, ModelTier.BASELINE)

        events = store.get_events("req-1")
        assert [e.event_type for e in events] == [
            PipelineEventType.STATE_ENTER,
            PipelineEventType.WORKER_START,
        ]
        assert all(e.state == "develop" and e.created_at for e in events)
        assert events[1].role == "developer"
        assert events[1].model_tier == "baseline"
        assert events[0].event_id != events[1].event_id

    def test_long_summaries_are_truncated(self) -> None:
        """Summaries are capped at 500 characters."""
        store = InMemoryPipelineEventStore()
        emitter = PipelineEventEmitter(store, "req-1")

        emitter.validation_fail(2, "x" * 2000)

        [event] = store.get_events("req-1", PipelineEventType.VALIDATION_FAIL)
        assert len(event.summary) == 500
        assert event.state == "validate"
        assert event.attempt == 2

    def test_escalate_records_new_tier(self) -> None:
        """ESCALATE is emitted in the retry state with the new tier."""
        store = InMemoryPipelineEventStore()
        PipelineEventEmitter(store, "req-1").escalate(1, ModelTier.ELEVATED)

        [event] = store.get_events("req-1")
        assert event.event_type == PipelineEventType.ESCALATE
        assert event.state == "retry"
        assert event.model_tier == "elevated"
