"""Pipeline event store implementations."""

import json
from pathlib import Path

from changeguard.domain.interfaces import PipelineEventStoreInterface
from changeguard.domain.pipeline_event import PipelineEvent, PipelineEventType
from changeguard.domain.serialization import event_from_dict, event_to_dict


class InMemoryPipelineEventStore(PipelineEventStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self) -> None:
        self._events: list[PipelineEvent] = []

    def store_event(self, event: PipelineEvent) -> str:
        self._events.append(event)
        return event.event_id

    def get_events(
        self,
        request_id: str,
        event_type: PipelineEventType | None = None,
    ) -> list[PipelineEvent]:
        return [
            e
            for e in self._events
            if e.request_id == request_id
            and (event_type is None or e.event_type == event_type)
        ]


class FilesystemPipelineEventStore(PipelineEventStoreInterface):
    """Filesystem implementation storing one JSONL file per request."""

    def __init__(self, base_path: str | Path) -> None:
        self.base_path = Path(base_path)
        self.events_dir = self.base_path / "events"
        self.events_dir.mkdir(parents=True, exist_ok=True)

    def _get_request_file(self, request_id: str) -> Path:
        return self.events_dir / f"{request_id}.jsonl"

    def store_event(self, event: PipelineEvent) -> str:
        path = self._get_request_file(event.request_id)
        with open(path, "a") as f:
            f.write(json.dumps(event_to_dict(event)) + "\n")
        return event.event_id

    def get_events(
        self,
        request_id: str,
        event_type: PipelineEventType | None = None,
    ) -> list[PipelineEvent]:
        path = self._get_request_file(request_id)
        if not path.exists():
            return []
        events: list[PipelineEvent] = []
        with open(path) as f:
            for line in f:
                event = event_from_dict(json.loads(line))
                if event_type and event.event_type != event_type:
                    continue
                events.append(event)
        return events
