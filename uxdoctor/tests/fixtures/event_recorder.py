from typing import List

from uxdoctor.app.events import AnalysisEvent, AnalysisEventType


class RecordingEmitter:
    """Collects every emitted event, in order."""

    def __init__(self) -> None:
        self.events: List[AnalysisEvent] = []

    async def emit(self, event: AnalysisEvent) -> None:
        self.events.append(event)

    @property
    def types(self) -> List[AnalysisEventType]:
        return [event.event_type for event in self.events]

    def first(self, event_type: AnalysisEventType) -> AnalysisEvent:
        for event in self.events:
            if event.event_type == event_type:
                return event
        raise AssertionError(f"No {event_type.value} event was emitted")
