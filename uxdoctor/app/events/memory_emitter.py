from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Optional

from uxdoctor.app.events.emitter import AnalysisEventEmitter
from uxdoctor.app.events.models import AnalysisEvent, AnalysisEventType

logger = logging.getLogger(__name__)

TERMINAL_EVENTS = frozenset(
    {
        AnalysisEventType.ANALYSIS_COMPLETED,
        AnalysisEventType.ANALYSIS_FAILED,
    }
)


class MemoryQueueEventEmitter(AnalysisEventEmitter):
    """
    In-memory async event emitter used for SSE streaming.

    Single consumer, ordered, and closed by the first terminal event
    (completed or failed).
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Optional[AnalysisEvent]] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def emit(self, event: AnalysisEvent) -> None:
        if self._closed:
            return

        try:
            await self._queue.put(event)
        except Exception:
            # Observability must never break the analysis
            logger.warning("Dropped %s event", event.event_type.value)
            return

        if event.event_type in TERMINAL_EVENTS:
            await self.close()

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            await self._queue.put(None)

    async def stream(self) -> AsyncIterator[AnalysisEvent]:
        """Yield emitted events in order until the emitter closes."""
        while True:
            event = await self._queue.get()
            if event is None:
                break
            yield event
