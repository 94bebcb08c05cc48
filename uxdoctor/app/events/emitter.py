from __future__ import annotations

from typing import Protocol

from uxdoctor.app.events.models import AnalysisEvent


class AnalysisEventEmitter(Protocol):
    """
    Interface for broadcasting analysis observations.

    Implementations must be non-blocking and fail-safe: emission failures
    must not crash the analysis.
    """

    async def emit(self, event: AnalysisEvent) -> None:
        ...


class NullEventEmitter:
    """
    A safe no-op emitter.

    Used for synchronous requests and tests that do not care about events.
    """

    async def emit(self, event: AnalysisEvent) -> None:
        return
