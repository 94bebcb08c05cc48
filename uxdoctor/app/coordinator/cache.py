"""
In-memory analysis report cache.

Reports are keyed by the SHA-256 digest of the canonical request and
expire after a fixed TTL. A TTL of 0 disables caching.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Optional, Tuple

from uxdoctor.app.schemas.report import AnalysisReport
from uxdoctor.app.utils.hashing import stable_digest


def request_cache_key(
    *,
    raw_snapshot: Any,
    page_url: str,
    business_context: Any,
) -> str:
    return stable_digest(
        {
            "snapshot": raw_snapshot,
            "page_url": page_url,
            "business_context": business_context,
        }
    )


class ReportCache:
    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds < 0:
            raise ValueError("ttl_seconds must be non-negative")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[float, AnalysisReport]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[AnalysisReport]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, report = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return report

    def set(self, key: str, report: AnalysisReport) -> None:
        if not self.enabled:
            return
        self.purge_expired()
        self._entries[key] = (self._clock() + self._ttl, report)

    def purge_expired(self) -> None:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()
