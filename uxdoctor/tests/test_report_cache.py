import pytest

from uxdoctor.app.context.business_context import parse_business_context
from uxdoctor.app.coordinator.cache import ReportCache, request_cache_key
from uxdoctor.app.schemas.report import (
    AnalysisReport,
    AugmentationResult,
    ExecutiveSummary,
    ReportStatus,
)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _report(audit_id: str = "audit-1") -> AnalysisReport:
    return AnalysisReport(
        audit_id=audit_id,
        status=ReportStatus.NO_DATA,
        business_context=parse_business_context(None),
        augmentation=AugmentationResult(executed=False),
        summary=ExecutiveSummary(total_issues=0, severity_counts={}),
    )


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = ReportCache(60, clock=clock)
    report = _report()

    cache.set("k", report)
    clock.now += 59
    assert cache.get("k") is report

    clock.now += 1
    assert cache.get("k") is None
    assert len(cache) == 0


def test_set_purges_expired_entries():
    clock = FakeClock()
    cache = ReportCache(10, clock=clock)

    cache.set("old", _report("old"))
    clock.now += 30
    cache.set("new", _report("new"))

    assert len(cache) == 1
    assert cache.get("new").audit_id == "new"


def test_zero_ttl_disables_caching():
    cache = ReportCache(0)

    cache.set("k", _report())

    assert cache.enabled is False
    assert cache.get("k") is None


def test_negative_ttl_is_rejected():
    with pytest.raises(ValueError):
        ReportCache(-1)


def test_clear():
    cache = ReportCache(60)
    cache.set("k", _report())

    cache.clear()

    assert len(cache) == 0


def test_cache_key_ignores_dict_ordering():
    first = request_cache_key(
        raw_snapshot={"domTree": {"tagName": "body"}, "viewport": {"width": 1}},
        page_url="https://example.com",
        business_context="Key action: buy",
    )
    second = request_cache_key(
        raw_snapshot={"viewport": {"width": 1}, "domTree": {"tagName": "body"}},
        page_url="https://example.com",
        business_context="Key action: buy",
    )

    assert first == second
    assert len(first) == 64


def test_cache_key_depends_on_every_input():
    base = dict(raw_snapshot={}, page_url="https://example.com", business_context="")
    key = request_cache_key(**base)

    assert key != request_cache_key(**dict(base, page_url="https://example.org"))
    assert key != request_cache_key(**dict(base, business_context="Goal: sales"))
    assert key != request_cache_key(**dict(base, raw_snapshot={"domTree": None}))
