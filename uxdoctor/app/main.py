"""
FastAPI entrypoint for the UXDoctor analysis service.

This module defines the public HTTP interface for page analysis. It accepts
a raw DOM/accessibility snapshot crawled upstream, invokes the central
coordinator, and returns a structured AnalysisReport.

The application does not crawl, render or persist anything. An absent
snapshot is a valid request and yields a no_data report.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.responses import Response

from uxdoctor.app.augmentation import build_llm_client
from uxdoctor.app.config import UXDoctorConfig
from uxdoctor.app.coordinator.coordinator import AnalysisCoordinator
from uxdoctor.app.normalizer import count_nodes
from uxdoctor.app.rules.catalog import ENGINE_RULES, categories_by_weight
from uxdoctor.app.schemas.report import AnalysisReport

# Events / streaming
from uxdoctor.app.events import MemoryQueueEventEmitter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Presentation helpers (presentation-only)
# ---------------------------------------------------------------------------

def pretty_json(data: Any) -> str:
    """
    Pretty-print JSON for human-readable output.

    PRESENTATION ONLY:
    - MUST NOT be used for cache keys
    - MUST NOT be embedded into prompts
    """
    return json.dumps(
        data,
        ensure_ascii=False,
        allow_nan=False,
        indent=2,
        separators=(", ", ": "),
    )


class PrettyJSONResponse(Response):
    """Pretty-printed JSON response for human-readable console output."""

    media_type = "application/json"

    def render(self, content: Any) -> bytes:
        return pretty_json(content).encode("utf-8")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    snapshot: Optional[Dict[str, Any]] = Field(
        None,
        description="Raw DOM/accessibility snapshot from the crawler",
    )

    page_url: str = Field(
        "",
        description="URL of the analyzed page",
    )

    business_context: Optional[str] = Field(
        None,
        description="Free-text business context (industry, goal, key action...)",
    )

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Application setup
# ---------------------------------------------------------------------------

app = FastAPI(
    title="UXDoctor Service",
    description="Deterministic usability analysis of crawled web pages",
    version="0.1.0",
)


# ---------------------------------------------------------------------------
# Startup / Shutdown
# ---------------------------------------------------------------------------

@app.on_event("startup")
def startup_event() -> None:
    """
    Application startup hook.

    Configuration is loaded once and treated as immutable for the lifetime
    of the process. The LLM client is wired explicitly here.
    """
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = UXDoctorConfig.from_env()

    llm_client = None
    if config.ENABLE_LLM_AUGMENTATION:
        llm_client = build_llm_client(config)

    coordinator = AnalysisCoordinator.from_config(
        config,
        llm_client=llm_client,
    )

    app.state.config = config
    app.state.coordinator = coordinator

    logger.info(
        "UXDoctor started (llm_augmentation=%s)",
        config.ENABLE_LLM_AUGMENTATION,
    )


@app.on_event("shutdown")
def shutdown_event() -> None:
    """Application shutdown hook."""
    pass


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------

def _enforce_snapshot_bounds(request: AnalyzeRequest) -> None:
    """Hard resource safety limit (NOT an analysis decision)."""
    config: UXDoctorConfig = app.state.config
    node_count = count_nodes(request.snapshot)

    if node_count > config.MAX_SNAPSHOT_NODES:
        raise HTTPException(
            status_code=413,
            detail=(
                f"Snapshot has {node_count} DOM nodes; the maximum allowed "
                f"is {config.MAX_SNAPSHOT_NODES}"
            ),
        )


# ---------------------------------------------------------------------------
# API Routes
# ---------------------------------------------------------------------------

@app.post(
    "/analyze",
    response_model=AnalysisReport,
    response_class=PrettyJSONResponse,
    summary="Analyze a crawled page snapshot",
)
async def analyze_page(request: AnalyzeRequest) -> AnalysisReport:
    _enforce_snapshot_bounds(request)

    coordinator: AnalysisCoordinator = app.state.coordinator

    return await coordinator.run_analysis(
        raw_snapshot=request.snapshot,
        page_url=request.page_url,
        business_context=request.business_context,
        audit_id=str(uuid4()),
    )


# ---------------------------------------------------------------------------
# Streaming Analysis (SSE)
# ---------------------------------------------------------------------------

@app.post(
    "/analyze/stream",
    summary="Analyze a crawled page snapshot (streaming progress)",
)
async def analyze_page_stream(request: AnalyzeRequest):
    """
    Perform an analysis while streaming progress events.

    This endpoint is observational only:
    - Client disconnects do NOT cancel the analysis
    - Events do NOT influence execution
    - Final ANALYSIS_COMPLETED event contains the AnalysisReport
    """
    _enforce_snapshot_bounds(request)

    coordinator: AnalysisCoordinator = app.state.coordinator
    audit_id = str(uuid4())
    emitter = MemoryQueueEventEmitter()

    # --------------------------------------------------------------
    # Background analysis execution
    # --------------------------------------------------------------
    async def run_analysis_task() -> None:
        try:
            await coordinator.run_analysis(
                raw_snapshot=request.snapshot,
                page_url=request.page_url,
                business_context=request.business_context,
                audit_id=audit_id,
                emitter=emitter,
            )
        except Exception:
            # Coordinator already emitted ANALYSIS_FAILED
            logger.exception("Streaming analysis %s failed", audit_id)

    asyncio.create_task(run_analysis_task())

    # --------------------------------------------------------------
    # SSE event stream
    # --------------------------------------------------------------
    async def event_stream():
        try:
            async for event in emitter.stream():
                yield event.to_sse_payload()
        except asyncio.CancelledError:
            # Client disconnected; analysis continues
            pass

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
        },
    )


# ---------------------------------------------------------------------------
# Rule catalog
# ---------------------------------------------------------------------------

@app.get(
    "/rules",
    response_class=PrettyJSONResponse,
    summary="Usability rule catalog",
)
def list_rules() -> Dict[str, Any]:
    return {
        "categories": [
            category.model_dump(mode="json")
            for category in categories_by_weight()
        ],
        "engine_rules": [
            rule.model_dump(mode="json") for rule in ENGINE_RULES.values()
        ],
    }


# ---------------------------------------------------------------------------
# Health Check
# ---------------------------------------------------------------------------

@app.get(
    "/health",
    summary="Service health check",
)
def health_check() -> JSONResponse:
    """Simple health check endpoint."""
    return JSONResponse(
        content={
            "status": "ok",
            "service": "uxdoctor",
        }
    )
