"""
FastAPI routes for the contract scraper API.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from award_scraper.errors import RenderError, ValidationError
from award_scraper.pipeline import Pipeline
from backend.app.api.models import (
    ContractDetailRequest, ContractDetailResponse, ContractListResponse,
    HealthResponse, IngestResponse
)
from backend.app.metrics import (
    ARTICLES_RENDERED, AWARD_EVENTS, EVENTS_SAVED, RENDER_FAILURES
)

# Create router
router = APIRouter()


def get_pipeline(request: Request) -> Pipeline:
    """Dependency returning the process-wide pipeline."""
    return request.app.state.pipeline


@router.get("/", response_model=HealthResponse)
async def health_check(pipeline: Pipeline = Depends(get_pipeline)):
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        message="DoD Contract Scraper API (Playwright + rate limits)",
        browser_running=pipeline.sessions.is_running,
        sink_configured=pipeline.orchestrator.sink.configured,
        limits=pipeline.limiter.get_status()
    )


@router.get("/contracts", response_model=ContractListResponse)
async def list_contracts(pipeline: Pipeline = Depends(get_pipeline)):
    """Fetch the RSS feed (no browser) and list its items."""
    items = await pipeline.feed.fetch()
    return ContractListResponse(count=len(items), contracts=items)


@router.post("/contract-detail", response_model=ContractDetailResponse)
async def contract_detail(
    body: Optional[ContractDetailRequest] = None,
    delay_ms: int = Query(0, alias="delayMs", ge=0, description="Wait before rendering"),
    pipeline: Pipeline = Depends(get_pipeline)
):
    """Render one article and return its readable text."""
    if body is None or not body.url:
        raise ValidationError("URL is required")

    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)

    try:
        page = await pipeline.renderer.render(body.url)
    except RenderError:
        RENDER_FAILURES.inc()
        raise
    ARTICLES_RENDERED.inc()

    return ContractDetailResponse(url=body.url, title=page.title, content=page.text)


@router.post("/ingest", response_model=IngestResponse)
async def ingest(
    limit: Optional[int] = Query(None, description="Maximum articles to process (1-20)"),
    save: str = Query("", description="'true' to upsert events into Supabase"),
    pipeline: Pipeline = Depends(get_pipeline)
):
    """Fetch the feed, extract awards from each article and optionally persist them."""
    summary = await pipeline.orchestrator.ingest(limit=limit, persist=save.lower() == "true")

    ARTICLES_RENDERED.inc(summary.articles_seen - summary.failed)
    RENDER_FAILURES.inc(summary.failed)
    AWARD_EVENTS.inc(summary.events_extracted)
    EVENTS_SAVED.inc(summary.saved)

    return IngestResponse(
        articles=summary.articles_seen,
        events=summary.events_extracted,
        saved=summary.saved,
        skipped=summary.skipped,
        failed=summary.failed,
        failures=summary.failures,
        sink_error=summary.sink_error,
        sample=summary.sample
    )


@router.get("/limits")
async def render_limits(pipeline: Pipeline = Depends(get_pipeline)):
    """Current render admission status."""
    return pipeline.limiter.get_status()
