"""
Pydantic models for API requests and responses.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from award_scraper.models import AwardEvent, FailedItem, FeedItem


class ContractDetailRequest(BaseModel):
    """Request body for rendering a single article."""
    url: Optional[str] = Field(None, description="Article URL to render")


class ContractListResponse(BaseModel):
    """Feed items currently listed in the RSS feed."""
    success: bool = True
    count: int
    contracts: List[FeedItem]


class ContractDetailResponse(BaseModel):
    """Readable text of one rendered article."""
    success: bool = True
    url: str
    title: str
    content: str


class IngestResponse(BaseModel):
    """Summary of one ingestion run."""
    success: bool = True
    articles: int = Field(..., description="Feed articles processed")
    events: int = Field(..., description="Award events extracted")
    saved: int = Field(0, description="Rows reported saved by the sink")
    skipped: int = Field(0, description="Rows not saved (sink unconfigured or merged)")
    failed: int = Field(0, description="Articles that could not be rendered")
    failures: List[FailedItem] = Field(default_factory=list)
    sink_error: Optional[str] = None
    sample: List[AwardEvent] = Field(default_factory=list, description="First events produced")


class ErrorResponse(BaseModel):
    """Structured failure returned by every endpoint."""
    success: bool = False
    error: str
    url: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    message: str
    browser_running: bool
    sink_configured: bool
    limits: Dict[str, Any]
