"""
Data models for feed items, rendered pages and award events.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class FeedItem(BaseModel):
    """One article reference parsed from the RSS feed."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    pub: str = ""


class RenderedPage(BaseModel):
    """Readable text of a page rendered in the browser."""

    model_config = ConfigDict(frozen=True)

    url: str
    title: str
    text: str


class AmountResult(BaseModel):
    """Dollar figure found in a paragraph (all fields None when absent)."""

    model_config = ConfigDict(frozen=True)

    amount: Optional[float] = None
    unit: Optional[str] = None
    text: Optional[str] = None


class ReasonCode(str, Enum):
    """Tags describing the inferred nature of an event."""

    CONTRACT_AWARD = "CONTRACT_AWARD"
    DOD_PROCUREMENT = "DOD_PROCUREMENT"


class EventMeta(BaseModel):
    """Provenance carried alongside an award event."""

    model_config = ConfigDict(frozen=True)

    source_type: str = "ingest"
    original_link: str
    contract_ids: List[str] = Field(default_factory=list)


class AwardEvent(BaseModel):
    """
    One contract award extracted from one paragraph of article text.

    Rows have the shape of the ``news_events`` table, which is shared with
    other sources, so unused columns (committees, tickers, ...) stay empty.
    """

    model_config = ConfigDict(frozen=True)

    source: str = "dod_contracts"
    source_url: str
    published_at: str
    title: str
    summary: str
    body_text: str
    agencies: List[str]
    committees: List[str] = Field(default_factory=list)
    vendors: List[str] = Field(default_factory=list)
    tickers: List[str] = Field(default_factory=list)
    ciks: List[str] = Field(default_factory=list)
    bill_ids: List[str] = Field(default_factory=list)
    reason_codes: List[ReasonCode] = Field(
        default_factory=lambda: [ReasonCode.CONTRACT_AWARD, ReasonCode.DOD_PROCUREMENT]
    )
    amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    amount_unit: Optional[str] = None
    amount_text: Optional[str] = None
    contract_id: Optional[str] = None
    assistance_listing: Optional[str] = None
    meta: EventMeta

    @property
    def dedup_key(self) -> Tuple[str, Optional[str]]:
        """Key the sink merges repeated submissions on."""
        return (self.source_url, self.contract_id)


class SaveResult(BaseModel):
    """Outcome of a sink upsert."""

    saved: int = 0
    skipped: int = 0


class FailedItem(BaseModel):
    """A feed item whose page could not be rendered or parsed."""

    url: str
    error: str


class IngestSummary(BaseModel):
    """Result of one ingestion run."""

    articles_seen: int
    events_extracted: int
    saved: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[FailedItem] = Field(default_factory=list)
    sink_error: Optional[str] = None
    sample: List[AwardEvent] = Field(default_factory=list)
    events: List[AwardEvent] = Field(default_factory=list, exclude=True)
