"""
Feed -> render -> extract -> (optional) persist pipeline.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

import structlog

from award_scraper.config import MAX_CONTRACTS, MAX_ITEMS_CEILING, WAIT_MS
from award_scraper.errors import NetworkError, RenderError, SinkError
from award_scraper.feed import FeedFetcher
from award_scraper.models import AwardEvent, FailedItem, IngestSummary, SaveResult
from award_scraper.parsers import AwardExtractor
from award_scraper.renderer import PageRenderer
from award_scraper.sink import SupabaseSink

logger = structlog.get_logger()

SAMPLE_SIZE = 3


def clamp_limit(limit: Optional[int], default: int = MAX_CONTRACTS) -> int:
    """Bound the per-call item count to [1, MAX_ITEMS_CEILING]."""
    if limit is None:
        limit = default
    return max(1, min(int(limit), MAX_ITEMS_CEILING))


class IngestionOrchestrator:
    """
    Runs one ingestion pass over the newest feed items.

    Items are rendered one after another with a fixed pause between them to
    go easy on defense.gov and keep browser memory flat.
    """

    def __init__(
        self,
        feed: FeedFetcher,
        renderer: PageRenderer,
        extractor: Optional[AwardExtractor] = None,
        sink: Optional[SupabaseSink] = None,
        inter_item_delay_ms: int = WAIT_MS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.feed = feed
        self.renderer = renderer
        self.extractor = extractor or AwardExtractor()
        self.sink = sink or SupabaseSink()
        self.inter_item_delay_ms = inter_item_delay_ms
        self._sleep = sleep

    async def _persist(self, events: List[AwardEvent]) -> SaveResult:
        return await asyncio.to_thread(self.sink.save, events)

    async def ingest(self, limit: Optional[int] = None, persist: bool = False) -> IngestSummary:
        """
        Fetch the feed, extract awards from each article and optionally save.

        Args:
            limit: Maximum articles to process (clamped)
            persist: Send extracted events to the sink

        Returns:
            IngestSummary with counts and a small sample of events

        Raises:
            NetworkError: If the feed itself cannot be fetched
        """
        limit = clamp_limit(limit)
        items = (await self.feed.fetch())[:limit]
        logger.info("ingest_started", articles=len(items), persist=persist)

        events: List[AwardEvent] = []
        failures: List[FailedItem] = []

        for i, item in enumerate(items):
            if i > 0 and self.inter_item_delay_ms > 0:
                await self._sleep(self.inter_item_delay_ms / 1000)

            try:
                page = await self.renderer.render(item.link)
                found = self.extractor.extract(page.text, item.link, item.pub)
            except (RenderError, ValueError) as e:
                logger.error("article_ingest_failed", url=item.link, error=str(e))
                failures.append(FailedItem(url=item.link, error=str(e)))
                continue

            logger.info("article_ingested", url=item.link, events=len(found))
            events.extend(found)

        summary = IngestSummary(
            articles_seen=len(items),
            events_extracted=len(events),
            failed=len(failures),
            failures=failures,
            sample=events[:SAMPLE_SIZE],
            events=events
        )

        if persist and events:
            try:
                result = await self._persist(events)
            except (SinkError, NetworkError) as e:
                logger.error("persist_failed", error=str(e), events=len(events))
                summary.sink_error = str(e)
            else:
                summary.saved = result.saved
                summary.skipped = result.skipped

        logger.info("ingest_completed",
                    articles=summary.articles_seen,
                    events=summary.events_extracted,
                    saved=summary.saved,
                    failed=summary.failed)

        return summary
