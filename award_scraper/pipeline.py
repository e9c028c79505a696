"""
Wiring of the shared browser, admission queue and pipeline stages.
"""

from dataclasses import dataclass
from typing import Optional

from award_scraper.browser import SessionManager
from award_scraper.feed import FeedFetcher
from award_scraper.orchestrator import IngestionOrchestrator
from award_scraper.rate_limiter import RenderRateLimiter
from award_scraper.renderer import PageRenderer
from award_scraper.sink import SupabaseSink


@dataclass
class Pipeline:
    """Process-wide services; the browser and limiter are shared by all renders."""
    sessions: SessionManager
    limiter: RenderRateLimiter
    feed: FeedFetcher
    renderer: PageRenderer
    orchestrator: IngestionOrchestrator

    async def close(self) -> None:
        await self.sessions.stop()


def build_pipeline(
    sessions: Optional[SessionManager] = None,
    sink: Optional[SupabaseSink] = None
) -> Pipeline:
    """Build the default pipeline from configuration."""
    sessions = sessions or SessionManager()
    limiter = RenderRateLimiter()
    feed = FeedFetcher()
    renderer = PageRenderer(sessions, limiter)
    orchestrator = IngestionOrchestrator(feed, renderer, sink=sink)

    return Pipeline(
        sessions=sessions,
        limiter=limiter,
        feed=feed,
        renderer=renderer,
        orchestrator=orchestrator
    )
