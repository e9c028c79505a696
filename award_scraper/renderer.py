"""
Readable-text extraction from pages rendered in the shared browser.
"""

from typing import Optional, Sequence

import structlog
from playwright.async_api import Page

from award_scraper.browser import SessionManager
from award_scraper.config import RENDER_SETTLE_MS
from award_scraper.models import RenderedPage
from award_scraper.rate_limiter import RenderRateLimiter

logger = structlog.get_logger()

# Content containers, most specific first; the first one present wins
CONTENT_SELECTORS: Sequence[str] = (
    ".article-content",
    "article",
    ".body-copy",
    "main",
    ".content",
    "body",
)


async def read_content(page: Page, selectors: Sequence[str] = CONTENT_SELECTORS) -> str:
    """
    Return the visible text of the first matching content container.

    Args:
        page: Loaded page
        selectors: CSS selectors in priority order

    Returns:
        Inner text of the first selector found, or empty string
    """
    for selector in selectors:
        element = await page.query_selector(selector)
        if element is not None:
            logger.debug("content_selector_matched", selector=selector)
            return await element.inner_text() or ""
    return ""


class PageRenderer:
    """Renders article pages and returns their title and readable text."""

    def __init__(
        self,
        sessions: SessionManager,
        limiter: RenderRateLimiter,
        settle_ms: int = RENDER_SETTLE_MS,
        selectors: Optional[Sequence[str]] = None
    ):
        self.sessions = sessions
        self.limiter = limiter
        self.settle_ms = settle_ms
        self.selectors = tuple(selectors or CONTENT_SELECTORS)

    async def _read(self, page: Page, url: str) -> RenderedPage:
        # Deferred content needs a moment after DOMContentLoaded
        if self.settle_ms > 0:
            await page.wait_for_timeout(self.settle_ms)

        text = await read_content(page, self.selectors)
        title = await page.title()
        return RenderedPage(url=url, title=(title or "").strip(), text=text.strip())

    async def render(self, url: str) -> RenderedPage:
        """
        Render one page. No retry here; callers decide.

        Args:
            url: Article URL

        Returns:
            RenderedPage with trimmed title and text

        Raises:
            RenderError: If the page cannot be loaded or read
        """
        async with self.limiter.admit():
            logger.info("rendering_page", url=url)
            rendered = await self.sessions.with_page(url, lambda page: self._read(page, url))

        logger.info("page_rendered", url=url, text_size=len(rendered.text))
        return rendered
