"""
RSS feed fetching and parsing.

The feed is parsed with regular expressions rather than an XML parser so
that truncated or slightly malformed bodies still yield whatever items are
readable.
"""

import asyncio
import re
from typing import List, Optional

import requests
import structlog
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)

from award_scraper.config import (
    FEED_URL,
    BOT_USER_AGENT,
    FEED_TIMEOUT_S,
    FEED_RETRY_ATTEMPTS
)
from award_scraper.errors import NetworkError
from award_scraper.models import FeedItem
from award_scraper.utils import extract_tag, normalize_url

logger = structlog.get_logger()

_ITEM_RE = re.compile(r'<item>([\s\S]*?)</item>', re.IGNORECASE)


def parse_feed(xml: Optional[str]) -> List[FeedItem]:
    """
    Parse RSS text into feed items, in feed order.

    Args:
        xml: Raw feed body

    Returns:
        Items with a non-empty link (empty list when there are no items)
    """
    if not xml or '<item>' not in xml:
        return []

    items = []
    for match in _ITEM_RE.finditer(xml):
        block = match.group(1)
        link = normalize_url(extract_tag(block, 'link'))
        if not link:
            continue
        items.append(FeedItem(
            title=extract_tag(block, 'title'),
            link=link,
            pub=extract_tag(block, 'pubDate')
        ))

    return items


class FeedFetcher:
    """Downloads the contracts feed over plain HTTP (no browser)."""

    def __init__(
        self,
        feed_url: str = FEED_URL,
        timeout: int = FEED_TIMEOUT_S,
        retry_attempts: int = FEED_RETRY_ATTEMPTS,
        retry_wait: float = 1.0,
        user_agent: str = BOT_USER_AGENT
    ):
        self.feed_url = feed_url
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait = retry_wait
        self.user_agent = user_agent

    def _download(self, url: str) -> str:
        headers = {
            'User-Agent': self.user_agent,
            'Accept': 'application/rss+xml'
        }
        try:
            r = requests.get(url, headers=headers, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise NetworkError(f"Feed request failed: {e}", url=url) from e
        return r.text

    async def fetch(self, url: Optional[str] = None) -> List[FeedItem]:
        """
        Fetch and parse the feed.

        Args:
            url: Feed URL (defaults to the configured feed)

        Returns:
            Parsed feed items

        Raises:
            NetworkError: If every attempt fails
        """
        url = url or self.feed_url

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.retry_wait, min=self.retry_wait, max=5 * self.retry_wait),
            retry=retry_if_exception_type(NetworkError),
            reraise=True
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning("feed_fetch_retry",
                                   url=url,
                                   attempt=attempt.retry_state.attempt_number)
                xml = await asyncio.to_thread(self._download, url)

        items = parse_feed(xml)
        logger.info("feed_fetched", url=url, items=len(items), size=len(xml))
        return items
