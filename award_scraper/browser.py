"""
Shared headless browser and per-fetch browsing contexts.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

import structlog
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    Route
)

from award_scraper.config import BROWSER_USER_AGENT, NAV_TIMEOUT_MS
from award_scraper.errors import RenderError

logger = structlog.get_logger()

T = TypeVar("T")

CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-software-rasterizer",
]

# Resource types that carry nothing readable
BLOCKED_RESOURCE_TYPES = frozenset({"image", "font", "media"})

VIEWPORT = {"width": 1280, "height": 900}


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


class SessionManager:
    """
    Owns one Chromium process and hands out isolated contexts.

    The browser is launched on first use and reused until ``stop()``.
    Each ``with_page`` call gets a fresh context so cookies and cache never
    leak between unrelated fetches.
    """

    def __init__(
        self,
        browser_factory: Optional[Callable[[], Awaitable[Browser]]] = None,
        navigation_timeout_ms: int = NAV_TIMEOUT_MS,
        user_agent: str = BROWSER_USER_AGENT
    ):
        """
        Initialize session manager.

        Args:
            browser_factory: Coroutine returning a browser; defaults to
                launching headless Chromium through Playwright
            navigation_timeout_ms: Ceiling for ``page.goto``
            user_agent: User agent for browsing contexts
        """
        self._browser_factory = browser_factory or self._launch_chromium
        self.navigation_timeout_ms = navigation_timeout_ms
        self.user_agent = user_agent
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None

    async def _launch_chromium(self) -> Browser:
        self._playwright = await async_playwright().start()
        try:
            return await self._playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        except PlaywrightError:
            await self._playwright.stop()
            self._playwright = None
            raise

    async def start(self) -> Browser:
        """Launch the browser if it is not running yet, or relaunch it after a crash."""
        async with self._lock:
            if self._browser is not None and not self._browser.is_connected():
                logger.warning("browser_disconnected")
                await self._shutdown()

            if self._browser is None:
                self._browser = await self._browser_factory()
                logger.info("browser_started")
            return self._browser

    async def stop(self) -> None:
        """Close the browser. Safe to call when never started or already closed."""
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        browser, self._browser = self._browser, None
        playwright, self._playwright = self._playwright, None

        if browser is not None:
            try:
                await browser.close()
                logger.info("browser_stopped")
            except PlaywrightError as e:
                logger.warning("browser_close_failed", error=str(e))

        if playwright is not None:
            try:
                await playwright.stop()
            except PlaywrightError as e:
                logger.warning("playwright_stop_failed", error=str(e))

    async def _close_context(self, context: BrowserContext, url: str) -> None:
        try:
            await context.close()
        except PlaywrightError as e:
            logger.warning("context_close_failed", url=url, error=str(e))

    async def with_page(self, url: str, fn: Callable[[Page], Awaitable[T]]) -> T:
        """
        Load ``url`` in a fresh context and run ``fn`` on the page.

        The context is closed on every exit path.

        Args:
            url: Page to load
            fn: Coroutine receiving the loaded page

        Returns:
            Whatever ``fn`` returns

        Raises:
            RenderError: On navigation, timeout or DOM read failure
        """
        try:
            browser = await self.start()
            context = await browser.new_context(viewport=VIEWPORT, user_agent=self.user_agent)
        except PlaywrightError as e:
            raise RenderError(f"Could not open browsing context: {e}", url=url) from e

        try:
            page = await context.new_page()
            await page.route("**/*", _block_heavy_resources)
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.navigation_timeout_ms
            )
            return await fn(page)
        except PlaywrightError as e:
            logger.warning("page_render_failed", url=url, error=str(e))
            raise RenderError(str(e), url=url) from e
        finally:
            await self._close_context(context, url)

