"""
Shared fakes standing in for the Playwright browser.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from award_scraper.browser import SessionManager


@dataclass
class PageSpec:
    """What the fake browser serves for one URL."""
    content: Dict[str, str] = field(default_factory=dict)
    title: str = ""
    goto_error: Optional[Exception] = None


class FakeElement:
    def __init__(self, text: str):
        self.text = text

    async def inner_text(self) -> str:
        return self.text


class FakePage:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser
        self.spec = PageSpec()
        self.goto_calls: List[dict] = []
        self.route_handlers = []
        self.waits: List[int] = []

    async def route(self, pattern, handler):
        self.route_handlers.append((pattern, handler))

    async def goto(self, url, **kwargs):
        self.goto_calls.append({"url": url, **kwargs})
        self.spec = self.browser.pages.get(url, PageSpec())
        if self.spec.goto_error is not None:
            raise self.spec.goto_error

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def query_selector(self, selector):
        if selector in self.spec.content:
            return FakeElement(self.spec.content[selector])
        return None

    async def title(self):
        return self.spec.title


class FakeContext:
    def __init__(self, browser: "FakeBrowser", close_error: Optional[Exception] = None):
        self.page = FakePage(browser)
        self.close_error = close_error
        self.closed = 0

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed += 1
        if self.close_error is not None:
            raise self.close_error


class FakeBrowser:
    """Serves registered pages by URL; unknown URLs load an empty page."""

    def __init__(self):
        self.pages: Dict[str, PageSpec] = {}
        self.contexts: List[FakeContext] = []
        self.context_kwargs: List[dict] = []
        self.context_close_error: Optional[Exception] = None
        self.connected = True
        self.closed = 0

    def is_connected(self) -> bool:
        return self.connected

    async def new_context(self, **kwargs):
        self.context_kwargs.append(kwargs)
        context = FakeContext(self, close_error=self.context_close_error)
        self.contexts.append(context)
        return context

    async def close(self):
        self.closed += 1


@pytest.fixture
def fake_browser():
    """Fake browser; tests register pages on ``fake_browser.pages``."""
    return FakeBrowser()


@pytest.fixture
def sessions(fake_browser):
    """Session manager backed by the fake browser."""
    launches = []

    async def factory():
        launches.append(fake_browser)
        return fake_browser

    manager = SessionManager(browser_factory=factory, navigation_timeout_ms=5000)
    manager.launches = launches
    return manager


@pytest.fixture
def serve_page(fake_browser):
    """Register what the fake browser returns for a URL."""

    def _serve(url: str, content: Optional[Dict[str, str]] = None, title: str = "",
               goto_error: Optional[Exception] = None) -> None:
        fake_browser.pages[url] = PageSpec(content=content or {}, title=title, goto_error=goto_error)

    return _serve
