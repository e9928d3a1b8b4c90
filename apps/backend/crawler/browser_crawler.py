"""
Browser rendering surface backed by a single Playwright page.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional
from urllib.parse import urlparse

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)

from core.errors import NavigationError, RenderingError

logger = logging.getLogger(__name__)


def settled_url_pattern(url: str) -> str:
    """Glob matching any URL that still contains the requested path."""
    path = urlparse(url).path.lstrip("/")
    if not path:
        return "**"
    return f"**/{path}**"


class BrowserSession:
    """
    One page, reused for every navigation of every crawl.

    Only one navigation may be in flight on the page; callers hold
    exclusive() for the whole sequential stage that drives it.
    """

    def __init__(self, page: Page, navigation_timeout_ms: int = 30000):
        self.page = page
        self.navigation_timeout_ms = navigation_timeout_ms
        self._lock = asyncio.Lock()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @classmethod
    async def launch(
        cls,
        browser_name: str = "firefox",
        headless: bool = True,
        user_agent: Optional[str] = None,
        navigation_timeout_ms: int = 30000,
    ) -> "BrowserSession":
        """Start Playwright and open the shared page."""
        playwright = await async_playwright().start()
        browser_type = getattr(playwright, browser_name, None)
        if browser_type is None:
            await playwright.stop()
            raise ValueError(f"Unsupported browser: {browser_name}")

        browser = await browser_type.launch(headless=headless)
        context = await browser.new_context(
            user_agent=user_agent,
            viewport={"width": 1920, "height": 1080},
        )
        page = await context.new_page()
        logger.info(f"[browser] Launched {browser_name} (headless={headless})")

        session = cls(page, navigation_timeout_ms=navigation_timeout_ms)
        session._playwright = playwright
        session._browser = browser
        return session

    async def close(self):
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        logger.info("[browser] Closed")

    @asynccontextmanager
    async def exclusive(self):
        """Hold the page for a sequence of navigations."""
        async with self._lock:
            yield self

    async def navigate(self, url: str):
        try:
            await self.page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout_ms)
        except PlaywrightTimeout as e:
            raise NavigationError(f"Timed out loading {url}: {e}", url=url) from e
        except PlaywrightError as e:
            raise NavigationError(f"Failed to load {url}: {e}", url=url) from e

    async def wait_for_settled_url(self, url: str):
        """Wait until splash or interstitial redirects land back on url's path."""
        pattern = settled_url_pattern(url)
        try:
            await self.page.wait_for_url(pattern, timeout=self.navigation_timeout_ms)
        except PlaywrightTimeout as e:
            raise NavigationError(f"{url} did not settle on {pattern}: {e}", url=url) from e
        except PlaywrightError as e:
            raise NavigationError(f"{url} did not settle: {e}", url=url) from e

    async def query_all(self, selector: str, expression: str) -> List[Any]:
        """
        Evaluate a JS expression over every node matching selector.

        The expression receives the node array and must return
        JSON-serializable data. Zero matches yields an empty list.
        """
        try:
            result = await self.page.eval_on_selector_all(selector, expression)
        except PlaywrightError as e:
            raise RenderingError(f"Query {selector!r} failed: {e}", url=self.page.url) from e
        return result or []
