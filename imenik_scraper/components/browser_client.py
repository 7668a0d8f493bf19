import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Browser, Page, Playwright, Route, async_playwright

from imenik_scraper.utils import config

# Get a logger instance for this specific module.
log = logging.getLogger(__name__)


class BrowserClient:
    """
    Owns the process-wide headless browser. Every search session gets its own
    page through open_page(); the browser itself is shared.
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        headless: Optional[bool] = None,
        timeout_ms: Optional[int] = None,
    ):
        self.user_agent = user_agent or config.USER_AGENT
        self.headless = config.HEADLESS if headless is None else headless
        self.timeout_ms = config.NAVIGATION_TIMEOUT_MS if timeout_ms is None else timeout_ms
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    @property
    def connected(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def start(self) -> Browser:
        if self._browser is None:
            log.info("Launching browser...")
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self.headless, timeout=0)
            log.info("Browser launched")
        return self._browser

    @staticmethod
    async def _block_unneeded_requests(route: Route):
        request = route.request
        url = request.url.lower()
        if request.resource_type in config.BLOCKED_RESOURCE_TYPES or any(
            domain in url for domain in config.BLOCKED_DOMAINS
        ):
            await route.abort()
        else:
            await route.continue_()

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Page]:
        """Yields a fresh page and closes it on every exit path."""
        browser = await self.start()
        page = await browser.new_page(user_agent=self.user_agent, viewport=config.VIEWPORT)
        try:
            page.set_default_navigation_timeout(self.timeout_ms)
            page.set_default_timeout(self.timeout_ms)
            await page.route("**/*", self._block_unneeded_requests)
            yield page
        finally:
            await page.close()

    async def close(self):
        if self.connected:
            log.info("Closing browser...")
            await self._browser.close()
        self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
