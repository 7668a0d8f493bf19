import logging
from typing import List, Optional
from urllib.parse import urlparse

from imenik_scraper.components.browser_client import BrowserClient
from imenik_scraper.components.page_extractor import PageExtractor
from imenik_scraper.components.progress_tracker import ProgressTracker
from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config

# Get a logger instance for this specific module.
log = logging.getLogger(__name__)


class SearchSessionError(Exception):
    """A search for one name could not be completed."""


class SearchInputNotFoundError(SearchSessionError):
    pass


class SearchSession:
    """
    Drives one name through the directory's search form and every result page.
    A session is all-or-nothing: any navigation or extraction error propagates
    to the caller once the page has been closed.
    """

    def __init__(
        self,
        browser: BrowserClient,
        tracker: ProgressTracker,
        extractor: Optional[PageExtractor] = None,
        directory_url: str = config.DIRECTORY_URL,
        typing_delay_ms: int = config.TYPING_DELAY_MS,
    ):
        self.browser = browser
        self.tracker = tracker
        self.extractor = extractor or PageExtractor()
        self.directory_url = directory_url
        self.typing_delay_ms = typing_delay_ms

    async def _submit_search(self, page, name: str):
        await page.goto(self.directory_url, wait_until="domcontentloaded")
        await page.wait_for_selector(config.SEARCH_INPUT_SELECTOR)

        name_input = await page.query_selector(config.SEARCH_INPUT_SELECTOR)
        if name_input is None:
            raise SearchInputNotFoundError(f"Name input '{config.SEARCH_INPUT_SELECTOR}' not found on the page")

        await name_input.focus()
        await name_input.type(name, delay=self.typing_delay_ms)
        async with page.expect_navigation(wait_until="networkidle"):
            await page.keyboard.press("Enter")

    async def _scrape_current_page(self, page) -> List[Entry]:
        return self.extractor.extract_entries(await page.content())

    async def scrape_by_name(self, name: str) -> List[Entry]:
        self.tracker.start(name)

        try:
            async with self.browser.open_page() as page:
                await self._submit_search(page, name)

                all_entries = await self._scrape_current_page(page)

                pagination_links = self.extractor.find_pagination_links(await page.content())
                if pagination_links:
                    self.tracker.set_total_pages(name, len(pagination_links) + 1)

                parsed_url = urlparse(page.url)
                base_url = f"{parsed_url.scheme}://{parsed_url.netloc}"

                for index, link_path in enumerate(pagination_links):
                    # Page 1 is the search result itself
                    self.tracker.set_current_page(name, index + 2)
                    await page.goto(f"{base_url}/{link_path}", wait_until="networkidle")
                    all_entries.extend(await self._scrape_current_page(page))
        finally:
            self.tracker.complete(name)

        log.info(f"Scraped {len(all_entries)} entries for '{name}' from {len(pagination_links) + 1} page(s)")
        return all_entries
