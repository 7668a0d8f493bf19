import logging
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config, normalization_utils

# Get a logger instance for this specific module.
log = logging.getLogger(__name__)


class PageExtractor:
    """
    Turns the HTML of one rendered directory result page into entries.
    A missing element on the page always becomes an empty field, never an error.
    """

    def __init__(
        self,
        container_selector: str = config.RESULT_CONTAINER_SELECTOR,
        pagination_prefix: str = config.PAGINATION_LINK_PREFIX,
    ):
        self.container_selector = container_selector
        self.pagination_prefix = pagination_prefix

    @staticmethod
    def _text(node: Optional[Tag]) -> str:
        if node is None:
            return ""
        return node.get_text().strip()

    def _extract_address(self, container: Tag) -> tuple[str, str]:
        address_li = container.select_one(config.ADDRESS_SELECTOR)
        if address_li is None:
            return "", ""

        lines = address_li.find_all("div")
        street = self._text(lines[0]) if len(lines) > 0 else ""
        city_line = self._text(lines[1]) if len(lines) > 1 else ""
        # The second line reads "<postal code> <city>"
        city = " ".join(city_line.split(" ")[1:])
        return street, city

    def _extract_raw_entry(self, container: Tag) -> Entry:
        street, city = self._extract_address(container)
        return Entry(
            telephone_number=self._text(container.select_one(config.TELEPHONE_SELECTOR)),
            street=street,
            city=city,
            full_name=self._text(container.select_one(config.FULL_NAME_SELECTOR)),
        )

    def extract_entries(self, html_content: str) -> List[Entry]:
        """Extracts, normalizes and filters the entries on one result page."""
        soup = BeautifulSoup(html_content, "html.parser")
        containers = soup.select(self.container_selector)

        entries = []
        for container in containers:
            raw = self._extract_raw_entry(container)
            if not normalization_utils.is_mobile_number(raw.telephone_number):
                continue
            entries.append(Entry(
                telephone_number=raw.telephone_number,
                street=normalization_utils.normalize_street(raw.street),
                city=normalization_utils.normalize_city(raw.city),
                full_name=normalization_utils.normalize_name(raw.full_name),
            ))

        log.debug(f"Kept {len(entries)} of {len(containers)} result containers")
        return entries

    def find_pagination_links(self, html_content: str) -> List[str]:
        """Returns the distinct pagination targets on a result page, in page order."""
        soup = BeautifulSoup(html_content, "html.parser")
        links = []
        for a_tag in soup.select(f'a[href^="{self.pagination_prefix}"]'):
            href = a_tag.get("href")
            if href and href not in links:
                links.append(href)
        return links
