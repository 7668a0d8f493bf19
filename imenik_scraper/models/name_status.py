from dataclasses import dataclass
from enum import Enum

from imenik_scraper.utils import config


class SearchStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"


@dataclass
class NameStatus:
    """Progress of a single search term through the directory result pages."""
    current_page: int = 0
    total_pages: int = config.DEFAULT_TOTAL_PAGES
    status: SearchStatus = SearchStatus.PENDING
