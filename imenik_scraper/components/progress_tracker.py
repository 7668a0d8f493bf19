import copy
import time
from collections import Counter
from typing import Callable, Dict, Iterable, List, Optional

from imenik_scraper.models.name_status import NameStatus, SearchStatus
from imenik_scraper.utils import config


ProgressSnapshot = Dict[str, NameStatus]
ProgressListener = Callable[[ProgressSnapshot], None]


class ProgressTracker:
    """
    A stateful class tracking the lifecycle and page cursor of every search term.
    Listeners receive a copy of the state after each change, never the live map.
    """
    def __init__(self, default_total_pages: Optional[int] = None):
        self.default_total_pages = default_total_pages or config.DEFAULT_TOTAL_PAGES
        self._statuses: Dict[str, NameStatus] = {}
        self._listeners: List[ProgressListener] = []

    def subscribe(self, listener: ProgressListener):
        self._listeners.append(listener)

    def _publish(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in self._listeners:
            listener(snapshot)

    def _status_for(self, name: str) -> NameStatus:
        if name not in self._statuses:
            self._statuses[name] = NameStatus(total_pages=self.default_total_pages)
        return self._statuses[name]

    def register(self, names: Iterable[str]):
        """Resets every given name to pending."""
        for name in names:
            self._statuses[name] = NameStatus(total_pages=self.default_total_pages)
        self._publish()

    def start(self, name: str):
        status = self._status_for(name)
        status.status = SearchStatus.PROCESSING
        status.current_page = 1
        self._publish()

    def set_total_pages(self, name: str, total_pages: int):
        self._status_for(name).total_pages = max(1, total_pages)
        self._publish()

    def set_current_page(self, name: str, current_page: int):
        self._status_for(name).current_page = current_page
        self._publish()

    def complete(self, name: str):
        self._status_for(name).status = SearchStatus.COMPLETED
        self._publish()

    def complete_from_cache(self, name: str):
        status = self._status_for(name)
        status.status = SearchStatus.COMPLETED
        status.current_page = status.total_pages
        self._publish()

    def get(self, name: str) -> Optional[NameStatus]:
        status = self._statuses.get(name)
        return copy.copy(status) if status else None

    def snapshot(self) -> ProgressSnapshot:
        return {name: copy.copy(status) for name, status in self._statuses.items()}

    def generate_report(self) -> dict:
        """Calculates and returns a summary of the run's progress."""
        counts = Counter(status.status for status in self._statuses.values())
        return {
            "report_type": "scrape_progress",
            "timestamp": time.time(),
            "names_total": len(self._statuses),
            "pending": counts.get(SearchStatus.PENDING, 0),
            "processing": counts.get(SearchStatus.PROCESSING, 0),
            "completed": counts.get(SearchStatus.COMPLETED, 0),
        }
