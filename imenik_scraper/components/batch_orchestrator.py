import asyncio
import logging
from typing import Callable, List, Optional, Sequence, TypeVar

from imenik_scraper.components.progress_tracker import ProgressTracker
from imenik_scraper.components.result_cache import ResultCache
from imenik_scraper.components.search_session import SearchSession
from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config, json_storage

# Get a logger instance for this specific module.
log = logging.getLogger(__name__)

T = TypeVar("T")

ResultsWriter = Callable[[List[Entry]], object]


def split_into_batches(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """Splits items into consecutive groups of batch_size; the last group may be shorter."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [list(items[i:i + batch_size]) for i in range(0, len(items), batch_size)]


class BatchOrchestrator:
    """
    Scrapes a list of names in fixed-size batches. Names already in the cache are
    skipped, every name in a batch runs concurrently, a failing name contributes
    no entries instead of aborting the run, and the results file is rewritten
    after every batch.
    """

    def __init__(
        self,
        session: SearchSession,
        tracker: ProgressTracker,
        cache: ResultCache,
        batch_size: Optional[int] = None,
        results_writer: Optional[ResultsWriter] = None,
    ):
        self.session = session
        self.tracker = tracker
        self.cache = cache
        self.batch_size = batch_size or config.BATCH_SIZE
        self.results_writer = results_writer or json_storage.save_results

    async def _scrape_name_safely(self, name: str) -> List[Entry]:
        try:
            return await self.session.scrape_by_name(name)
        except Exception as e:
            log.error(f"Failed to scrape '{name}': {e}", exc_info=True)
            self.tracker.complete(name)
            return []

    def _take_cached(self, names: Sequence[str], all_entries: List[Entry]) -> List[str]:
        """Moves cache hits into all_entries and returns the names still to scrape."""
        names_to_process = []
        for name in names:
            cached_entries = self.cache.get(name)
            if cached_entries is None:
                names_to_process.append(name)
                continue
            log.info(f"Using cached data for '{name}'")
            self.tracker.complete_from_cache(name)
            all_entries.extend(cached_entries)
        return names_to_process

    async def scrape_by_names(self, names: Sequence[str], disable_cache: bool = False) -> List[Entry]:
        self.tracker.register(names)

        all_entries: List[Entry] = []
        if disable_cache:
            names_to_process = list(names)
        else:
            names_to_process = self._take_cached(names, all_entries)

        name_batches = split_into_batches(names_to_process, self.batch_size)
        log.info(
            f"Processing {len(names_to_process)} names in {len(name_batches)} batches of up to {self.batch_size}"
        )
        if len(names_to_process) < len(names):
            log.info(f"Skipping {len(names) - len(names_to_process)} names (using cache)")

        for batch_index, batch in enumerate(name_batches, start=1):
            log.info(f"Starting batch {batch_index}/{len(name_batches)}")

            batch_results = await asyncio.gather(*(self._scrape_name_safely(name) for name in batch))

            for name, entries in zip(batch, batch_results):
                if not disable_cache and entries:
                    self.cache.put(name, entries)
                all_entries.extend(entries)

            log.info(f"Completed batch {batch_index}/{len(name_batches)}")
            self.results_writer(list(all_entries))

        return all_entries
