import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from contextlib import nullcontext
from functools import partial
from typing import List, Optional

from imenik_scraper.utils.logging_setup import setup_app_logging
setup_app_logging("ScraperService")

from imenik_scraper.utils import config, json_storage
from imenik_scraper.utils.elastic_search_utils import save_entries_to_elasticsearch
from imenik_scraper.components.batch_orchestrator import BatchOrchestrator
from imenik_scraper.components.browser_client import BrowserClient
from imenik_scraper.components.progress_tracker import ProgressTracker
from imenik_scraper.components.result_cache import ResultCache
from imenik_scraper.components.search_session import SearchSession
from imenik_scraper.components.status_display import StatusDisplay

log = logging.getLogger("ScraperService")

EXIT_FAILURE = 1
# Shell convention: 128 + signal number
EXIT_CODES_BY_SIGNAL = {
    signal.SIGINT: 128 + signal.SIGINT,
    signal.SIGTERM: 128 + signal.SIGTERM,
}


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Search the imenik.tportal.hr directory for a list of names and save the mobile contacts found."
    )
    parser.add_argument("--name-list", default=config.NAME_LIST_FILE,
                        help="JSON file with the list of names to search (default: %(default)s)")
    parser.add_argument("--minify", action="store_true", help="Write compact JSON output")
    parser.add_argument("--disable-cache", action="store_true", help="Ignore and do not update the result cache")
    parser.add_argument("--elasticsearch", action="store_true",
                        help="Also index the results into Elasticsearch (needs ELASTICSEARCH_HOSTS)")
    parser.add_argument("--batch-size", type=int, default=config.BATCH_SIZE,
                        help="Number of names searched concurrently (default: %(default)s)")
    parser.add_argument("--no-status", action="store_true", help="Do not render the live status table")
    args = parser.parse_args(argv)
    if args.batch_size < 1:
        parser.error("--batch-size must be at least 1")
    return args


def _install_signal_handlers(task: asyncio.Task, received: List[signal.Signals]):
    """Cancels the run on SIGINT/SIGTERM and records which signal arrived."""
    loop = asyncio.get_running_loop()

    def on_signal(signum: signal.Signals):
        log.warning(f"{signum.name} received, closing browser and exiting...")
        received.append(signum)
        task.cancel()

    for signum in EXIT_CODES_BY_SIGNAL:
        try:
            loop.add_signal_handler(signum, on_signal, signum)
        except (NotImplementedError, RuntimeError):
            log.debug(f"{signum.name} handler not supported on this platform")


async def run(args: argparse.Namespace) -> int:
    """Runs one scrape and returns the process exit code."""
    tracker = ProgressTracker()
    cache = ResultCache()
    browser = BrowserClient()
    received_signals: List[signal.Signals] = []
    _install_signal_handlers(asyncio.current_task(), received_signals)

    if not args.disable_cache:
        log.info("Loading cache...")
        cache.load()
        log.info(f"Loaded {len(cache)} names from cache")
    else:
        log.info("Cache disabled, will fetch all data fresh")

    try:
        names = json_storage.deduplicate_names(json_storage.load_names(args.name_list))
        await browser.start()

        orchestrator = BatchOrchestrator(
            session=SearchSession(browser, tracker),
            tracker=tracker,
            cache=cache,
            batch_size=args.batch_size,
            results_writer=partial(json_storage.save_results, minify=args.minify),
        )

        log.info(f"Scraping {len(names)} names in batches of {args.batch_size}... This may take a while.")
        started = time.perf_counter()
        with nullcontext() if args.no_status else StatusDisplay(tracker):
            entries = await orchestrator.scrape_by_names(names, disable_cache=args.disable_cache)
        log.info(f"Scraping time: {time.perf_counter() - started:.1f}s")

        log.info("All names processed, writing final results to disk")
        json_storage.save_results(entries, minify=args.minify)

        if args.elasticsearch:
            save_entries_to_elasticsearch(entries)

        if not args.disable_cache:
            log.info("Saving cache...")
            if cache.save(minify=args.minify):
                log.info(f"Saved {len(cache)} names to cache")

        log.info(f"Done! {len(entries)} entries saved.{' (minified)' if args.minify else ''}")
        log.info(f"Run summary: {json.dumps(tracker.generate_report())}")
        return 0
    except asyncio.CancelledError:
        log.warning("Run cancelled, stopping the scrape")
        signum = received_signals[0] if received_signals else signal.SIGTERM
        return EXIT_CODES_BY_SIGNAL[signum]
    except Exception:
        log.critical("Scraping run failed", exc_info=True)
        return EXIT_FAILURE
    finally:
        log.info("Finishing up...")
        await browser.close()


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
