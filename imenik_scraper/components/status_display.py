import logging
from typing import Optional

from rich.console import Console, Group
from rich.live import Live
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from imenik_scraper.components.progress_tracker import ProgressSnapshot, ProgressTracker
from imenik_scraper.models.name_status import SearchStatus
from imenik_scraper.utils.logging_setup import CONSOLE_HANDLER_NAME


QUEUE_PREVIEW_SIZE = 2


def render_status(snapshot: ProgressSnapshot) -> Group:
    """Builds the current batch / queue / completed view of a progress snapshot."""
    processing, pending, completed = [], [], 0
    for name, status in snapshot.items():
        if status.status == SearchStatus.PROCESSING:
            processing.append((name, f"{status.current_page}/{status.total_pages}"))
        elif status.status == SearchStatus.PENDING:
            pending.append((name, f"0/{status.total_pages}"))
        else:
            completed += 1

    current_batch = Table(title="Current batch", box=None, show_header=False)
    current_batch.add_column("Name")
    current_batch.add_column("Pages", justify="right")
    for name, pages in processing:
        current_batch.add_row(name, pages)
    if not processing:
        current_batch.add_row("No names currently processing", "")

    queue = Table(title="Queue", box=None, show_header=False)
    queue.add_column("Name")
    queue.add_column("Pages", justify="right")
    for name, pages in pending[:QUEUE_PREVIEW_SIZE]:
        queue.add_row(name, pages)
    if len(pending) > QUEUE_PREVIEW_SIZE:
        queue.add_row(f"... and {len(pending) - QUEUE_PREVIEW_SIZE} more", "")
    if not pending:
        queue.add_row("Queue empty", "")

    return Group(current_batch, queue, Text(f"Completed: {completed} names completed"))


class StatusDisplay:
    """
    Live console view of a ProgressTracker. Use as a context manager around the run.
    While active, the root logger's console handler is replaced by a RichHandler
    on the same console, so log lines print above the table instead of through it.
    """

    def __init__(self, tracker: ProgressTracker, console: Optional[Console] = None):
        self.console = console or Console()
        self._live = Live(render_status(tracker.snapshot()), console=self.console, refresh_per_second=4)
        self._replaced_handler: Optional[logging.Handler] = None
        self._rich_handler: Optional[RichHandler] = None
        tracker.subscribe(self.refresh)

    def refresh(self, snapshot: ProgressSnapshot):
        self._live.update(render_status(snapshot))

    def _route_logging_to_console(self):
        root_logger = logging.getLogger()
        for handler in root_logger.handlers:
            if handler.get_name() == CONSOLE_HANDLER_NAME:
                self._replaced_handler = handler
                break
        if self._replaced_handler is None:
            return

        self._rich_handler = RichHandler(console=self.console, show_path=False)
        self._rich_handler.setLevel(self._replaced_handler.level)
        self._rich_handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
        root_logger.removeHandler(self._replaced_handler)
        root_logger.addHandler(self._rich_handler)

    def _restore_logging(self):
        if self._replaced_handler is None:
            return
        root_logger = logging.getLogger()
        root_logger.removeHandler(self._rich_handler)
        root_logger.addHandler(self._replaced_handler)
        self._replaced_handler = self._rich_handler = None

    def __enter__(self) -> "StatusDisplay":
        self._route_logging_to_console()
        self._live.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self._live.stop()
        self._restore_logging()
