import json
import logging
import os
from typing import Dict, List, Optional, Sequence

from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config
from imenik_scraper.utils.json_storage import dump_json

# Get a logger instance for this specific module.
log = logging.getLogger(__name__)


class ResultCache:
    """
    Search term -> entries collected for it on an earlier run.
    A term present in the cache is treated as fully resolved. Keys are exact
    and case-sensitive. The process is assumed to be the file's only writer.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.CACHE_FILE
        self._entries: Dict[str, List[Entry]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> "ResultCache":
        """Loads the cache file. A missing or unreadable file leaves the cache empty."""
        self._entries = {}
        if not os.path.exists(self.path):
            return self

        try:
            with open(self.path, "r", encoding="utf-8") as infile:
                data = json.load(infile)
            if not isinstance(data, dict):
                raise ValueError("cache file must contain a JSON object")
            self._entries = {
                name: [Entry.from_dict(item) for item in items]
                for name, items in data.items()
            }
        except (OSError, ValueError, TypeError, AttributeError) as e:
            log.warning(f"Error reading cache file '{self.path}': {e}")
            self._entries = {}
        return self

    def get(self, name: str) -> Optional[List[Entry]]:
        entries = self._entries.get(name)
        return list(entries) if entries is not None else None

    def put(self, name: str, entries: Sequence[Entry]):
        self._entries[name] = list(entries)

    def to_dict(self) -> Dict[str, List[Dict[str, str]]]:
        return {name: [entry.to_dict() for entry in entries] for name, entries in self._entries.items()}

    def save(self, minify: bool = False) -> bool:
        try:
            dump_json(self.to_dict(), self.path, minify=minify)
        except (OSError, TypeError) as e:
            log.error(f"Error writing cache file '{self.path}': {e}", exc_info=True)
            return False
        return True
