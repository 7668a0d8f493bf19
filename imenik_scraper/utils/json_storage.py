import json
import logging
from typing import Any, List, Optional, Sequence

from imenik_scraper.models.entry import Entry
from imenik_scraper.utils import config

log = logging.getLogger(__name__)


def dump_json(data: Any, path: str, minify: bool = False):
    """Writes data as JSON, 2-space indented unless minify is set."""
    indent = None if minify else 2
    separators = (",", ":") if minify else None
    with open(path, "w", encoding="utf-8") as outfile:
        json.dump(data, outfile, indent=indent, separators=separators, ensure_ascii=False)


def load_names(path: str) -> List[str]:
    """
    Reads the list of search terms. Errors propagate: a missing or malformed
    name list is fatal for the whole run.
    """
    with open(path, "r", encoding="utf-8") as infile:
        names = json.load(infile)

    if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
        raise ValueError(f"Name list '{path}' must be a JSON array of strings")
    return names


def deduplicate_names(names: Sequence[str]) -> List[str]:
    """Drops repeated search terms, keeping the first occurrence order."""
    return list(dict.fromkeys(names))


def save_results(entries: Sequence[Entry], minify: bool = False, path: Optional[str] = None) -> bool:
    path = path or config.RESULTS_FILE
    try:
        dump_json([entry.to_dict() for entry in entries], path, minify=minify)
    except (OSError, TypeError) as e:
        log.error(f"Error writing results file '{path}': {e}", exc_info=True)
        return False

    log.info(f"Saved {len(entries)} entries to {path}")
    return True


def load_results(path: Optional[str] = None) -> List[Entry]:
    path = path or config.RESULTS_FILE
    with open(path, "r", encoding="utf-8") as infile:
        return [Entry.from_dict(item) for item in json.load(infile)]
