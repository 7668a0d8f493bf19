"""Tests for batching, caching and failure isolation in the orchestrator."""

from __future__ import annotations

import asyncio
import json
from typing import Dict, List, Sequence

import pytest

from imenik_scraper.components.batch_orchestrator import BatchOrchestrator, split_into_batches
from imenik_scraper.components.progress_tracker import ProgressTracker
from imenik_scraper.components.result_cache import ResultCache
from imenik_scraper.models.entry import Entry
from imenik_scraper.models.name_status import SearchStatus
from imenik_scraper.utils import json_storage


def _entries_for(name: str, count: int = 2) -> List[Entry]:
    return [
        Entry(telephone_number=f"091 000 {i:03d}", street="Ilica 1", city="Zagreb", full_name=f"{name} {i}")
        for i in range(count)
    ]


class _FakeSession:
    """Stands in for SearchSession and records how sessions were scheduled."""

    def __init__(self, tracker: ProgressTracker, failing: Sequence[str] = (), empty: Sequence[str] = ()) -> None:
        self.tracker = tracker
        self.failing = set(failing)
        self.empty = set(empty)
        self.started: List[str] = []
        self.events: List[tuple] = []
        self.running = 0
        self.max_running = 0

    async def scrape_by_name(self, name: str) -> List[Entry]:
        self.tracker.start(name)
        self.started.append(name)
        self.events.append(("start", name))
        self.running += 1
        self.max_running = max(self.max_running, self.running)
        try:
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            if name in self.failing:
                raise RuntimeError(f"navigation failed for {name}")
            entries = [] if name in self.empty else _entries_for(name)
        finally:
            self.running -= 1
            self.events.append(("end", name))
        self.tracker.complete(name)
        return entries


class _RecordingWriter:
    def __init__(self) -> None:
        self.checkpoints: List[List[Entry]] = []

    def __call__(self, entries: List[Entry]) -> None:
        self.checkpoints.append(list(entries))


def _orchestrator(tmp_path, batch_size=10, failing=(), empty=(), cache=None):
    tracker = ProgressTracker(default_total_pages=10)
    session = _FakeSession(tracker, failing=failing, empty=empty)
    cache = cache if cache is not None else ResultCache(str(tmp_path / "cache.json"))
    writer = _RecordingWriter()
    orchestrator = BatchOrchestrator(session, tracker, cache, batch_size=batch_size, results_writer=writer)
    return orchestrator, session, tracker, cache, writer


def test_split_into_batches_sizes():
    batches = split_into_batches([f"n{i}" for i in range(25)], 10)

    assert [len(batch) for batch in batches] == [10, 10, 5]
    assert batches[2] == [f"n{i}" for i in range(20, 25)]


def test_split_into_batches_edge_cases():
    assert split_into_batches([], 3) == []
    assert split_into_batches(["a"], 3) == [["a"]]
    with pytest.raises(ValueError):
        split_into_batches(["a"], 0)


def test_batches_run_strictly_in_sequence(tmp_path):
    names = [f"Name{i}" for i in range(25)]
    orchestrator, session, _, _, writer = _orchestrator(tmp_path, batch_size=10)

    asyncio.run(orchestrator.scrape_by_names(names))

    assert session.started == names
    assert session.max_running == 10
    for batch_number, batch in enumerate(split_into_batches(names, 10)[1:], start=1):
        first_start = session.events.index(("start", batch[0]))
        previous = split_into_batches(names, 10)[batch_number - 1]
        assert all(session.events.index(("end", name)) < first_start for name in previous)
    assert len(writer.checkpoints) == 3
    assert [len(checkpoint) for checkpoint in writer.checkpoints] == [20, 40, 50]


def test_results_follow_input_order_within_batch(tmp_path):
    orchestrator, *_ = _orchestrator(tmp_path, batch_size=3)

    entries = asyncio.run(orchestrator.scrape_by_names(["Ana", "Ivan", "Marko"]))

    assert [entry.full_name for entry in entries] == ["Ana 0", "Ana 1", "Ivan 0", "Ivan 1", "Marko 0", "Marko 1"]


def test_cached_name_skips_session_and_contributes_cached_entries(tmp_path):
    cache = ResultCache(str(tmp_path / "cache.json"))
    cached = _entries_for("Cached", count=3)
    cache.put("Ivan", cached)
    orchestrator, session, tracker, _, _ = _orchestrator(tmp_path, cache=cache)

    entries = asyncio.run(orchestrator.scrape_by_names(["Ivan", "Ana"]))

    assert "Ivan" not in session.started
    assert session.started == ["Ana"]
    assert entries[:3] == cached
    assert sum(1 for entry in entries if entry in cached) == 3
    status = tracker.get("Ivan")
    assert status.status == SearchStatus.COMPLETED
    assert status.current_page == status.total_pages


def test_disable_cache_scrapes_everything_and_leaves_cache_untouched(tmp_path):
    cache = ResultCache(str(tmp_path / "cache.json"))
    cache.put("Ivan", _entries_for("Cached"))
    orchestrator, session, _, cache, _ = _orchestrator(tmp_path, cache=cache)

    entries = asyncio.run(orchestrator.scrape_by_names(["Ivan", "Ana"], disable_cache=True))

    assert session.started == ["Ivan", "Ana"]
    assert [entry.full_name for entry in entries] == ["Ivan 0", "Ivan 1", "Ana 0", "Ana 1"]
    assert cache.get("Ivan") == _entries_for("Cached")
    assert "Ana" not in cache


def test_one_failure_does_not_affect_rest_of_batch(tmp_path):
    names = ["A", "B", "C", "D", "E"]
    orchestrator, session, tracker, cache, _ = _orchestrator(tmp_path, batch_size=5, failing=["C"])

    entries = asyncio.run(orchestrator.scrape_by_names(names))

    assert sorted({entry.full_name.split()[0] for entry in entries}) == ["A", "B", "D", "E"]
    assert len(entries) == 8
    assert tracker.get("C").status == SearchStatus.COMPLETED
    assert "C" not in cache
    assert all(name in cache for name in ["A", "B", "D", "E"])


def test_failure_in_first_batch_does_not_stop_later_batches(tmp_path):
    orchestrator, session, *_ = _orchestrator(tmp_path, batch_size=2, failing=["A", "B"])

    entries = asyncio.run(orchestrator.scrape_by_names(["A", "B", "C"]))

    assert session.started == ["A", "B", "C"]
    assert [entry.full_name for entry in entries] == ["C 0", "C 1"]


def test_empty_results_are_not_cached(tmp_path):
    orchestrator, _, tracker, cache, _ = _orchestrator(tmp_path, empty=["Nobody"])

    entries = asyncio.run(orchestrator.scrape_by_names(["Nobody", "Ivan"]))

    assert "Nobody" not in cache
    assert cache.get("Ivan") == _entries_for("Ivan")
    assert len(entries) == 2
    assert tracker.get("Nobody").status == SearchStatus.COMPLETED


def test_no_names_to_scrape_returns_cached_only_without_checkpoint(tmp_path):
    cache = ResultCache(str(tmp_path / "cache.json"))
    cache.put("Ivan", _entries_for("Ivan"))
    orchestrator, session, _, _, writer = _orchestrator(tmp_path, cache=cache)

    entries = asyncio.run(orchestrator.scrape_by_names(["Ivan"]))

    assert entries == _entries_for("Ivan")
    assert session.started == []
    assert writer.checkpoints == []


def test_second_cached_run_launches_no_sessions_and_writes_identical_output(tmp_path):
    names = [f"Name{i}" for i in range(7)]
    cache_path = str(tmp_path / "cache.json")
    results_path = str(tmp_path / "results.json")

    def run_once() -> tuple[_FakeSession, str]:
        cache = ResultCache(cache_path).load()
        tracker = ProgressTracker()
        session = _FakeSession(tracker)
        orchestrator = BatchOrchestrator(
            session, tracker, cache, batch_size=3,
            results_writer=lambda entries: json_storage.save_results(entries, path=results_path),
        )
        entries = asyncio.run(orchestrator.scrape_by_names(names))
        json_storage.save_results(entries, path=results_path)
        cache.save()
        with open(results_path, encoding="utf-8") as handle:
            return session, handle.read()

    first_session, first_output = run_once()
    second_session, second_output = run_once()

    assert first_session.started == names
    assert second_session.started == []
    assert second_output == first_output
    assert len(json.loads(second_output)) == 14


def test_checkpoint_is_written_after_every_batch(tmp_path):
    results_path = tmp_path / "results.json"
    tracker = ProgressTracker()
    session = _FakeSession(tracker)
    sizes: Dict[int, int] = {}

    def writer(entries: List[Entry]) -> None:
        json_storage.save_results(entries, path=str(results_path))
        sizes[len(sizes)] = len(json.loads(results_path.read_text(encoding="utf-8")))

    orchestrator = BatchOrchestrator(
        session, tracker, ResultCache(str(tmp_path / "cache.json")), batch_size=2, results_writer=writer
    )
    asyncio.run(orchestrator.scrape_by_names(["A", "B", "C"]))

    assert sizes == {0: 4, 1: 6}
