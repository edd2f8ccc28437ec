"""Tests for live search, SSE events and scheduled maintenance."""

import asyncio

import pytest
from conftest import FakeClock

from smartsearch.models.search import SearchResults
from smartsearch.services.live_search import LiveSearch
from smartsearch.services.search_engine import SmartSearchEngine
from smartsearch.tasks.maintenance import OPTIMIZE_JOB_ID, optimize_index, schedule_maintenance
from smartsearch.utils.events import EventManager


class Recorder:
    """Collects published results."""

    def __init__(self):
        self.published: list[SearchResults] = []

    async def __call__(self, results: SearchResults) -> None:
        self.published.append(results)


def test_latest_submission_wins(indexed_engine: SmartSearchEngine):
    recorder = Recorder()
    live = LiveSearch(indexed_engine, recorder, debounce_ms=0)

    async def scenario():
        first = live.submit("roadmap")
        second = live.submit("milk")
        with pytest.raises(asyncio.CancelledError):
            await first
        return await second

    results = asyncio.run(scenario())

    assert [r.query.raw_query for r in recorder.published] == ["milk"]
    assert results.results[0].note.id == "groceries"
    assert live.pending is False


def test_cancel_pending_search(indexed_engine: SmartSearchEngine):
    recorder = Recorder()
    live = LiveSearch(indexed_engine, recorder, debounce_ms=1000)

    async def scenario():
        task = live.submit("roadmap")
        assert live.pending is True
        assert live.cancel() is True
        with pytest.raises(asyncio.CancelledError):
            await task
        assert live.cancel() is False

    asyncio.run(scenario())

    assert recorder.published == []


def test_event_stream_formats_messages():
    manager = EventManager()

    async def scenario():
        stream = manager.subscribe()
        ping = await stream.__anext__()
        await manager.broadcast("note-indexed", "kickoff")
        message = await stream.__anext__()
        await stream.aclose()
        return ping, message

    ping, message = asyncio.run(scenario())

    assert ping == ": ping\n\n"
    assert message == "event: note-indexed\ndata: kickoff\n\n"
    assert manager.queues == set()


def test_broadcast_without_subscribers_is_noop():
    asyncio.run(EventManager().broadcast("index-rebuilt", "{}"))


def test_optimize_job(indexed_engine: SmartSearchEngine, clock: FakeClock):
    asyncio.run(optimize_index(indexed_engine))

    assert indexed_engine.stats().last_optimized == clock.now


def test_optimize_job_logs_failures(caplog):
    class BrokenEngine:
        def optimize_index(self):
            raise RuntimeError("boom")

    asyncio.run(optimize_index(BrokenEngine()))

    assert "Index optimization failed: boom" in caplog.text


def test_schedule_maintenance(engine: SmartSearchEngine):
    class RecordingScheduler:
        def __init__(self):
            self.jobs = []

        def add_job(self, func, trigger, **kwargs):
            self.jobs.append((func, trigger, kwargs))

    scheduler = RecordingScheduler()

    schedule_maintenance(scheduler, engine, 600)

    [(func, trigger, kwargs)] = scheduler.jobs
    assert func is optimize_index
    assert trigger == "interval"
    assert kwargs["seconds"] == 600
    assert kwargs["args"] == [engine]
    assert kwargs["id"] == OPTIMIZE_JOB_ID
    assert kwargs["replace_existing"] is True


def test_failed_search_is_logged(caplog):
    class BrokenEngine:
        def search(self, *args):
            raise RuntimeError("index unavailable")

    recorder = Recorder()
    live = LiveSearch(BrokenEngine(), recorder, debounce_ms=0)

    async def scenario():
        task = live.submit("roadmap")
        with pytest.raises(RuntimeError):
            await task
        await asyncio.sleep(0)

    asyncio.run(scenario())

    assert "Live search failed: index unavailable" in caplog.text
    assert recorder.published == []
