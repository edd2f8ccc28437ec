"""Pytest configuration and fixtures."""

from collections.abc import Callable, Generator
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from smartsearch.api.deps import get_engine, get_live_search
from smartsearch.config import Settings
from smartsearch.main import app, publish_live_results
from smartsearch.models.note import Note
from smartsearch.services.live_search import LiveSearch
from smartsearch.services.search_engine import SmartSearchEngine
from smartsearch.utils.datetime import to_millis

# Wednesday noon, local time
NOW_LOCAL = datetime(2024, 5, 15, 12, 0)
NOW = to_millis(NOW_LOCAL)


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, now: int = NOW):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


def days_ago(days: float) -> int:
    return to_millis(NOW_LOCAL - timedelta(days=days))


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    """Create a clock frozen at NOW."""
    return FakeClock()


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    """Create settings that ignore any local .env file."""
    return Settings(_env_file=None, debug=True)


@pytest.fixture(name="engine")
def engine_fixture(settings: Settings, clock: FakeClock) -> SmartSearchEngine:
    """Create an empty search engine on the fake clock."""
    return SmartSearchEngine(settings, clock=clock)


@pytest.fixture(name="make_note")
def make_note_fixture() -> Callable[..., Note]:
    """Create notes last modified at NOW unless told otherwise."""

    def factory(note_id: str, title: str = "", content: str = "", **kwargs) -> Note:
        kwargs.setdefault("created_at", NOW)
        kwargs.setdefault("updated_at", kwargs["created_at"])
        return Note(id=note_id, title=title, content=content, **kwargs)

    return factory


@pytest.fixture(name="notes")
def notes_fixture(make_note: Callable[..., Note]) -> list[Note]:
    """A small corpus covering categories, tags, dates and status flags."""
    return [
        make_note(
            "kickoff",
            "Project kickoff meeting",
            "Discussed the roadmap and budget for the new project",
            tags=["work", "planning"],
            category="Work",
            updated_at=days_ago(2),
        ),
        make_note(
            "groceries",
            "Grocery list",
            "Buy milk, eggs and bread",
            tags=["shopping"],
            category="Personal",
            is_pinned=True,
        ),
        make_note(
            "trip",
            "Trip ideas",
            "Flight to Lisbon and hotel booking",
            tags=["travel"],
            category="Travel",
            updated_at=days_ago(40),
        ),
        make_note(
            "sync",
            "Weekly sync notes",
            "Meeting notes about the roadmap review",
            tags=["work"],
            category="Work",
            updated_at=days_ago(8),
        ),
    ]


@pytest.fixture(name="indexed_engine")
def indexed_engine_fixture(engine: SmartSearchEngine, notes: list[Note]) -> SmartSearchEngine:
    """Create an engine with the sample corpus indexed."""
    engine.build_index(notes)
    return engine


@pytest.fixture(name="client")
def client_fixture(engine: SmartSearchEngine) -> Generator[TestClient, None, None]:
    """Create a test client bound to the fixture engine."""
    live = LiveSearch(engine, publish_live_results, debounce_ms=0)
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_live_search] = lambda: live
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


