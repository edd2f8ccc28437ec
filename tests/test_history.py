"""Tests for search history and analytics."""

import importlib
import warnings

import pytest
from conftest import FakeClock

from smartsearch.schemas import history as history_schemas
from smartsearch.services.history import SearchAnalytics, SearchHistory
from smartsearch.services.query_parser import QueryParser


@pytest.fixture(name="history")
def history_fixture(clock: FakeClock) -> SearchHistory:
    return SearchHistory(limit=3, clock=clock)


@pytest.fixture(name="record")
def record_fixture(history: SearchHistory, clock: FakeClock):
    parser = QueryParser(clock=clock)

    def record(raw: str, result_count: int = 1, search_time_ms: int = 10) -> None:
        clock.advance(1000)
        history.record(parser.parse(raw), result_count, search_time_ms)

    return record


def test_record_moves_repeated_query_to_front(history: SearchHistory, record):
    record("roadmap")
    record("groceries")
    record("roadmap")

    recent = history.recent()

    assert [entry.query for entry in recent] == ["roadmap", "groceries"]
    assert recent[0].usage_count == 2


def test_history_is_bounded(history: SearchHistory, record):
    for raw in ["one query", "two query", "three query", "four query"]:
        record(raw)

    assert [entry.query for entry in history.recent()] == [
        "four query",
        "three query",
        "two query",
    ]


def test_blank_queries_are_not_recorded(history: SearchHistory, record):
    record("   ")

    assert history.recent() == []
    assert history.analytics().total_searches == 0


def test_popular_orders_by_usage(history: SearchHistory, record):
    record("roadmap")
    record("roadmap")
    record("groceries")

    assert [entry.query for entry in history.popular()] == ["roadmap", "groceries"]


def test_matching_is_case_insensitive(history: SearchHistory, record):
    record("Roadmap review")
    record("groceries")

    assert [entry.query for entry in history.matching("ROAD")] == ["Roadmap review"]
    assert history.matching("  ") == []


def test_analytics(history: SearchHistory, record):
    record("roadmap review", result_count=4, search_time_ms=10)
    record("zebra", result_count=0, search_time_ms=20)
    record("roadmap", result_count=2, search_time_ms=30)

    analytics = history.analytics()

    assert analytics.total_searches == 3
    assert analytics.successful_searches == 2
    assert analytics.average_results == pytest.approx(2.0)
    assert analytics.average_search_time_ms == pytest.approx(20.0)
    assert analytics.failed_queries == ["zebra"]
    assert analytics.popular_terms["roadmap"] == 2
    assert analytics.success_rate == pytest.approx(2 / 3)


def test_success_rate_without_searches(history: SearchHistory):
    assert history.analytics().success_rate == 0.0


def test_export_and_load(history: SearchHistory, record, clock: FakeClock):
    record("roadmap")
    record("zebra", result_count=0)

    restored = SearchHistory(clock=clock)

    assert restored.load_json(history.export_json()) is True
    assert [entry.query for entry in restored.recent()] == ["zebra", "roadmap"]
    assert restored.analytics().failed_queries == ["zebra"]


def test_load_garbage_resets(history: SearchHistory, record):
    record("roadmap")

    assert history.load_json("not json at all") is False
    assert history.recent() == []
    assert history.load_json(None) is False


def test_clear(history: SearchHistory, record):
    record("roadmap")
    history.clear()

    assert history.recent() == []
    assert history.analytics().total_searches == 0


def test_analytics_response_defines_cleanly():
    """Test that the response schema does not shadow analytics attributes."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        module = importlib.reload(history_schemas)

    response = module.AnalyticsResponse.from_analytics(
        SearchAnalytics(total_searches=4, successful_searches=3)
    )

    assert response.success_rate == pytest.approx(0.75)
    assert response.total_searches == 4
