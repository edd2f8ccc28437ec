"""Tests for saved search presets."""

import json

import pytest
from conftest import FakeClock

from smartsearch.services.presets import (
    DEFAULT_PRESETS,
    PresetCategory,
    SavedSearchManager,
)
from smartsearch.utils.exceptions import NotFoundError, ValidationError


@pytest.fixture(name="manager")
def manager_fixture(clock: FakeClock) -> SavedSearchManager:
    return SavedSearchManager(clock=clock)


def test_defaults_are_present(manager: SavedSearchManager):
    presets = manager.list_presets()

    assert len(presets) == len(DEFAULT_PRESETS) == 5
    assert all(preset.is_default for preset in presets)


def test_save_and_get(manager: SavedSearchManager, clock: FakeClock):
    saved = manager.save("Standups", "standup notes this week", category=PresetCategory.WORK)

    fetched = manager.get(saved.id)

    assert fetched.name == "Standups"
    assert fetched.raw_query == "standup notes this week"
    assert fetched.is_default is False
    assert fetched.created_at == clock.now
    assert saved.id.startswith("search_")


@pytest.mark.parametrize(("name", "raw_query"), [("", "roadmap"), ("Roadmap", "   ")])
def test_save_rejects_blank_fields(manager: SavedSearchManager, name: str, raw_query: str):
    with pytest.raises(ValidationError):
        manager.save(name, raw_query)


def test_unknown_ids_raise(manager: SavedSearchManager):
    with pytest.raises(NotFoundError):
        manager.get("missing")
    with pytest.raises(NotFoundError):
        manager.delete("missing")
    with pytest.raises(NotFoundError):
        manager.record_usage("missing")


def test_delete(manager: SavedSearchManager):
    saved = manager.save("Standups", "standup")

    manager.delete(saved.id)

    with pytest.raises(NotFoundError):
        manager.get(saved.id)


def test_record_usage_and_most_used(manager: SavedSearchManager, clock: FakeClock):
    manager.record_usage("default_tasks")
    clock.advance(1000)
    used = manager.record_usage("default_tasks")
    manager.record_usage("default_work")

    assert used.usage_count == 2
    assert used.last_used == clock.now
    assert [preset.id for preset in manager.most_used(2)] == ["default_tasks", "default_work"]


def test_by_category(manager: SavedSearchManager):
    manager.save("Standups", "standup", category=PresetCategory.WORK)

    names = [preset.name for preset in manager.by_category(PresetCategory.WORK)]

    assert names == ["Work Notes", "Standups"]


def test_export_contains_only_user_presets(manager: SavedSearchManager):
    saved = manager.save("Standups", "standup")

    exported = json.loads(manager.export_json())

    assert [preset["id"] for preset in exported] == [saved.id]


def test_load_round_trip(manager: SavedSearchManager, clock: FakeClock):
    saved = manager.save("Standups", "standup")
    restored = SavedSearchManager(clock=clock)

    assert restored.load_json(manager.export_json()) is True
    assert restored.get(saved.id).name == "Standups"
    assert len(restored.list_presets()) == 6


def test_load_garbage_keeps_only_defaults(manager: SavedSearchManager):
    manager.save("Standups", "standup")

    assert manager.load_json("{broken") is False
    assert len(manager.list_presets()) == 5
