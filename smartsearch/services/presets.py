"""Saved search presets."""

import logging
import threading
import uuid
from collections.abc import Callable
from enum import Enum

import pydantic
from pydantic import BaseModel, TypeAdapter

from smartsearch.utils.datetime import now_millis
from smartsearch.utils.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class PresetCategory(str, Enum):
    WORK = "WORK"
    PERSONAL = "PERSONAL"
    ACADEMIC = "ACADEMIC"
    CREATIVE = "CREATIVE"
    PRODUCTIVITY = "PRODUCTIVITY"
    RECENT = "RECENT"
    FAVORITES = "FAVORITES"


class SavedSearchPreset(BaseModel):
    """
    A named query.

    Only the raw text is stored; it is parsed again on every run so relative
    dates resolve against the current day.
    """

    id: str
    name: str
    description: str = ""
    raw_query: str
    category: PresetCategory = PresetCategory.PERSONAL
    is_default: bool = False
    usage_count: int = 0
    last_used: int = 0
    created_at: int = 0


DEFAULT_PRESETS: tuple[SavedSearchPreset, ...] = (
    SavedSearchPreset(
        id="default_recent",
        name="Recent Notes",
        description="Notes from this week",
        raw_query="this week",
        category=PresetCategory.RECENT,
        is_default=True,
    ),
    SavedSearchPreset(
        id="default_work",
        name="Work Notes",
        description="All work-related notes and meetings",
        raw_query="work meeting project",
        category=PresetCategory.WORK,
        is_default=True,
    ),
    SavedSearchPreset(
        id="default_important",
        name="Important Notes",
        description="Pinned notes",
        raw_query="pinned",
        category=PresetCategory.FAVORITES,
        is_default=True,
    ),
    SavedSearchPreset(
        id="default_media",
        name="Media Notes",
        description="Notes about images, voice recordings and drawings",
        raw_query="voice OR image OR drawing",
        category=PresetCategory.PERSONAL,
        is_default=True,
    ),
    SavedSearchPreset(
        id="default_tasks",
        name="Tasks & TODOs",
        description="Unfinished tasks and checklists",
        raw_query="task OR checklist",
        category=PresetCategory.PRODUCTIVITY,
        is_default=True,
    ),
)

_PRESET_LIST = TypeAdapter(list[SavedSearchPreset])


class SavedSearchManager:
    """Built-in defaults plus user presets."""

    def __init__(self, clock: Callable[[], int] = now_millis):
        self.clock = clock
        self._presets: dict[str, SavedSearchPreset] = {
            preset.id: preset.model_copy() for preset in DEFAULT_PRESETS
        }
        self._lock = threading.Lock()

    def list_presets(self) -> list[SavedSearchPreset]:
        with self._lock:
            return [preset.model_copy() for preset in self._presets.values()]

    def get(self, preset_id: str) -> SavedSearchPreset:
        """
        Fetch a preset.

        Raises:
            NotFoundError: If no preset has this id
        """
        with self._lock:
            preset = self._presets.get(preset_id)
            if preset is None:
                raise NotFoundError("Saved search")
            return preset.model_copy()

    def save(
        self,
        name: str,
        raw_query: str,
        description: str = "",
        category: PresetCategory = PresetCategory.PERSONAL,
    ) -> SavedSearchPreset:
        """
        Save a user preset.

        Raises:
            ValidationError: If the name or the query is blank
        """
        if not name.strip() or not raw_query.strip():
            raise ValidationError("A saved search needs a name and a query")
        preset = SavedSearchPreset(
            id=f"search_{uuid.uuid4().hex[:12]}",
            name=name,
            description=description,
            raw_query=raw_query,
            category=category,
            created_at=self.clock(),
        )
        with self._lock:
            self._presets[preset.id] = preset
        logger.info(f"Saved search preset '{name}' ({preset.id})")
        return preset.model_copy()

    def delete(self, preset_id: str) -> None:
        """
        Delete a preset.

        Raises:
            NotFoundError: If no preset has this id
        """
        with self._lock:
            if self._presets.pop(preset_id, None) is None:
                raise NotFoundError("Saved search")
        logger.info(f"Deleted search preset {preset_id}")

    def record_usage(self, preset_id: str) -> SavedSearchPreset:
        with self._lock:
            preset = self._presets.get(preset_id)
            if preset is None:
                raise NotFoundError("Saved search")
            preset.usage_count += 1
            preset.last_used = self.clock()
            return preset.model_copy()

    def most_used(self, limit: int = 5) -> list[SavedSearchPreset]:
        return sorted(self.list_presets(), key=lambda preset: -preset.usage_count)[:limit]

    def by_category(self, category: PresetCategory) -> list[SavedSearchPreset]:
        return [preset for preset in self.list_presets() if preset.category == category]

    def export_json(self) -> str:
        """User presets only; defaults are always rebuilt."""
        with self._lock:
            user_presets = [p for p in self._presets.values() if not p.is_default]
        return _PRESET_LIST.dump_json(user_presets).decode("utf-8")

    def load_json(self, data: str | bytes | None) -> bool:
        """
        Load user presets; undecodable input leaves only the defaults.

        Returns:
            True when the data was loaded
        """
        presets: list[SavedSearchPreset] = []
        loaded = False
        if data:
            try:
                presets = _PRESET_LIST.validate_json(data)
                loaded = True
            except pydantic.ValidationError as e:
                logger.warning(f"Discarding unreadable saved searches: {e}")

        with self._lock:
            self._presets = {preset.id: preset.model_copy() for preset in DEFAULT_PRESETS}
            for preset in presets:
                self._presets[preset.id] = preset
        return loaded
