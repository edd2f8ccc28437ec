"""Saved search schemas."""

from pydantic import BaseModel, Field

from smartsearch.models.note import Note
from smartsearch.services.presets import PresetCategory, SavedSearchPreset


class PresetCreate(BaseModel):
    """Schema for saving a search."""

    name: str
    raw_query: str
    description: str = ""
    category: PresetCategory = PresetCategory.PERSONAL


class PresetRunRequest(BaseModel):
    """Schema for running a saved search."""

    limit: int | None = Field(default=None, ge=1)
    notes: list[Note] | None = None


class PresetListResponse(BaseModel):
    """Schema for the preset list."""

    presets: list[SavedSearchPreset]
