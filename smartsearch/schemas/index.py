"""Index maintenance schemas."""

from pydantic import BaseModel

from smartsearch.models.note import Note


class RebuildRequest(BaseModel):
    """Schema for a full index rebuild."""

    notes: list[Note]
