"""Note snapshot model."""

from pydantic import BaseModel, Field

from smartsearch.utils.datetime import now_millis


class Note(BaseModel):
    """
    A note as supplied by the persistence layer.

    The engine treats notes as read-only snapshots; timestamps are epoch
    milliseconds.
    """

    id: str
    title: str = ""
    content: str = ""
    tags: list[str] = Field(default_factory=list)  # ordered, may repeat
    category: str = "General"

    created_at: int = Field(default_factory=now_millis)
    updated_at: int = Field(default_factory=now_millis)

    is_pinned: bool = False
    is_favorite: bool = False
    is_archived: bool = False
