"""Index maintenance endpoints."""

import asyncio

from fastapi import APIRouter, Response, status

from smartsearch.api.deps import EngineDep
from smartsearch.models.note import Note
from smartsearch.models.search import IndexHealth, IndexStats, OptimizeReport
from smartsearch.schemas.index import RebuildRequest
from smartsearch.utils.events import event_manager

router = APIRouter(prefix="/api/index", tags=["index"])


@router.put("/notes", response_model=IndexStats)
async def index_note(note: Note, engine: EngineDep) -> IndexStats:
    """
    Add or replace a single note in the index.
    """
    stats = await asyncio.to_thread(engine.index_note, note)
    await event_manager.broadcast("note-indexed", note.id)
    return stats


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_note(note_id: str, engine: EngineDep) -> Response:
    """
    Remove a note from the index. Unknown ids are ignored.
    """
    removed = await asyncio.to_thread(engine.remove_note_from_index, note_id)
    if removed:
        await event_manager.broadcast("note-removed", note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/rebuild", response_model=IndexStats)
async def rebuild_index(request: RebuildRequest, engine: EngineDep) -> IndexStats:
    """
    Rebuild the index from a full note snapshot.
    """
    stats = await asyncio.to_thread(engine.build_index, request.notes)
    await event_manager.broadcast("index-rebuilt", stats.model_dump_json())
    return stats


@router.post("/optimize", response_model=OptimizeReport)
async def optimize_index(engine: EngineDep) -> OptimizeReport:
    """
    Drop empty postings and clean up the result cache.
    """
    report = await asyncio.to_thread(engine.optimize_index)
    await event_manager.broadcast("index-optimized", report.model_dump_json())
    return report


@router.get("/health", response_model=IndexHealth)
def index_health(engine: EngineDep) -> IndexHealth:
    """
    Index health metrics and maintenance recommendations.
    """
    return engine.get_index_health()


@router.get("/stats", response_model=IndexStats)
def index_stats(engine: EngineDep) -> IndexStats:
    """
    Current index statistics.
    """
    return engine.stats()
