from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from smartsearch.utils.events import event_manager

router = APIRouter(tags=["events"])


@router.get("/api/events")
async def events_endpoint():
    """SSE endpoint for index and live-search updates."""
    return StreamingResponse(
        event_manager.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for Nginx
        },
    )
