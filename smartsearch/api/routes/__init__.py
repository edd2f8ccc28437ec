"""API routes module."""

from smartsearch.api.routes.events import router as events_router
from smartsearch.api.routes.history import router as history_router
from smartsearch.api.routes.index import router as index_router
from smartsearch.api.routes.presets import router as presets_router
from smartsearch.api.routes.search import router as search_router

__all__ = [
    "events_router",
    "history_router",
    "index_router",
    "presets_router",
    "search_router",
]
