"""Smart Search API - Main Application."""

import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartsearch import scheduler
from smartsearch.api.deps import EngineDep
from smartsearch.api.routes import (
    events_router,
    history_router,
    index_router,
    presets_router,
    search_router,
)
from smartsearch.config import settings
from smartsearch.models.search import SearchResults
from smartsearch.services.live_search import LiveSearch
from smartsearch.services.search_engine import SmartSearchEngine
from smartsearch.tasks.maintenance import schedule_maintenance
from smartsearch.utils.events import event_manager

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def publish_live_results(results: SearchResults) -> None:
    await event_manager.broadcast("search-results", results.model_dump_json())


@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = SmartSearchEngine(settings)
    app.state.engine = engine
    app.state.live_search = LiveSearch(engine, publish_live_results, settings.debounce_ms)

    scheduler_instance = AsyncIOScheduler()
    schedule_maintenance(scheduler_instance, engine, settings.optimize_interval_seconds)
    scheduler_instance.start()

    # Update the module-level scheduler so other modules can use it
    scheduler.set_scheduler(scheduler_instance)
    logger.info(f"{settings.app_name} started")

    yield
    app.state.live_search.cancel()
    scheduler_instance.shutdown()
    scheduler.set_scheduler(None)


app = FastAPI(
    title=settings.app_name,
    description="In-memory natural-language search over notes",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(events_router)
app.include_router(history_router)
app.include_router(index_router)
app.include_router(presets_router)
app.include_router(search_router)


@app.get("/health")
async def health_check(engine: EngineDep) -> dict:
    """
    System health check.

    Returns status of the application, the size of the index and when the
    next background optimization is due.
    """
    return {
        "status": "ok",
        "indexed_notes": engine.stats().total_notes,
        "next_optimization": scheduler.next_optimization(),
    }
