"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from smartsearch.services.live_search import LiveSearch
from smartsearch.services.search_engine import SmartSearchEngine


def get_engine(request: Request) -> SmartSearchEngine:
    """Get the search engine created by the application lifespan."""
    return request.app.state.engine


EngineDep = Annotated[SmartSearchEngine, Depends(get_engine)]


def get_live_search(request: Request) -> LiveSearch:
    """Get the live search runner created by the application lifespan."""
    return request.app.state.live_search


LiveSearchDep = Annotated[LiveSearch, Depends(get_live_search)]
