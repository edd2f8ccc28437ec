"""Search endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from smartsearch.api.deps import EngineDep, LiveSearchDep
from smartsearch.models.search import SearchResults
from smartsearch.schemas.search import LiveSearchAccepted, SearchRequest, SuggestionsResponse

router = APIRouter(prefix="/api/search", tags=["search"])


@router.post("", response_model=SearchResults)
def search(request: SearchRequest, engine: EngineDep) -> SearchResults:
    """
    Search notes with a natural-language query.

    When a note snapshot is included and differs from the indexed one, the
    index is rebuilt before searching.
    """
    return engine.search(request.query, notes=request.notes, max_results=request.limit)


@router.get("/suggestions", response_model=SuggestionsResponse)
def suggestions(
    engine: EngineDep,
    q: Annotated[str, Query()] = "",
    limit: Annotated[int | None, Query(ge=1, le=20)] = None,
    context: Annotated[str | None, Query()] = None,
) -> SuggestionsResponse:
    """
    Suggestions for partially typed text.
    """
    return SuggestionsResponse(suggestions=engine.get_suggestions(q, limit, context))


@router.post(
    "/live", response_model=LiveSearchAccepted, status_code=status.HTTP_202_ACCEPTED
)
async def live_search(request: SearchRequest, live: LiveSearchDep) -> LiveSearchAccepted:
    """
    Debounced search-as-you-type.

    Supersedes any pending live search; results are delivered as a
    'search-results' event on the SSE stream.
    """
    live.submit(request.query, notes=request.notes, max_results=request.limit)
    return LiveSearchAccepted(query=request.query)
