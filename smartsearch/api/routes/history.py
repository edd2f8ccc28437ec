"""Search history endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from smartsearch.api.deps import EngineDep
from smartsearch.schemas.history import AnalyticsResponse, HistoryResponse

router = APIRouter(prefix="/api/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
def get_history(
    engine: EngineDep,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> HistoryResponse:
    """
    Recent and most used searches.
    """
    return HistoryResponse(
        recent=engine.history.recent(limit),
        popular=engine.history.popular(limit),
    )


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def clear_history(engine: EngineDep) -> Response:
    """
    Forget all recorded searches.
    """
    engine.history.clear()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/analytics", response_model=AnalyticsResponse)
def get_analytics(engine: EngineDep) -> AnalyticsResponse:
    """
    Aggregate search analytics.
    """
    return AnalyticsResponse.from_analytics(engine.history.analytics())
