"""Saved search endpoints."""

from fastapi import APIRouter, Response, status

from smartsearch.api.deps import EngineDep
from smartsearch.models.search import SearchResults
from smartsearch.schemas.presets import PresetCreate, PresetListResponse, PresetRunRequest
from smartsearch.services.presets import SavedSearchPreset
from smartsearch.utils.exceptions import NotFoundError, ValidationError

router = APIRouter(prefix="/api/presets", tags=["presets"])


@router.get("", response_model=PresetListResponse)
def list_presets(engine: EngineDep) -> PresetListResponse:
    """
    List built-in and user presets.
    """
    return PresetListResponse(presets=engine.presets.list_presets())


@router.post("", response_model=SavedSearchPreset, status_code=status.HTTP_201_CREATED)
def save_preset(request: PresetCreate, engine: EngineDep) -> SavedSearchPreset:
    """
    Save a search as a named preset.
    """
    try:
        return engine.presets.save(
            name=request.name,
            raw_query=request.raw_query,
            description=request.description,
            category=request.category,
        )
    except ValidationError as e:
        raise e.to_http_exception()


@router.delete("/{preset_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preset(preset_id: str, engine: EngineDep) -> Response:
    """
    Delete a preset.
    """
    try:
        engine.presets.delete(preset_id)
    except NotFoundError as e:
        raise e.to_http_exception()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{preset_id}/run", response_model=SearchResults)
def run_preset(
    preset_id: str, engine: EngineDep, request: PresetRunRequest | None = None
) -> SearchResults:
    """
    Run a preset. Relative dates in its query resolve against today.
    """
    request = request or PresetRunRequest()
    try:
        return engine.run_preset(preset_id, notes=request.notes, max_results=request.limit)
    except NotFoundError as e:
        raise e.to_http_exception()
