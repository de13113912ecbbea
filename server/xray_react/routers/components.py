from fastapi import APIRouter, HTTPException, Query

from xray_react import state
from xray_react.models import ComponentPathRequest, ResolveResponse
from xray_react.services import editor, resolver
from xray_react.services.source_map import SourceIndex

router = APIRouter(prefix="/api/components", tags=["components"])


def require_source_index() -> SourceIndex:
    index = state.get_source_index()
    if index is None:
        raise HTTPException(status_code=503, detail="Source index unavailable")
    return index


def _resolve(structure: str) -> ResolveResponse:
    if not resolver.split_hierarchy(structure):
        raise HTTPException(status_code=400, detail="Empty component path")

    index = require_source_index()
    component, path = resolver.resolve_structure(structure, index.sources)
    if path is None:
        raise HTTPException(status_code=404, detail="No file found for components")
    return ResolveResponse(structure=structure, component=component, path=path)


@router.get("/resolve", response_model=ResolveResponse)
async def resolve_component(
    structure: str = Query(..., description="Arrow-separated component path, leaf last")
):
    """
    Resolve a component path to the source file that defines it, without
    opening anything.
    """
    return _resolve(structure)


@router.post("/open", response_model=ResolveResponse)
async def open_component(request: ComponentPathRequest):
    """
    Resolve a component path (as emitted by the overlay) and open the file
    in the configured editor.
    """
    response = _resolve(request.structure)
    response.opened = editor.open_file(response.path, state.get_options().editor)
    return response
