from typing import List

from fastapi import APIRouter, HTTPException

from xray_react.models import CandidateEntry, RegisterSourceRequest, SourceMapSummary
from xray_react.routers.components import require_source_index

router = APIRouter(prefix="/api/sources", tags=["sources"])


@router.get("", response_model=SourceMapSummary)
async def get_source_map_summary():
    index = require_source_index()
    return SourceMapSummary(count=len(index.sources), candidates=index.candidate_count())


@router.get("/{name}", response_model=List[CandidateEntry])
async def get_candidates(name: str):
    """All candidate files registered for a component name."""
    index = require_source_index()
    candidates = index.sources.get(name)
    if not candidates:
        raise HTTPException(status_code=404, detail="Unknown component")
    return candidates


@router.post("/register", response_model=CandidateEntry)
async def register_source(request: RegisterSourceRequest):
    if not request.name.strip() or not request.path.strip():
        raise HTTPException(status_code=400, detail="Both name and path are required")
    index = require_source_index()
    return index.register_source(request.name.strip(), request.path)


@router.post("/rebuild", response_model=SourceMapSummary)
async def rebuild_source_map():
    """
    Force a re-scan of the project sources. Replaces the source map
    wholesale, dropping anything added through /register.
    """
    index = require_source_index()
    index.rebuild_source_map()
    return SourceMapSummary(count=len(index.sources), candidates=index.candidate_count())
