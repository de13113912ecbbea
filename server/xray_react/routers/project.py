from fastapi import APIRouter

from xray_react import state
from xray_react.models import ImportMapPayload, ProjectConfig, ProjectFilesPayload, UsageMapPayload
from xray_react.routers.components import require_source_index

router = APIRouter(prefix="/api/project", tags=["project"])


@router.get("/config", response_model=ProjectConfig)
async def get_project_config():
    options = state.get_options()
    index = state.get_source_index()
    if index is None:
        return ProjectConfig(projectRoot=options.project_root, port=options.port, mode=options.mode)
    return index.project_config(options.port, options.mode)


@router.get("/usage-map", response_model=UsageMapPayload)
async def get_usage_map():
    return UsageMapPayload(usage=require_source_index().usage_map)


@router.get("/import-map", response_model=ImportMapPayload)
async def get_import_map():
    return ImportMapPayload(imports=require_source_index().import_map)


@router.get("/files", response_model=ProjectFilesPayload)
async def get_project_files():
    return ProjectFilesPayload(files=require_source_index().project_files)
