import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from fastapi import APIRouter

from xray_react import state
from xray_react.models import (
    ActivationRequest,
    ActivationResponse,
    ElementPayload,
    HierarchyRequest,
    HierarchyResponse,
    ImportMapPayload,
    OverlayEntryPayload,
    ProjectConfig,
    ProjectFilesPayload,
    RenderNodePayload,
    UsageMapPayload,
)
from xray_react.services.classifier import detect_project_root_from_paths
from xray_react.services.hierarchy import HierarchyPaths, build_paths, hierarchy_for_node
from xray_react.services.overlay import OverlayActivation, OverlayEntry
from xray_react.services.project_context import ProjectContext
from xray_react.services.render_tree import SourceOrigin, TreeNode, walk
from xray_react.services.scheduler import AsyncioScheduler

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hierarchy", tags=["hierarchy"])


@dataclass(eq=False)
class SerializedElement:
    """``DomElement`` rebuilt from an ``ElementPayload``."""

    tag_name: str
    node: Optional[TreeNode] = None
    parent_element: Optional["SerializedElement"] = None
    is_overlay: bool = False

    def render_node(self) -> Optional[TreeNode]:
        return self.node

    def parent(self) -> Optional["SerializedElement"]:
        return self.parent_element


class _FutureSink:
    def __init__(self, future: "asyncio.Future[List[OverlayEntry]]"):
        self.future = future

    def append(self, entries: List[OverlayEntry]) -> None:
        if not self.future.done():
            self.future.set_result(entries)


def build_chain(nodes: List[RenderNodePayload]) -> Optional[TreeNode]:
    """
    Link serialized render nodes (nearest first) into a parent chain and
    return the nearest one.
    """
    chain = [
        TreeNode(
            element_type=node.name,
            source_origin=SourceOrigin(node.sourceFile, node.line) if node.sourceFile else None,
            key=node.key,
        )
        for node in nodes
    ]
    for child, parent in zip(chain, chain[1:]):
        child.parent_node = parent
    return chain[0] if chain else None


def build_elements(payloads: List[ElementPayload]) -> List[SerializedElement]:
    elements = [
        SerializedElement(
            tag_name=payload.tagName,
            node=build_chain(payload.nodes),
            is_overlay=payload.isOverlay,
        )
        for payload in payloads
    ]
    for index, payload in enumerate(payloads):
        parent = payload.parent
        if parent is not None and 0 <= parent < len(elements) and parent != index:
            elements[index].parent_element = elements[parent]
    return elements


def _ensure_project_root(context: ProjectContext, source_files: Iterable[Optional[str]]) -> None:
    """Infer a project root from source origins when none has been pushed."""
    if context.project_root:
        return
    detected = detect_project_root_from_paths(source_files)
    if detected:
        logger.info("Detected project root from render tree: %s", detected)
        context.replace_project_root(detected)


def _response(paths: HierarchyPaths) -> HierarchyResponse:
    return HierarchyResponse(full=paths.full, filtered=paths.filtered, preferred=paths.preferred)


@router.post("", response_model=HierarchyResponse)
async def build_hierarchy(request: HierarchyRequest):
    """
    Build the full and filtered component paths for a serialized render
    tree branch, using the current project context.
    """
    context = state.get_project_context()
    _ensure_project_root(context, (node.sourceFile for node in request.nodes))
    root = build_chain(request.nodes)

    if request.leaf:
        observations = list(reversed(walk(root, context)))
        return _response(build_paths(observations, request.leaf, context))
    return _response(hierarchy_for_node(root, context))


@router.post("/activate", response_model=ActivationResponse)
async def activate_overlay(request: ActivationRequest):
    """
    Run a full overlay activation over serialized DOM elements: one entry
    per component, each with its full and filtered paths. Batches are
    interleaved with other work on the event loop.
    """
    context = state.get_project_context()
    _ensure_project_root(
        context,
        (node.sourceFile for element in request.elements for node in element.nodes),
    )

    loop = asyncio.get_running_loop()
    done: "asyncio.Future[List[OverlayEntry]]" = loop.create_future()
    activation = OverlayActivation(context, AsyncioScheduler(loop))
    activation.activate(build_elements(request.elements), _FutureSink(done))
    entries = await done

    return ActivationResponse(
        entries=[
            OverlayEntryPayload(
                name=entry.name,
                uid=entry.uid,
                full=entry.full_path,
                filtered=entry.filtered_path,
                preferred=entry.preferred_path,
            )
            for entry in entries
        ]
    )


@router.put("/context/config", response_model=ProjectConfig)
async def set_project_config(config: ProjectConfig):
    context = state.get_project_context()
    context.apply_config(config)
    return ProjectConfig(projectRoot=context.project_root, port=config.port, mode=context.mode)


@router.put("/context/usage-map")
async def set_usage_map(payload: UsageMapPayload):
    state.get_project_context().replace_usage_map(payload.usage)
    return {"files": len(payload.usage)}


@router.put("/context/import-map")
async def set_import_map(payload: ImportMapPayload):
    state.get_project_context().replace_import_map(payload.imports)
    return {"files": len(payload.imports)}


@router.put("/context/files")
async def set_project_files(payload: ProjectFilesPayload):
    state.get_project_context().replace_project_files(payload.files)
    return {"files": len(payload.files)}
