import logging
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from xray_react import state
from xray_react.models import ProjectConfig
from xray_react.services import editor, resolver

logger = logging.getLogger(__name__)

router = APIRouter(tags=["channel"])


async def _emit(websocket: WebSocket, event: str, data: Dict[str, Any]) -> None:
    await websocket.send_json({"event": event, "data": data})


async def _send_initial_state(websocket: WebSocket) -> None:
    options = state.get_options()
    index = state.get_source_index()

    if index is None:
        config = ProjectConfig(projectRoot=options.project_root, port=options.port, mode=options.mode)
        await _emit(websocket, "project-config", config.model_dump())
        return

    await _emit(websocket, "project-config", index.project_config(options.port, options.mode).model_dump())
    await _emit(websocket, "usage-map", {"usage": index.usage_map})
    await _emit(websocket, "import-map", {"imports": index.import_map})
    await _emit(websocket, "project-files", {"files": index.project_files})


async def _handle_component(websocket: WebSocket, structure: Any) -> None:
    index = state.get_source_index()
    if not isinstance(structure, str) or index is None:
        await _emit(websocket, "component-resolved", {"structure": structure, "path": None})
        return

    component, path = resolver.resolve_structure(structure, index.sources)
    opened = False
    if path is not None:
        logger.info("Opening %s (component: %s)", path, component)
        opened = editor.open_file(path, state.get_options().editor)

    await _emit(
        websocket,
        "component-resolved",
        {"structure": structure, "component": component, "path": path, "opened": opened},
    )


@router.websocket("/ws")
async def component_channel(websocket: WebSocket):
    """
    Event channel for the browser overlay.

    On connect the server pushes ``project-config``, ``usage-map``,
    ``import-map`` and ``project-files``. Messages are JSON objects of the
    form ``{"event": ..., "data": ...}``; see the handlers below.
    """
    await websocket.accept()
    logger.info("Client connected")
    await _send_initial_state(websocket)

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                logger.warning("Ignoring malformed channel message")
                continue
            if not isinstance(message, dict):
                continue

            event = message.get("event")
            data = message.get("data")

            if event == "xray-react-component":
                await _handle_component(websocket, data)
            elif event == "register-source":
                index = state.get_source_index()
                if index is not None and isinstance(data, dict) and data.get("name") and data.get("path"):
                    index.register_source(data["name"], data["path"])
            elif event == "rebuild-source-map":
                index = state.get_source_index()
                if index is not None:
                    index.rebuild_source_map()
                    await _emit(websocket, "source-map-rebuilt", {"count": len(index.sources)})
            else:
                logger.debug("Unknown channel event: %s", event)
    except WebSocketDisconnect:
        logger.info("Client disconnected")
