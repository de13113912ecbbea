from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, Set

from xray_react.config import HTML_ELEMENTS, MAX_TREE_DEPTH
from xray_react.services.classifier import is_project_component
from xray_react.services.project_context import ProjectContext

logger = logging.getLogger(__name__)

_ANONYMOUS_NAMES: Set[str] = {"Anonymous", "<lambda>"}
_SOURCE_FILE_NAME_RE = re.compile(r"([^/\\]+)\.(jsx?|tsx?)$")


@dataclass(frozen=True)
class SourceOrigin:
    file_name: str
    line: Optional[int] = None


class RenderNode(Protocol):
    """
    Read-only view of one mounted component instance in the host UI runtime.

    The walker only ever reads these attributes; it never mutates a node.
    """

    element_type: Any
    source_origin: Optional[SourceOrigin]

    def parent(self) -> Optional["RenderNode"]: ...

    def owner(self) -> Optional["RenderNode"]: ...


@dataclass(eq=False)
class ElementType:
    """
    Plain description of a component type, for trees that do not come from a
    live runtime (fixtures, JSON payloads).

    ``render`` mirrors a forwardRef target, ``inner`` a memo/lazy wrapped type.
    """

    name: Optional[str] = None
    display_name: Optional[str] = None
    render: Any = None
    inner: Any = None


@dataclass(eq=False)
class TreeNode:
    """Concrete ``RenderNode`` with explicit links."""

    element_type: Any = None
    source_origin: Optional[SourceOrigin] = None
    parent_node: Optional["TreeNode"] = None
    owner_node: Optional["TreeNode"] = None
    key: Optional[str] = None

    def parent(self) -> Optional["TreeNode"]:
        return self.parent_node

    def owner(self) -> Optional["TreeNode"]:
        return self.owner_node


@dataclass
class ComponentObservation:
    name: str
    node: Any
    depth: int
    is_internal: bool
    origin_file: Optional[str] = None


@dataclass
class ComponentInfo:
    name: Optional[str] = None
    uid: Optional[str] = None
    # Furthest ancestor first, nearest component last.
    hierarchy: List[str] = field(default_factory=list)


def is_markup_element(name: Optional[str]) -> bool:
    if not name or not isinstance(name, str):
        return False
    return name.lower() in HTML_ELEMENTS


def _declared_name(element_type: Any) -> Optional[str]:
    if callable(element_type):
        name = getattr(element_type, "__name__", None)
    else:
        name = getattr(element_type, "name", None)
    if isinstance(name, str) and name and name not in _ANONYMOUS_NAMES:
        return name
    return None


def _resolve_type_name(element_type: Any, seen: Set[int]) -> Optional[str]:
    if element_type is None or id(element_type) in seen:
        return None
    seen.add(id(element_type))

    if isinstance(element_type, str):
        return element_type or None

    for attr in ("display_name", "displayName"):
        display = getattr(element_type, attr, None)
        if isinstance(display, str) and display:
            return display

    declared = _declared_name(element_type)
    if declared:
        return declared

    render = getattr(element_type, "render", None)
    if render is not None:
        resolved = _resolve_type_name(render, seen)
        if resolved:
            return resolved

    for attr in ("inner", "type"):
        wrapped = getattr(element_type, attr, None)
        if wrapped is not None:
            resolved = _resolve_type_name(wrapped, seen)
            if resolved:
                return resolved

    return None


def resolve_component_name(element_type: Any, node: Any = None) -> Optional[str]:
    """
    Best-effort name for a render node's element type.

    Lookup order: display name, declared function/class name, forwardRef
    render target, wrapped inner type (recursively), plain string tag. When
    none of those produce a name, the base name of the node's declared
    source file is used.
    """
    name = _resolve_type_name(element_type, set())
    if name:
        return name

    origin = getattr(node, "source_origin", None) if node is not None else None
    if origin is not None and origin.file_name:
        match = _SOURCE_FILE_NAME_RE.search(origin.file_name)
        if match:
            return match.group(1)

    return None


def _next_node(node: Any) -> Any:
    parent = node.parent()
    if parent is not None:
        return parent
    return node.owner()


def _is_used_by_internal(
    name: str,
    internal: List[ComponentObservation],
    context: ProjectContext,
) -> bool:
    """
    Keep an external component only if an internal component in the same
    walk renders or imports it. Without any usage/import data we cannot
    disprove it, so it is kept.
    """
    if not context.has_usage_data():
        return True

    for observation in internal:
        if name in context.names_used_by(observation.origin_file):
            return True
    return False


def walk(
    node: Any,
    context: ProjectContext,
    max_depth: int = MAX_TREE_DEPTH,
) -> List[ComponentObservation]:
    """
    Walk from ``node`` towards the root and return component observations,
    nearest node first.

    Markup tags and unnamed nodes are skipped. The walk stops after
    ``max_depth`` steps or as soon as a node repeats, so cyclic parent/owner
    links cannot loop forever.
    """
    observations: List[ComponentObservation] = []
    visited: Set[int] = set()
    current = node
    depth = 0

    while current is not None and depth < max_depth:
        if id(current) in visited:
            logger.debug("Render tree cycle detected at depth %d", depth)
            break
        visited.add(id(current))

        element_type = getattr(current, "element_type", None)
        name = resolve_component_name(element_type, current)
        if name and not is_markup_element(name):
            origin = getattr(current, "source_origin", None)
            origin_file = origin.file_name if origin is not None else None
            observations.append(
                ComponentObservation(
                    name=name,
                    node=current,
                    depth=depth,
                    is_internal=is_project_component(context, origin_file, name),
                    origin_file=origin_file,
                )
            )

        current = _next_node(current)
        depth += 1

    internal = [obs for obs in observations if obs.is_internal]
    return [
        obs
        for obs in observations
        if obs.is_internal or _is_used_by_internal(obs.name, internal, context)
    ]


def _node_uid(node: Any) -> Optional[str]:
    debug_id = getattr(node, "debug_id", None)
    if debug_id is not None:
        return str(debug_id)
    key = getattr(node, "key", None)
    if key:
        return str(key)
    return None


def component_for_node(node: Any, context: ProjectContext) -> ComponentInfo:
    """
    Nearest component for a render node plus its furthest-first hierarchy.
    Returns an empty ``ComponentInfo`` when the walk finds nothing.
    """
    if node is None:
        return ComponentInfo()

    observations = walk(node, context)
    if not observations:
        return ComponentInfo()

    nearest = observations[0]
    return ComponentInfo(
        name=nearest.name,
        uid=_node_uid(nearest.node),
        hierarchy=[obs.name for obs in reversed(observations)],
    )
