from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Set, Tuple

from xray_react.config import HIERARCHY_SEPARATOR, MAX_DOM_ANCESTORS
from xray_react.services.paths import file_base_name, normalize_path, strip_script_extension
from xray_react.services.project_context import ProjectContext
from xray_react.services.render_tree import (
    ComponentObservation,
    is_markup_element,
    walk,
)

_SCRIPT_EXTS: Tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js")


class DomElement(Protocol):
    """Read-only view of a DOM element as seen by the overlay."""

    tag_name: str

    def render_node(self) -> Any: ...

    def parent(self) -> Optional["DomElement"]: ...


@dataclass(frozen=True)
class HierarchyPaths:
    full: str
    filtered: str

    @property
    def preferred(self) -> str:
        """What the outbound channel emits: filtered if present, else full."""
        return self.filtered or self.full


def remove_consecutive_duplicates(names: Sequence[str]) -> List[str]:
    result: List[str] = []
    for name in names:
        if result and result[-1].lower() == name.lower():
            continue
        result.append(name)
    return result


def join_hierarchy(names: Sequence[str]) -> str:
    return HIERARCHY_SEPARATOR.join(names)


def _name_matches_file(normalized_name: str, origin_file: str) -> bool:
    lowered = origin_file.lower()
    for slash in ("/", "\\"):
        if f"{slash}{normalized_name}" in lowered:
            return True
        if any(lowered.endswith(f"{slash}{normalized_name}{ext}") for ext in _SCRIPT_EXTS):
            return True
    return strip_script_extension(file_base_name(lowered)) == normalized_name


def _is_corroborated(observation: ComponentObservation, context: ProjectContext) -> bool:
    """
    Internal-looking components need some evidence from the project tree:
    either their name matches their own source file, or the name is a known
    project file/directory token.
    """
    normalized_name = observation.name.lower()
    if observation.origin_file and _name_matches_file(normalized_name, observation.origin_file):
        return True
    return context.is_known_name(normalized_name)


def dom_ancestor_path(
    element: Optional[DomElement],
    context: ProjectContext,
    internal_only: bool = False,
    max_levels: int = MAX_DOM_ANCESTORS,
) -> List[str]:
    """
    Fallback for elements with no usable render tree: resolve the nearest
    component of each DOM ancestor, furthest ancestor first.
    """
    names: List[str] = []
    seen: Set[str] = set()
    current = element
    levels = 0

    while current is not None and levels < max_levels:
        current = current.parent()
        if current is None:
            break
        levels += 1

        observations = walk(current.render_node(), context)
        if not observations:
            continue
        nearest = observations[0]
        if is_markup_element(nearest.name):
            continue
        if internal_only and not nearest.is_internal:
            continue

        normalized = nearest.name.lower()
        if normalized in seen:
            continue
        seen.add(normalized)
        names.insert(0, nearest.name)

    return names


def _append_leaf(names: List[str], leaf_name: str) -> List[str]:
    if leaf_name and not any(name.lower() == leaf_name.lower() for name in names):
        return [*names, leaf_name]
    return names


def build_full_structure(
    observations: Sequence[ComponentObservation],
    leaf_name: str,
    context: ProjectContext,
    element: Optional[DomElement] = None,
) -> str:
    """
    Every observed component, root first, ending with ``leaf_name``.

    ``observations`` are expected root-to-leaf (a reversed walk).
    """
    if observations:
        names = [
            obs.name
            for obs in observations
            if obs.name != leaf_name and not is_markup_element(obs.name)
        ]
        if not names:
            return leaf_name
        return join_hierarchy(remove_consecutive_duplicates([*names, leaf_name]))

    dom_path = dom_ancestor_path(element, context) if element is not None else []
    if dom_path:
        return join_hierarchy(remove_consecutive_duplicates([*dom_path, leaf_name]))
    return leaf_name


def build_filtered_structure(
    observations: Sequence[ComponentObservation],
    leaf_name: str,
    context: ProjectContext,
    element: Optional[DomElement] = None,
) -> str:
    """
    Project-owned components only, root first, ending with ``leaf_name``.

    The same component (same name, same file) seen several times is listed
    once; components sharing a name but living in different files are both
    kept.
    """
    if observations:
        seen_keys: Set[Tuple[str, str]] = set()
        names: List[str] = []

        for obs in observations:
            if obs.name == leaf_name or is_markup_element(obs.name) or not obs.is_internal:
                continue

            normalized_name = obs.name.lower()
            if obs.origin_file:
                if not _is_corroborated(obs, context):
                    continue
                key = (normalized_name, normalize_path(obs.origin_file))
            else:
                key = (normalized_name, "")

            if key in seen_keys:
                continue
            seen_keys.add(key)
            names.append(obs.name)

        if not names:
            return leaf_name
        return join_hierarchy(remove_consecutive_duplicates(_append_leaf(names, leaf_name)))

    dom_path = (
        dom_ancestor_path(element, context, internal_only=True) if element is not None else []
    )
    if dom_path:
        return join_hierarchy(remove_consecutive_duplicates(_append_leaf(dom_path, leaf_name)))
    return leaf_name


def build_paths(
    observations: Sequence[ComponentObservation],
    leaf_name: str,
    context: ProjectContext,
    element: Optional[DomElement] = None,
) -> HierarchyPaths:
    return HierarchyPaths(
        full=build_full_structure(observations, leaf_name, context, element),
        filtered=build_filtered_structure(observations, leaf_name, context, element),
    )


def hierarchy_for_element(
    element: DomElement,
    leaf_name: str,
    context: ProjectContext,
) -> HierarchyPaths:
    """Walk the element's render tree and build both path projections."""
    observations = walk(element.render_node(), context)
    return build_paths(list(reversed(observations)), leaf_name, context, element)


def hierarchy_for_node(node: Any, context: ProjectContext) -> HierarchyPaths:
    """
    Paths for a bare render node, using its nearest component as the leaf.
    Used when the caller has no DOM element, e.g. a serialized tree.
    """
    observations = walk(node, context)
    if not observations:
        return HierarchyPaths(full="", filtered="")
    leaf_name = observations[0].name
    return build_paths(list(reversed(observations)), leaf_name, context)
