import logging
import os
from typing import List, Mapping, Optional, Sequence, Union

from xray_react.config import HIERARCHY_SEPARATOR
from xray_react.models import CandidateEntry

logger = logging.getLogger(__name__)

# Older payloads map a name straight to a path.
Candidates = Union[str, Sequence[CandidateEntry]]


def _context_matches(candidate: CandidateEntry, parent_name: str) -> bool:
    if parent_name in candidate.context:
        return True
    lowered = parent_name.lower()
    return any(ctx.lower() == lowered for ctx in candidate.context)


def find_component_candidate(
    component_name: str,
    hierarchy: Sequence[str],
    sources: Mapping[str, Candidates],
) -> Optional[CandidateEntry]:
    """
    Pick the source file candidate for ``component_name``.

    With several candidates, the component's parent in ``hierarchy`` decides:
    a candidate whose directory context names the parent wins. Otherwise the
    highest priority candidate wins, earliest registered first on ties.
    """
    if not component_name or not sources:
        return None

    candidates = sources.get(component_name)
    if not candidates:
        return None
    if isinstance(candidates, str):
        return CandidateEntry(path=candidates)
    if len(candidates) == 1:
        return candidates[0]

    parent_name = None
    if component_name in hierarchy:
        index = list(hierarchy).index(component_name)
        if index > 0:
            parent_name = hierarchy[index - 1]

    if parent_name:
        for candidate in candidates:
            if _context_matches(candidate, parent_name):
                return candidate

    # max() keeps the first of equal-priority candidates.
    return max(candidates, key=lambda candidate: candidate.priority)


def find_component_file(
    component_name: str,
    hierarchy: Sequence[str],
    sources: Mapping[str, Candidates],
) -> Optional[str]:
    candidate = find_component_candidate(component_name, hierarchy, sources)
    return candidate.path if candidate is not None else None


def split_hierarchy(structure: str) -> List[str]:
    return [name.strip() for name in (structure or "").split(HIERARCHY_SEPARATOR.strip()) if name.strip()]


def resolve_structure(
    structure: str,
    sources: Mapping[str, Candidates],
) -> tuple[Optional[str], Optional[str]]:
    """
    Resolve an emitted hierarchy path to a file, trying the leaf first and
    walking towards the root. Returns ``(component, path)`` for the first
    name whose candidate exists on disk, or ``(None, None)``.
    """
    hierarchy = split_hierarchy(structure)

    for name in reversed(hierarchy):
        file_path = find_component_file(name, hierarchy, sources)
        if file_path and os.path.exists(file_path):
            return name, file_path

    logger.warning(
        "No file found for components: %s", ", ".join(reversed(hierarchy)) or "<empty>"
    )
    return None, None
