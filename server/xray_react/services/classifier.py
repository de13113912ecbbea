from __future__ import annotations

import re
from typing import Iterable, Optional, TYPE_CHECKING

from xray_react.config import EXTERNAL_PATH_PATTERNS
from xray_react.services.paths import normalize_path

if TYPE_CHECKING:
    from xray_react.services.project_context import ProjectContext

_DRIVE_LETTER_RE = re.compile(r"^[a-z]:", re.IGNORECASE)


def is_external_path(file_path: Optional[str]) -> bool:
    """
    True when the path points into a dependency cache, compiled output,
    version control or build cache directory.
    """
    if not file_path:
        return False
    normalized = normalize_path(file_path)
    return any(pattern.search(normalized) for pattern in EXTERNAL_PATH_PATTERNS)


def _is_absolute(raw_path: str) -> bool:
    # normalize_path strips the leading slash, so look at the raw string.
    unified = raw_path.replace("\\", "/")
    return unified.startswith("/") or bool(_DRIVE_LETTER_RE.match(unified))


def is_project_component(
    context: "ProjectContext",
    source_file: Optional[str] = None,
    component_name: Optional[str] = None,
) -> bool:
    """
    Decide whether a component belongs to the embedding application.

    The rules lean towards inclusion: without a project root nothing can be
    disproven, so anything not obviously external is accepted.

    1. With a source origin: external paths are rejected; paths under the
       project root are accepted; relative, non-dependency paths look like
       internal references and are accepted; everything else is rejected.
    2. Without a source origin: the name must be a known token of the
       project file index.
    3. With neither and no project root: accepted by default.
    """
    project_root = context.project_root

    if source_file:
        if is_external_path(source_file):
            return False
        if not project_root:
            return True

        normalized_file = normalize_path(source_file)
        if normalized_file.startswith(normalize_path(project_root)):
            return True

        if "node_modules" not in normalized_file and not _is_absolute(source_file):
            return True

        return False

    if component_name and context.is_known_name(component_name):
        return True

    return not project_root


def _as_root(joined: str) -> str:
    # Drive-letter paths are already absolute; POSIX ones lost their leading slash.
    return joined if _DRIVE_LETTER_RE.match(joined) else "/" + joined


def detect_project_root_from_paths(file_paths: Iterable[Optional[str]]) -> Optional[str]:
    """
    Infer a project root from source-origin paths seen in a render tree.

    Uses the longest common directory prefix of the non-external paths. When
    the paths share nothing, falls back to the directory of the first one.
    """
    project_paths = [
        normalize_path(path)
        for path in file_paths
        if path and not is_external_path(path)
    ]
    if not project_paths:
        return None

    split_paths = [path.split("/") for path in project_paths]
    min_length = min(len(parts) for parts in split_paths)

    common: list[str] = []
    for index in range(min_length):
        part = split_paths[0][index]
        if all(parts[index] == part for parts in split_paths):
            common.append(part)
        else:
            break

    # A single path shares its own file name with itself; keep directories only.
    if len(common) == min_length:
        common = common[:-1]

    if common:
        return _as_root("/".join(common))

    first = project_paths[0]
    last_slash = first.rfind("/")
    if last_slash > 0:
        return _as_root(first[:last_slash])
    return None
