from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set

from xray_react.config import AVAILABLE_UI_MODES, UI_MODE_FULL
from xray_react.models import ProjectConfig
from xray_react.services.paths import normalize_path, strip_script_extension


@dataclass
class ProjectContext:
    """
    Reference state consulted by the walker, classifier and path builder.

    One instance per embedding session. Every category is replaced
    wholesale by its ``replace_*`` method; nothing is patched in place, so a
    later push always wins over an earlier one for that category only.
    """

    project_root: Optional[str] = None
    usage_map: Dict[str, List[str]] = field(default_factory=dict)
    import_map: Dict[str, List[str]] = field(default_factory=dict)
    project_file_paths: Set[str] = field(default_factory=set)
    normalized_project_files: Set[str] = field(default_factory=set)
    # Lower-cased file base name (no extension) -> files
    name_index: Dict[str, Set[str]] = field(default_factory=dict)
    # Lower-cased directory segment -> files
    dir_index: Dict[str, Set[str]] = field(default_factory=dict)
    mode: str = UI_MODE_FULL

    def replace_project_root(self, root_path: Optional[str]) -> None:
        self.project_root = normalize_path(root_path) if root_path else None

    def replace_usage_map(self, usage: Optional[Mapping[str, Iterable[str]]]) -> None:
        self.usage_map = {path: list(names) for path, names in (usage or {}).items()}
        self.project_file_paths.update(self.usage_map.keys())

    def replace_import_map(self, imports: Optional[Mapping[str, Iterable[str]]]) -> None:
        self.import_map = {path: list(names) for path, names in (imports or {}).items()}
        self.project_file_paths.update(self.import_map.keys())

    def replace_project_files(self, files: Optional[Iterable[str]]) -> None:
        """
        Replace the project file list and rebuild both lookup indices from
        scratch.
        """
        file_list = list(files or [])
        self.project_file_paths = set(file_list)
        self.normalized_project_files = set()

        name_index: Dict[str, Set[str]] = defaultdict(set)
        dir_index: Dict[str, Set[str]] = defaultdict(set)

        for file_path in file_list:
            normalized = normalize_path(file_path)
            self.normalized_project_files.add(normalized)

            parts = normalized.split("/")
            stem = strip_script_extension(parts[-1])
            if stem:
                name_index[stem].add(file_path)

            for part in parts[:-1]:
                if len(part) > 1:
                    dir_index[part].add(file_path)

        self.name_index = dict(name_index)
        self.dir_index = dict(dir_index)

    def replace_mode(self, mode: Optional[str]) -> None:
        self.mode = mode if mode in AVAILABLE_UI_MODES else UI_MODE_FULL

    def apply_config(self, config: ProjectConfig) -> None:
        self.replace_project_root(config.projectRoot)
        self.replace_mode(config.mode)

    def is_known_name(self, name: Optional[str]) -> bool:
        """True if ``name`` matches a project file name or directory token."""
        if not name:
            return False
        token = name.lower()
        return token in self.name_index or token in self.dir_index

    def has_usage_data(self) -> bool:
        return bool(self.usage_map) or bool(self.import_map)

    def names_used_by(self, file_path: Optional[str]) -> Set[str]:
        """Names a project file renders (usage map) or imports (import map)."""
        if not file_path:
            return set()
        return set(self.usage_map.get(file_path, [])) | set(self.import_map.get(file_path, []))
