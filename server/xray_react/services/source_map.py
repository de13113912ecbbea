import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pathspec import PathSpec

from xray_react.config import COMMON_SOURCE_DIRS, IGNORE_DIRS, REACT_FILE_EXTS
from xray_react.models import CandidateEntry, ProjectConfig
from xray_react.services.source_extractor import (
    extract_component_names,
    extract_imports_from_file,
    extract_jsx_usage_from_file,
    should_exclude_file,
)

logger = logging.getLogger(__name__)

SourceMap = Dict[str, List[CandidateEntry]]


def find_repo_root(start_path: Path) -> Path:
    current = start_path.resolve()
    for parent in [current, *current.parents]:
        if (parent / ".git").exists(): return parent
    return current


def _translate_gitignore_pattern(raw_line: str, base_rel: str) -> str | None:
    """
    Translate a single .gitignore pattern that lives in a directory `base_rel`
    (relative to the repo root) into a repo-root-relative gitwildmatch pattern.

    Handles negation ('!'), anchoring ('/' prefix) and bare names, which match
    anywhere below the .gitignore's directory.
    """
    line = raw_line.rstrip("\n")
    if not line or line.lstrip().startswith("#"):
        return None

    negated = line.startswith("!")
    body = line[1:] if negated else line

    if body.startswith("/"):
        body = body[1:]

    prefix = f"{base_rel}/" if base_rel else ""

    if "/" in body:
        pat = prefix + body
    else:
        pat = f"{base_rel}/**/{body}" if base_rel else f"**/{body}"

    return f"!{pat}" if negated else pat


def _load_gitignore_spec(root_path: Path) -> tuple[Path, PathSpec | None]:
    """
    Collect .gitignore rules for the repository that contains ``root_path``,
    including nested .gitignore files, as a single PathSpec anchored at the
    repository root.
    """
    repo_root = find_repo_root(root_path)
    all_patterns: list[str] = []

    for dirpath, dirnames, filenames in os.walk(repo_root):
        dirnames[:] = [d for d in dirnames if d not in IGNORE_DIRS]

        if ".gitignore" not in filenames:
            continue

        gitignore_file = Path(dirpath) / ".gitignore"
        base_rel = (
            Path(dirpath).relative_to(repo_root).as_posix()
            if Path(dirpath) != repo_root
            else ""
        )

        try:
            with open(gitignore_file, "r", encoding="utf-8") as f:
                for raw in f:
                    translated = _translate_gitignore_pattern(raw, base_rel)
                    if translated is not None:
                        all_patterns.append(translated)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", gitignore_file, e)

    if not all_patterns:
        return repo_root, None

    return repo_root, PathSpec.from_lines("gitwildmatch", all_patterns)


def _is_gitignored(path: Path, ignore_root: Path, spec: PathSpec | None) -> bool:
    if spec is None:
        return False
    try:
        rel = path.relative_to(ignore_root)
    except ValueError:
        rel = path
    return spec.match_file(rel.as_posix())


def scan_source_files(source_dir: Path) -> List[str]:
    """
    Recursively collect JS/TS source files under ``source_dir``.

    Dependency and build directories are pruned, as is anything matched by
    the repository's .gitignore files. Returned paths are sorted so repeated
    scans produce the same candidate order.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        return []

    ignore_root, gitignore_spec = _load_gitignore_spec(source_dir)
    files: List[str] = []

    for root_dir, dirs, filenames in os.walk(source_dir):
        root_dir_path = Path(root_dir)

        # Prune in place so os.walk never descends into ignored directories.
        dirs[:] = sorted(
            d
            for d in dirs
            if d not in IGNORE_DIRS
            and not _is_gitignored(root_dir_path / d, ignore_root, gitignore_spec)
        )

        for filename in sorted(filenames):
            if Path(filename).suffix not in REACT_FILE_EXTS:
                continue
            file_path = root_dir_path / filename
            if _is_gitignored(file_path, ignore_root, gitignore_spec):
                continue
            files.append(str(file_path))

    return files


def detect_source_paths(project_root: Path) -> List[Path]:
    """Common source directories under the root, or the root itself."""
    project_root = Path(project_root)
    source_paths = [
        project_root / name
        for name in COMMON_SOURCE_DIRS
        if (project_root / name).is_dir()
    ]
    return source_paths or [project_root]


def get_file_priority(file_path: str) -> int:
    """
    Tie-breaker for duplicate component names: component files (.tsx/.jsx)
    beat plain scripts (.ts/.js), which beat anything else. Excluded files
    (styles, tests, declarations) rank lowest.
    """
    if should_exclude_file(file_path):
        return 0
    suffix = Path(file_path).suffix
    if suffix in (".tsx", ".jsx"):
        return 3
    if suffix in (".ts", ".js"):
        return 2
    return 1


def extract_component_context(file_path: Optional[str], project_root: Optional[Path]) -> List[str]:
    """
    Directory tokens describing where a component lives.

    For every common source directory in the path (``components``, ``pages``
    and so on) the directory right below it is recorded, so
    ``src/components/Navbar/Logo.tsx`` gives ``["components", "Navbar"]``. Falls back to
    the immediate parent directory name.
    """
    if not file_path or not project_root:
        return []

    try:
        relative = os.path.relpath(file_path, project_root)
    except ValueError:
        # Different drives on Windows.
        relative = str(file_path)

    parts = Path(relative).parts
    context: List[str] = []
    # Last part is the file name itself.
    directories = parts[:-1]

    for index, part in enumerate(directories):
        if part.lower() in COMMON_SOURCE_DIRS and index + 1 < len(directories):
            context.append(directories[index + 1])

    if not context and len(parts) > 1:
        context.append(parts[-2])

    return context


def _existing_files(source_paths: Iterable[Path]) -> List[str]:
    files: List[str] = []
    for source_path in source_paths:
        if not Path(source_path).exists():
            logger.warning("Source path not found: %s", source_path)
            continue
        files.extend(scan_source_files(Path(source_path)))
    return files


def build_source_map(source_paths: Iterable[Path], project_root: Optional[Path]) -> SourceMap:
    sources: SourceMap = {}
    for file_path in _existing_files(source_paths):
        names = extract_component_names(file_path)
        if not names:
            continue
        priority = get_file_priority(file_path)
        context = extract_component_context(file_path, project_root)
        for name in names:
            sources.setdefault(name, []).append(
                CandidateEntry(path=file_path, context=context, priority=priority)
            )
    return sources


def build_usage_map(source_paths: Iterable[Path]) -> Dict[str, List[str]]:
    usage: Dict[str, List[str]] = {}
    for file_path in _existing_files(source_paths):
        used = extract_jsx_usage_from_file(file_path)
        if used:
            usage[file_path] = sorted(used)
    return usage


def build_import_map(source_paths: Iterable[Path]) -> Dict[str, List[str]]:
    imports: Dict[str, List[str]] = {}
    for file_path in _existing_files(source_paths):
        imported = extract_imports_from_file(file_path)
        if imported:
            imports[file_path] = sorted(imported)
    return imports


def collect_project_files(source_paths: Iterable[Path]) -> List[str]:
    return _existing_files(source_paths)


class SourceIndex:
    """
    Server-side state: the component source map plus the usage map, import
    map and file list pushed to overlay clients.

    Every ``rebuild*`` call replaces its category wholesale. Concurrent
    rebuilds are not coordinated here; callers serialize them.
    """

    def __init__(self, project_root: Path, source_paths: Optional[List[Path]] = None):
        self.project_root = Path(project_root)
        self.source_paths: List[Path] = list(source_paths or [])
        self.sources: SourceMap = {}
        self.usage_map: Dict[str, List[str]] = {}
        self.import_map: Dict[str, List[str]] = {}
        self.project_files: List[str] = []

    def _ensure_source_paths(self) -> List[Path]:
        if not self.source_paths:
            self.source_paths = detect_source_paths(self.project_root)
            logger.info("Detected source paths: %s", [str(p) for p in self.source_paths])
        return self.source_paths

    def rebuild_source_map(self) -> SourceMap:
        print(f"🔍 Scanning source files under: {self.project_root}", flush=True)
        self.sources = build_source_map(self._ensure_source_paths(), self.project_root)
        total_candidates = sum(len(candidates) for candidates in self.sources.values())
        print(
            f"✅ Mapped {len(self.sources)} components to {total_candidates} source files",
            flush=True,
        )
        return self.sources

    def rebuild_project_files(self) -> List[str]:
        self.project_files = collect_project_files(self._ensure_source_paths())
        logger.info("Collected %d project files", len(self.project_files))
        return self.project_files

    def rebuild_usage_maps(self) -> None:
        paths = self._ensure_source_paths()
        self.usage_map = build_usage_map(paths)
        self.import_map = build_import_map(paths)
        logger.info(
            "Built usage map (%d files) and import map (%d files)",
            len(self.usage_map),
            len(self.import_map),
        )

    def rebuild(self) -> "SourceIndex":
        self.rebuild_source_map()
        self.rebuild_project_files()
        self.rebuild_usage_maps()
        return self

    def register_source(self, name: str, path: str) -> CandidateEntry:
        """Append a single candidate without rescanning."""
        entry = CandidateEntry(
            path=path,
            context=extract_component_context(path, self.project_root),
            priority=get_file_priority(path),
        )
        self.sources.setdefault(name, []).append(entry)
        logger.info("Registered %s -> %s", name, path)
        return entry

    def candidate_count(self) -> int:
        return sum(len(candidates) for candidates in self.sources.values())

    def project_config(self, port: int, mode: str) -> ProjectConfig:
        return ProjectConfig(projectRoot=str(self.project_root), port=port, mode=mode)
