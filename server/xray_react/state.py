"""
Process-wide state for the server: resolved options, the source index and
the project context used by the hierarchy endpoints.

Everything is built lazily on first use and swapped out wholesale; a
single event loop owns all reads and writes.
"""
import logging
from pathlib import Path
from typing import Optional

from xray_react.config import resolve_editor, resolve_mode, resolve_port, resolve_project_root
from xray_react.models import XrayOptions
from xray_react.services.project_context import ProjectContext
from xray_react.services.source_map import SourceIndex

logger = logging.getLogger(__name__)

_options: Optional[XrayOptions] = None
_source_index: Optional[SourceIndex] = None
_index_failed = False
_context: Optional[ProjectContext] = None


def build_options(
    source_path: Optional[str] = None,
    port: Optional[int] = None,
    mode: Optional[str] = None,
    server: bool = True,
) -> XrayOptions:
    return XrayOptions(
        project_root=str(resolve_project_root(source_path)),
        port=resolve_port(port),
        mode=resolve_mode(mode),
        server=server,
        editor=resolve_editor(),
    )


def configure(options: XrayOptions) -> None:
    global _options, _source_index, _index_failed, _context
    _options = options
    _source_index = None
    _index_failed = False
    _context = None


def get_options() -> XrayOptions:
    global _options
    if _options is None:
        _options = build_options()
    return _options


def set_source_index(index: Optional[SourceIndex]) -> None:
    global _source_index, _index_failed, _context
    _source_index = index
    _index_failed = False
    _context = None


def get_source_index() -> Optional[SourceIndex]:
    """
    The source index, built on first access. Returns None when the build
    fails, in which case file resolution is unavailable but the rest of the
    server keeps working.
    """
    global _source_index, _index_failed
    if _source_index is None and not _index_failed:
        try:
            _source_index = SourceIndex(Path(get_options().project_root)).rebuild()
        except Exception:
            logger.exception("Failed to build the source index; file opening is disabled")
            _index_failed = True
    return _source_index


def context_from_index(index: Optional[SourceIndex], mode: str) -> ProjectContext:
    context = ProjectContext()
    context.replace_mode(mode)
    if index is not None:
        context.replace_project_root(str(index.project_root))
        context.replace_project_files(index.project_files)
        context.replace_usage_map(index.usage_map)
        context.replace_import_map(index.import_map)
    return context


def get_project_context() -> ProjectContext:
    global _context
    if _context is None:
        _context = context_from_index(get_source_index(), get_options().mode)
    return _context
