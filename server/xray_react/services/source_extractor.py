"""
Heuristic, regex-based extraction of component names from JS/TS sources.

Three modes:

* declarations: which components does this file define? Rules are tried in
  strict priority order and the first rule that yields any name wins:

  1. ``export default function Name``
  2. ``export default const Name =``
  3. ``export default Name;``
  4. ``export const Name = (...) =>`` / ``function`` / ``forwardRef`` / ``memo``
  5. ``export function Name(``
  6. ``export class Name``
  7. any local ``const/let/var Name = <function-like>``
  8. the file's base name

  The disambiguator relies on which tier wins, so keep this order stable.

* usages: which components does this file render as JSX tags?
* imports: which names does this file import? Used as a fallback for usages.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Pattern, Set, Tuple

from xray_react.config import EXCLUDED_FILE_PATTERNS, HTML_ELEMENTS, JS_KEYWORDS

logger = logging.getLogger(__name__)

_FUNCTION_LIKE = r"(?:(?:async\s+)?\([^)]*\)\s*=>|(?:async\s+)?\w+\s*=>|(?:async\s+)?function|(?:React\.)?(?:forwardRef|memo))"

_DEFAULT_EXPORT_FUNCTION_RE = re.compile(r"export\s+default\s+(?:async\s+)?function(?:\s*\*\s*|\s+)(\w+)")
_DEFAULT_EXPORT_CONST_RE = re.compile(r"export\s+default\s+const\s+(\w+)\s*=")
_DEFAULT_EXPORT_IDENTIFIER_RE = re.compile(r"export\s+default\s+(\w+)\s*(?:;|$)", re.MULTILINE)
_EXPORTED_FUNCTION_CONST_RE = re.compile(rf"export\s+const\s+(\w+)\s*(?::[^=]+)?=\s*{_FUNCTION_LIKE}")
_EXPORTED_FUNCTION_RE = re.compile(r"export\s+(?:async\s+)?function\s+(\w+)\s*[(<]")
_EXPORTED_CLASS_RE = re.compile(r"export\s+class\s+(\w+)")
_LOCAL_FUNCTION_CONST_RE = re.compile(rf"(?:const|let|var)\s+(\w+)\s*(?::[^=]+)?=\s*{_FUNCTION_LIKE}")

_TAG_NAME = r"([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)"
_SELF_CLOSING_TAG_RE = re.compile(rf"<{_TAG_NAME}\s*/>")
_OPENING_TAG_RE = re.compile(rf"<{_TAG_NAME}(?:\s|>|/)")
_BRACED_TAG_RE = re.compile(rf"\{{[^}}]*?<{_TAG_NAME}(?:\s|>|/)")

_DEFAULT_IMPORT_RE = re.compile(r"import\s+(\w+)\s+from\s+['\"](.+?)['\"]")
_NAMED_IMPORT_RE = re.compile(r"import\s+\{\s*([^}]+)\s*\}\s+from\s+['\"](.+?)['\"]")
_NAMESPACE_IMPORT_RE = re.compile(r"import\s+\*\s+as\s+(\w+)\s+from\s+['\"](.+?)['\"]")
_COMBINED_IMPORT_RE = re.compile(r"import\s+(\w+)\s*,\s*\{([^}]+)\}\s+from\s+['\"](.+?)['\"]")
_IMPORT_SPECIFIER_RE = re.compile(r"^(\w+)(?:\s+as\s+(\w+))?$")
_TYPE_IMPORT_LOOKBEHIND = 10


@dataclass
class RuleMatch:
    matched: bool = False
    names: List[str] = field(default_factory=list)


def should_exclude_file(file_path: str) -> bool:
    """Style modules, tests/specs and declaration files are never scanned."""
    return any(pattern.search(str(file_path)) for pattern in EXCLUDED_FILE_PATTERNS)


def should_exclude_name(name: Optional[str]) -> bool:
    if not name or len(name) < 2:
        return True
    lowered = name.lower()
    return lowered in HTML_ELEMENTS or lowered in JS_KEYWORDS


def _unique(names: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    result: List[str] = []
    for name in names:
        if name in seen or should_exclude_name(name):
            continue
        seen.add(name)
        result.append(name)
    return result


def _pattern_rule(pattern: Pattern[str]) -> Callable[[str, str], RuleMatch]:
    def rule(text: str, file_path: str = "") -> RuleMatch:
        names = _unique(match.group(1) for match in pattern.finditer(text))
        return RuleMatch(matched=bool(names), names=names)

    return rule


default_export_function = _pattern_rule(_DEFAULT_EXPORT_FUNCTION_RE)
default_export_const = _pattern_rule(_DEFAULT_EXPORT_CONST_RE)
default_export_identifier = _pattern_rule(_DEFAULT_EXPORT_IDENTIFIER_RE)
exported_function_const = _pattern_rule(_EXPORTED_FUNCTION_CONST_RE)
exported_function_declaration = _pattern_rule(_EXPORTED_FUNCTION_RE)
exported_class_declaration = _pattern_rule(_EXPORTED_CLASS_RE)
local_function_const = _pattern_rule(_LOCAL_FUNCTION_CONST_RE)


def file_name_fallback(text: str, file_path: str = "") -> RuleMatch:
    if not file_path:
        return RuleMatch()
    stem = Path(file_path).stem
    names = _unique([stem])
    return RuleMatch(matched=bool(names), names=names)


DECLARATION_RULES: Tuple[Tuple[str, Callable[[str, str], RuleMatch]], ...] = (
    ("default_export_function", default_export_function),
    ("default_export_const", default_export_const),
    ("default_export_identifier", default_export_identifier),
    ("exported_function_const", exported_function_const),
    ("exported_function_declaration", exported_function_declaration),
    ("exported_class_declaration", exported_class_declaration),
    ("local_function_const", local_function_const),
    ("file_name_fallback", file_name_fallback),
)


def extract_declarations(text: str, file_path: str = "") -> List[str]:
    """Component names declared in ``text``, from the first rule that matches."""
    for _, rule in DECLARATION_RULES:
        result = rule(text, file_path)
        if result.matched:
            return result.names
    return []


def _trailing_segment(tag: str) -> str:
    return tag.rsplit(".", 1)[-1]


def extract_usages(text: str) -> Set[str]:
    """Component names rendered as JSX tags in ``text``."""
    used: Set[str] = set()
    for pattern in (_SELF_CLOSING_TAG_RE, _OPENING_TAG_RE, _BRACED_TAG_RE):
        for match in pattern.finditer(text):
            name = _trailing_segment(match.group(1))
            if not should_exclude_name(name):
                used.add(name)
    return used


def _is_type_only_import(text: str, match: re.Match) -> bool:
    if re.match(r"import\s+type\s", match.group(0)):
        return True
    preceding = text[max(0, match.start() - _TYPE_IMPORT_LOOKBEHIND) : match.start()]
    return "type " in preceding


def _specifier_bindings(specifiers: str) -> List[str]:
    """
    Local binding names for a named-import list, e.g. ``A, B as C, type D``
    gives ``["A", "C"]``.
    """
    bindings: List[str] = []
    for raw in specifiers.split(","):
        specifier = raw.strip()
        if not specifier or specifier.startswith("type "):
            continue
        match = _IMPORT_SPECIFIER_RE.match(specifier)
        if match:
            bindings.append(match.group(2) or match.group(1))
        else:
            bindings.append(specifier.split()[0])
    return bindings


def extract_imports(text: str) -> Set[str]:
    """Local names bound by import statements in ``text``."""
    imported: Set[str] = set()

    def add(name: str) -> None:
        if name and not should_exclude_name(name):
            imported.add(name)

    for match in _DEFAULT_IMPORT_RE.finditer(text):
        if not _is_type_only_import(text, match):
            add(match.group(1))

    for match in _NAMED_IMPORT_RE.finditer(text):
        if not _is_type_only_import(text, match):
            for name in _specifier_bindings(match.group(1)):
                add(name)

    for match in _NAMESPACE_IMPORT_RE.finditer(text):
        if not _is_type_only_import(text, match):
            add(match.group(1))

    for match in _COMBINED_IMPORT_RE.finditer(text):
        if _is_type_only_import(text, match):
            continue
        add(match.group(1))
        for name in _specifier_bindings(match.group(2)):
            add(name)

    return imported


def _read_source(file_path: str) -> Optional[str]:
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Error reading %s: %s", file_path, e)
        return None


def extract_component_names(file_path: str) -> List[str]:
    if should_exclude_file(file_path):
        return []
    text = _read_source(file_path)
    if text is None:
        return []
    return extract_declarations(text, str(file_path))


def extract_jsx_usage_from_file(file_path: str) -> Set[str]:
    if should_exclude_file(file_path):
        return set()
    text = _read_source(file_path)
    if text is None:
        return set()
    return extract_usages(text)


def extract_imports_from_file(file_path: str) -> Set[str]:
    if should_exclude_file(file_path):
        return set()
    text = _read_source(file_path)
    if text is None:
        return set()
    return extract_imports(text)
