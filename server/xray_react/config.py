import os
import re
from pathlib import Path
from typing import List, Optional, Pattern, Set, Tuple

DEFAULT_PORT = 8124
HIERARCHY_SEPARATOR = " -> "

UI_MODE_FULL = "full"
UI_MODE_SIMPLE = "simple"
AVAILABLE_UI_MODES: Tuple[str, ...] = (UI_MODE_FULL, UI_MODE_SIMPLE)

ENV_PROJECT_ROOT = "XRAY_REACT_PROJECT_ROOT"
ENV_PORT = "XRAY_REACT_PORT"
ENV_MODE = "XRAY_REACT_MODE"
ENV_EDITOR = "XRAY_REACT_EDITOR"

# Hard cap on render-tree walks, protects against malformed/cyclic trees.
MAX_TREE_DEPTH = 50
MAX_DOM_ANCESTORS = 20

ELEMENT_BATCH_SIZE = 20
PATH_BATCH_SIZE = 10

REACT_FILE_EXTS: Tuple[str, ...] = (".jsx", ".js", ".tsx", ".ts")

IGNORE_DIRS: Set[str] = {
    '.git',
    'node_modules',
    'venv',
    '.venv',
    '__pycache__',
    'dist',
    'build',
    '.next',
    '.cache',
    'coverage',
    '.idea',
    '.vscode',
    'out',
}

EXCLUDED_FILE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\.styles\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    re.compile(r"\.style\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    re.compile(r"\.styl\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    re.compile(r"\.css\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    re.compile(r"\.test\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    re.compile(r"\.spec\.(ts|js|tsx|jsx)$", re.IGNORECASE),
    # TypeScript declaration files
    re.compile(r"\.d\.ts$", re.IGNORECASE),
]

# Dependency caches, compiled output, VCS and build caches.
EXTERNAL_PATH_PATTERNS: List[Pattern[str]] = [
    re.compile(r"node_modules", re.IGNORECASE),
    re.compile(r"\.next[/\\]", re.IGNORECASE),
    re.compile(r"dist[/\\]", re.IGNORECASE),
    re.compile(r"build[/\\]", re.IGNORECASE),
    re.compile(r"\.git[/\\]", re.IGNORECASE),
    re.compile(r"\.cache[/\\]", re.IGNORECASE),
    re.compile(r"coverage[/\\]", re.IGNORECASE),
]

HTML_ELEMENTS: Set[str] = {
    'div', 'span', 'form', 'button', 'input', 'a', 'img', 'p', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'ul', 'li', 'ol', 'table', 'tr', 'td', 'th', 'thead', 'tbody', 'tfoot',
    'section', 'article', 'header', 'footer', 'nav', 'main', 'aside',
    'label', 'select', 'option', 'textarea', 'fieldset', 'legend',
    'br', 'hr', 'strong', 'em', 'b', 'i', 'u', 'small', 'sub', 'sup',
    'dl', 'dt', 'dd', 'pre', 'code', 'blockquote', 'cite',
    'canvas', 'svg', 'path', 'circle', 'rect', 'line', 'polyline', 'polygon',
    'iframe', 'embed', 'object', 'video', 'audio', 'source', 'track',
    'meta', 'link', 'style', 'script', 'noscript', 'template',
}

JS_KEYWORDS: Set[str] = {
    'function', 'const', 'let', 'var', 'class', 'interface', 'type', 'enum', 'export', 'import',
    'default', 'return', 'if', 'else', 'for', 'while', 'switch', 'case', 'break', 'continue',
    'try', 'catch', 'finally', 'throw', 'new', 'this', 'super', 'extends', 'implements', 'static',
    'async', 'await', 'promise', 'array', 'object', 'string', 'number', 'boolean', 'null',
    'undefined', 'void',
}

COMMON_SOURCE_DIRS: Tuple[str, ...] = (
    # Project structure
    'src',
    'app',
    'lib',
    'utils',
    # Atomic/UI components
    'atoms',
    'ui',
    # Shared/common components
    'common',
    'shared',
    # Component organization
    'components',
    'sections',
    'forms',
    'containers',
    # Layouts and templates
    'layouts',
    'templates',
    # Views and pages
    'views',
    'screens',
    'pages',
)


def detect_project_root_by_package_json(start_path: Path) -> Optional[Path]:
    """
    Walk up from ``start_path`` and return the first directory that holds a
    ``package.json``. Returns None when we reach the filesystem root first.
    """
    current = start_path.resolve()
    for parent in [current, *current.parents]:
        if (parent / "package.json").exists():
            return parent
    return None


def resolve_project_root(
    source_path: Optional[str] = None,
    start_path: Optional[Path] = None,
) -> Path:
    """
    Resolve the project root with the same precedence the bundler plugins use:

    1. An explicit ``source_path`` option (if it exists on disk).
    2. The ``XRAY_REACT_PROJECT_ROOT`` environment variable (if it exists).
    3. The nearest directory containing ``package.json``.
    4. The start path itself.
    """
    if source_path:
        explicit = Path(source_path).resolve()
        if explicit.exists():
            return explicit

    env_root = os.environ.get(ENV_PROJECT_ROOT)
    if env_root:
        candidate = Path(env_root).resolve()
        if candidate.exists():
            return candidate

    start = start_path or Path.cwd()
    package_root = detect_project_root_by_package_json(start)
    if package_root is not None:
        return package_root

    return start.resolve()


def resolve_port(port: Optional[int] = None) -> int:
    if port is not None:
        return int(port)

    env_port = os.environ.get(ENV_PORT)
    if env_port:
        try:
            return int(env_port)
        except ValueError:
            pass

    return DEFAULT_PORT


def resolve_mode(mode: Optional[str] = None) -> str:
    if mode in AVAILABLE_UI_MODES:
        return mode

    env_mode = os.environ.get(ENV_MODE)
    if env_mode in AVAILABLE_UI_MODES:
        return env_mode

    return UI_MODE_FULL


def resolve_editor() -> Optional[str]:
    return os.environ.get(ENV_EDITOR) or None
