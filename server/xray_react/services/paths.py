import re
from functools import lru_cache

_SCRIPT_EXT_RE = re.compile(r"\.(tsx?|jsx?)$")


@lru_cache(maxsize=None)
def _normalize(file_path: str) -> str:
    normalized = file_path.replace("\\", "/")
    normalized = normalized.strip("/")
    return normalized.lower()


def normalize_path(file_path) -> str:
    """
    Canonical form of a path string for comparisons: forward slashes, no
    leading/trailing slashes, lower-cased.

    Results are memoized per exact input string for the lifetime of the
    process. The inputs are real file paths, so the cache stays bounded in
    practice.
    """
    if not file_path:
        return ""
    return _normalize(str(file_path))


def strip_script_extension(file_name: str) -> str:
    return _SCRIPT_EXT_RE.sub("", file_name)


def file_base_name(file_path: str) -> str:
    """Last path segment of ``file_path``, accepting either slash direction."""
    return re.split(r"[/\\]", file_path)[-1]
