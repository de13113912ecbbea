from pathlib import Path

import pytest

from xray_react.config import (
    DEFAULT_PORT,
    ENV_EDITOR,
    ENV_MODE,
    ENV_PORT,
    ENV_PROJECT_ROOT,
    detect_project_root_by_package_json,
    resolve_editor,
    resolve_mode,
    resolve_port,
    resolve_project_root,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in (ENV_PROJECT_ROOT, ENV_PORT, ENV_MODE, ENV_EDITOR):
        monkeypatch.delenv(name, raising=False)


def test_resolve_port_precedence(monkeypatch) -> None:
    assert resolve_port() == DEFAULT_PORT

    monkeypatch.setenv(ENV_PORT, "9100")
    assert resolve_port() == 9100
    assert resolve_port(9001) == 9001


def test_resolve_port_ignores_invalid_env(monkeypatch) -> None:
    monkeypatch.setenv(ENV_PORT, "not-a-port")
    assert resolve_port() == DEFAULT_PORT


def test_resolve_mode(monkeypatch) -> None:
    assert resolve_mode() == "full"
    assert resolve_mode("simple") == "simple"

    monkeypatch.setenv(ENV_MODE, "simple")
    assert resolve_mode("bogus") == "simple"
    assert resolve_mode("full") == "full"


def test_resolve_editor(monkeypatch) -> None:
    assert resolve_editor() is None
    monkeypatch.setenv(ENV_EDITOR, "code")
    assert resolve_editor() == "code"


def test_detect_project_root_by_package_json(react_project: Path) -> None:
    nested = react_project / "src" / "components" / "Navbar"
    assert detect_project_root_by_package_json(nested) == react_project.resolve()


def test_explicit_project_root_wins(react_project: Path, tmp_path: Path, monkeypatch) -> None:
    other = tmp_path / "other"
    other.mkdir()
    monkeypatch.setenv(ENV_PROJECT_ROOT, str(other))

    assert resolve_project_root(str(react_project)) == react_project.resolve()


def test_env_project_root_beats_package_json(react_project: Path, tmp_path: Path, monkeypatch) -> None:
    other = tmp_path / "other"
    other.mkdir()
    monkeypatch.setenv(ENV_PROJECT_ROOT, str(other))

    start = react_project / "src"
    assert resolve_project_root(None, start) == other.resolve()
    # A missing explicit path is ignored.
    assert resolve_project_root(str(tmp_path / "missing"), start) == other.resolve()


def test_package_json_then_start_path(react_project: Path, tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv(ENV_PROJECT_ROOT, str(tmp_path / "missing"))
    assert resolve_project_root(None, react_project / "src" / "pages") == react_project.resolve()

    loose = tmp_path / "loose"
    loose.mkdir()
    if detect_project_root_by_package_json(loose) is None:
        assert resolve_project_root(None, loose) == loose.resolve()
