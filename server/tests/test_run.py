from pathlib import Path

import pytest

from xray_react import run, state
from xray_react.config import ENV_EDITOR, ENV_MODE, ENV_PORT, ENV_PROJECT_ROOT


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in (ENV_PROJECT_ROOT, ENV_PORT, ENV_MODE, ENV_EDITOR):
        monkeypatch.delenv(name, raising=False)


def test_cli_no_server_scans_and_exits(react_project: Path, monkeypatch, capsys) -> None:
    def boom(*args, **kwargs):
        raise AssertionError("server should not start")

    monkeypatch.setattr(run.uvicorn, "run", boom)

    run.main([str(react_project), "--no-server", "--mode", "simple"])

    options = state.get_options()
    assert Path(options.project_root) == react_project.resolve()
    assert options.mode == "simple"
    assert options.server is False
    assert "Logo" in state.get_source_index().sources
    assert "Project root" in capsys.readouterr().out


def test_cli_project_root_from_subdirectory(react_project: Path, monkeypatch) -> None:
    """Without a path argument the nearest package.json wins."""
    monkeypatch.setattr(run.uvicorn, "run", lambda *args, **kwargs: None)
    monkeypatch.chdir(react_project / "src" / "pages")

    run.main(["--no-server"])

    assert Path(state.get_options().project_root) == react_project.resolve()


def test_cli_starts_server(react_project: Path, monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(run.uvicorn, "run", lambda *args, **kwargs: calls.append((args, kwargs)))

    run.main([str(react_project), "--port", "9001", "--host", "0.0.0.0"])

    assert calls == [(("xray_react.main:app",), {"host": "0.0.0.0", "port": 9001, "reload": False})]


def test_cli_rejects_missing_path(tmp_path: Path) -> None:
    with pytest.raises(SystemExit):
        run.main([str(tmp_path / "missing"), "--no-server"])
