from __future__ import annotations

import pytest

from classical_quiz.core import workspace


def test_ensure_workspace_creates_layout(tmp_path) -> None:
    root = tmp_path / "ws"

    layout = workspace.ensure_workspace(path=root)

    assert layout.home == root.resolve()
    assert layout.created["home"] is True
    for name in ("config", "logs", "state"):
        assert layout.path_for(name).is_dir()
        assert layout.created[name] is True

    again = workspace.ensure_workspace(path=root)
    assert again.created["state"] is False


def test_env_variable_selects_workspace(tmp_path) -> None:
    env = {workspace.WORKSPACE_ENV: str(tmp_path / "from-env")}

    layout = workspace.ensure_workspace(env=env)

    assert layout.home == (tmp_path / "from-env").resolve()


def test_describe_without_create_leaves_disk_untouched(tmp_path) -> None:
    root = tmp_path / "dry"

    layout = workspace.ensure_workspace(path=root, create=False)

    assert not root.exists()
    assert layout.path_for("logs") == root.resolve() / "logs"


def test_file_in_place_of_workspace_is_rejected(tmp_path) -> None:
    target = tmp_path / "occupied"
    target.write_text("x", encoding="utf-8")

    with pytest.raises(workspace.WorkspaceError):
        workspace.ensure_workspace(path=target)


def test_unknown_directory_key(tmp_path) -> None:
    layout = workspace.ensure_workspace(path=tmp_path / "ws")
    with pytest.raises(KeyError):
        layout.path_for("rag_dbs")
