import json

import pytest

from wtui.workspace import generate_workspace_file


def _make_dirs(base, *names):
    for name in names:
        (base / name).mkdir()


def test_generate_workspace_file_contents(tmp_path):
    _make_dirs(tmp_path, "svcB", "svcA")
    path = generate_workspace_file("IN-WS-001", tmp_path)

    assert path == tmp_path / "IN-WS-001.code-workspace"
    content = path.read_text(encoding="utf-8")
    assert '"svcA"' in content
    assert '"svcB"' in content
    assert '"workbench.editor.labelFormat": "medium"' in content
    assert content.endswith("\n")


def test_generate_workspace_file_sorted_folders(tmp_path):
    _make_dirs(tmp_path, "svcB", "svcA")
    (tmp_path / "notes.txt").write_text("x")
    data = json.loads(generate_workspace_file("T", tmp_path).read_text())
    assert data["folders"] == [{"path": "svcA"}, {"path": "svcB"}]
    assert data["settings"] == {"workbench.editor.labelFormat": "medium"}


def test_generate_workspace_file_leaves_no_temp_files(tmp_path):
    _make_dirs(tmp_path, "svc1")
    generate_workspace_file("T", tmp_path)
    leftovers = [p.name for p in tmp_path.iterdir() if p.name.startswith(".wtui-workspace-")]
    assert leftovers == []


def test_generate_workspace_file_overwrites(tmp_path):
    _make_dirs(tmp_path, "svc1")
    generate_workspace_file("T", tmp_path)
    _make_dirs(tmp_path, "svc2")
    data = json.loads(generate_workspace_file("T", tmp_path).read_text())
    assert [f["path"] for f in data["folders"]] == ["svc1", "svc2"]


def test_generate_workspace_file_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        generate_workspace_file("T", tmp_path / "missing")