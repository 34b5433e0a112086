import threading
from pathlib import Path

import pytest

from wtui.domain import WorktreeEntry
from wtui.errors import TaskNotFoundError
from wtui.listing import ServiceInspector, list_tasks


class FakeGit:
    def __init__(self, common_dir_fn=None, worktrees=None, list_error=None,
                 dirty_fn=None, ahead_behind_fn=None):
        self.common_dir_fn = common_dir_fn or (lambda path: str(Path(path) / ".git"))
        self.worktrees = worktrees or []
        self.list_error = list_error
        self.dirty_fn = dirty_fn or (lambda path: False)
        self.ahead_behind_fn = ahead_behind_fn or (lambda path, upstream: (0, 0))
        self.ahead_behind_calls = []

    def common_dir(self, path):
        return self.common_dir_fn(path)

    def list_worktrees(self, repo_path):
        if self.list_error is not None:
            raise self.list_error
        return self.worktrees

    def is_dirty(self, path):
        return self.dirty_fn(path)

    def rev_list_ahead_behind(self, path, upstream):
        self.ahead_behind_calls.append((path, upstream))
        return self.ahead_behind_fn(path, upstream)


def test_list_tasks_missing_root_is_empty(tmp_path):
    assert list_tasks(tmp_path / "does_not_exist") == []


def test_list_tasks_sorted_and_ignores_files(tmp_path):
    root = tmp_path / ".tasks"
    for task_id in ["IN-003", "IN-001", "IN-002"]:
        (root / task_id).mkdir(parents=True)
    (root / "notes.txt").write_text("x")

    tasks = list_tasks(root)

    assert [t.id for t in tasks] == ["IN-001", "IN-002", "IN-003"]
    assert tasks[0].dir == str(root / "IN-001")


def test_list_tasks_normal_task_not_stale(tmp_path):
    root = tmp_path / ".tasks"
    (root / "IN-STALE").mkdir(parents=True)

    tasks = list_tasks(root)

    assert len(tasks) == 1
    assert tasks[0].stale is False


def test_list_services_missing_task_raises(tmp_path):
    inspector = ServiceInspector(FakeGit())
    with pytest.raises(TaskNotFoundError):
        inspector.list_services(tmp_path / ".tasks" / "NOTFOUND")


def test_list_services_empty_task(tmp_path):
    task_dir = tmp_path / "IN-EMPTY"
    task_dir.mkdir()
    assert ServiceInspector(FakeGit()).list_services(task_dir) == []


def test_list_services_skips_non_git_dirs(tmp_path):
    task_dir = tmp_path / ".tasks" / "IN-LSS"
    for name in ["service-a", "not-a-worktree"]:
        (task_dir / name).mkdir(parents=True)
    fake_common = str(tmp_path / "service-a" / ".git")

    def common_dir(path):
        if Path(path).name == "service-a":
            return fake_common
        raise RuntimeError("not a git repo")

    services = ServiceInspector(FakeGit(common_dir_fn=common_dir)).list_services(task_dir)

    assert [s.name for s in services] == ["service-a"]
    assert services[0].repo_path == str(tmp_path / "service-a")


def test_list_services_sorted_by_name(tmp_path):
    task_dir = tmp_path / "IN-SORT"
    for name in ["zeta", "alpha", "mid"]:
        (task_dir / name).mkdir(parents=True)

    services = ServiceInspector(FakeGit()).list_services(task_dir)

    assert [s.name for s in services] == ["alpha", "mid", "zeta"]


def test_inspect_checks_dirty_and_ahead_behind_concurrently(tmp_path):
    task_dir = tmp_path / ".tasks" / "IN-LSS"
    svc_dir = task_dir / "service-a"
    svc_dir.mkdir(parents=True)
    barrier = threading.Barrier(2, timeout=2)
    seen = {}

    def dirty(path):
        seen["dirty"] = path
        barrier.wait()
        return True

    def ahead_behind(path, upstream):
        seen["ab"] = (path, upstream)
        barrier.wait()
        return 2, 3

    git = FakeGit(
        common_dir_fn=lambda path: str(tmp_path / "service-a" / ".git"),
        worktrees=[WorktreeEntry(path=str(svc_dir), branch="refs/heads/feature/IN-LSS-service-a")],
        dirty_fn=dirty,
        ahead_behind_fn=ahead_behind,
    )

    services = ServiceInspector(git).list_services(task_dir)

    assert len(services) == 1
    svc = services[0]
    assert svc.is_dirty is True
    assert (svc.ahead, svc.behind) == (2, 3)
    assert svc.branch == "feature/IN-LSS-service-a"
    assert seen["dirty"] == str(svc_dir)
    assert seen["ab"] == (str(svc_dir), "origin/feature/IN-LSS-service-a")


def test_inspect_without_branch_skips_ahead_behind(tmp_path):
    (tmp_path / "svc").mkdir()
    git = FakeGit()

    svc = ServiceInspector(git).inspect(tmp_path, "svc")

    assert svc.branch == ""
    assert git.ahead_behind_calls == []


def test_inspect_ahead_behind_error_leaves_zero(tmp_path):
    svc_dir = tmp_path / "svc"
    svc_dir.mkdir()

    def failing(path, upstream):
        raise RuntimeError("no upstream")

    git = FakeGit(
        worktrees=[WorktreeEntry(path=str(svc_dir), branch="refs/heads/feature/x")],
        ahead_behind_fn=failing,
    )

    svc = ServiceInspector(git).inspect(tmp_path, "svc")

    assert (svc.ahead, svc.behind) == (0, 0)
    assert svc.branch == "feature/x"


def test_inspect_missing_dir_is_stale(tmp_path):
    svc = ServiceInspector(FakeGit()).inspect(tmp_path, "gone")
    assert svc.stale is True
    assert svc.worktree_path == str(tmp_path / "gone")


def test_current_branch_detached_is_empty(tmp_path):
    path = str(tmp_path / "svc")
    git = FakeGit(worktrees=[WorktreeEntry(path=path, branch="(detached)")])
    assert ServiceInspector(git).current_branch(path, "svc") == ""


def test_current_branch_list_error_is_empty(tmp_path):
    git = FakeGit(list_error=RuntimeError("boom"))
    assert ServiceInspector(git).current_branch(str(tmp_path), "svc") == ""