import pytest

from wtui.domain import (
    AddParams,
    InitParams,
    Repo,
    Service,
    Task,
    validate_task_id,
)
from wtui.errors import InvalidTaskIDError, TaskNotFoundError


@pytest.mark.parametrize("task_id", ["IN-6748", "PROJ-123", "my-task"])
def test_validate_task_id_accepts(task_id):
    assert validate_task_id(task_id) == task_id


@pytest.mark.parametrize(
    "task_id",
    [
        ".",
        "/etc/passwd",
        "task/../etc",
        "task<name",
        "task>name",
        "task:name",
        'task"name',
        "task|name",
        "task?name",
        "task*name",
        "task\\name",
    ],
)
def test_validate_task_id_rejects(task_id):
    with pytest.raises(InvalidTaskIDError):
        validate_task_id(task_id)


def test_validate_task_id_empty_is_not_found():
    with pytest.raises(TaskNotFoundError, match="task ID must not be empty"):
        validate_task_id("")


def test_validate_task_id_single_dot_message():
    with pytest.raises(InvalidTaskIDError, match="single dot is not allowed"):
        validate_task_id(".")


def test_validate_task_id_traversal_message():
    with pytest.raises(InvalidTaskIDError, match="path traversal sequence"):
        validate_task_id("a..b")


def test_validate_task_id_forbidden_character_message():
    with pytest.raises(InvalidTaskIDError, match="forbidden character"):
        validate_task_id("task|name")


def test_service_defaults():
    svc = Service(name="svc-a", worktree_path="/t/svc-a")
    assert (svc.repo_path, svc.branch, svc.is_dirty, svc.ahead, svc.behind, svc.stale) == (
        "",
        "",
        False,
        0,
        0,
        False,
    )


def test_task_defaults_not_stale():
    assert Task(id="IN-001", dir="/tasks/IN-001").stale is False


def test_params_mappings_are_independent():
    first = InitParams(task_id="A")
    second = InitParams(task_id="B")
    first.branch_suffixes["svc"] = "-v2"
    assert second.branch_suffixes == {}
    add = AddParams(task_id="C")
    assert add.services == [] and add.remote_branch_strategies == {}


def test_repo_holds_name_and_path():
    repo = Repo(name="api", path="/repo/api")
    assert (repo.name, repo.path) == ("api", "/repo/api")
    assert repo == Repo(name="api", path="/repo/api")
    assert repo != Repo(name="fresh", path="/repo/fresh")