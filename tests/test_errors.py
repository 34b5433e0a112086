import pytest

from wtui.errors import (
    InvalidTaskIDError,
    RemoteBranchConflictError,
    ServiceNotFoundError,
    TaskError,
    TaskExistsError,
    TaskNotFoundError,
    WorktreeSetupError,
)


def test_remote_branch_conflict_message_and_fields():
    err = RemoteBranchConflictError("IN-CONFLICT", "myservice", "feature/IN-CONFLICT", "/repos/myservice")
    assert str(err) == "remote branch conflict: task=IN-CONFLICT, service=myservice, branch=feature/IN-CONFLICT"
    assert err.task_id == "IN-CONFLICT"
    assert err.service_name == "myservice"
    assert err.branch_name == "feature/IN-CONFLICT"
    assert err.repo_path == "/repos/myservice"


@pytest.mark.parametrize(
    "cls", [TaskNotFoundError, TaskExistsError, ServiceNotFoundError, InvalidTaskIDError]
)
def test_all_errors_derive_from_task_error(cls):
    err = cls("boom")
    with pytest.raises(TaskError) as info:
        raise err
    assert info.value is err
    assert str(info.value) == "boom"


def test_invalid_task_id_is_value_error():
    err = InvalidTaskIDError("bad id")
    with pytest.raises(ValueError) as info:
        raise err
    assert info.value is err
    assert str(info.value) == "bad id"


@pytest.mark.parametrize("cls", [TaskNotFoundError, ServiceNotFoundError])
def test_not_found_errors_are_lookup_errors(cls):
    err = cls("IN-001")
    with pytest.raises(LookupError) as info:
        raise err
    assert info.value is err
    assert str(info.value) == "IN-001"


def test_worktree_setup_error_finds_conflict():
    conflict = RemoteBranchConflictError("T", "conflictservice", "feature/T", "/r")
    err = WorktreeSetupError("init: remote branch conflicts for task T", [RuntimeError("other"), conflict])
    assert err.conflict() is conflict
    assert err.errors[0].args == ("other",)
    assert "remote branch conflict" in str(err)


def test_worktree_setup_error_without_conflict():
    err = WorktreeSetupError("add: no worktrees added", [RuntimeError("resolve x: missing")])
    assert err.conflict() is None
    assert str(err) == "add: no worktrees added: resolve x: missing"


def test_worktree_setup_error_with_no_errors_keeps_message():
    err = WorktreeSetupError("nothing happened", [])
    assert str(err) == "nothing happened"
    assert err.errors == []