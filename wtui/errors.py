"""Exceptions raised by task and worktree operations."""

from __future__ import annotations

from collections.abc import Iterable


class TaskError(Exception):
    """Base class for every task-related failure."""


class TaskNotFoundError(TaskError, LookupError):
    """The requested task directory does not exist."""


class TaskExistsError(TaskError):
    """A task with the same ID already exists."""


class ServiceNotFoundError(TaskError, LookupError):
    """The requested service is not part of the task."""


class InvalidTaskIDError(TaskError, ValueError):
    """The task ID cannot be used as a directory name."""


class RemoteBranchConflictError(TaskError):
    """The task branch already exists on the remote and no strategy was chosen."""

    def __init__(self, task_id: str, service_name: str, branch_name: str, repo_path: str) -> None:
        self.task_id = task_id
        self.service_name = service_name
        self.branch_name = branch_name
        self.repo_path = repo_path
        super().__init__(
            f"remote branch conflict: task={task_id}, service={service_name}, branch={branch_name}"
        )


class WorktreeSetupError(TaskError):
    """One or more worktrees could not be created for a task."""

    def __init__(self, message: str, errors: Iterable[BaseException]) -> None:
        self.errors: list[BaseException] = list(errors)
        details = "\n".join(str(err) for err in self.errors)
        super().__init__(f"{message}: {details}" if details else message)

    def conflict(self) -> RemoteBranchConflictError | None:
        """Return the first remote branch conflict among the collected errors."""
        return next(
            (err for err in self.errors if isinstance(err, RemoteBranchConflictError)),
            None,
        )