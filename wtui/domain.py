"""Core data types, collaborator protocols and task ID validation."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from wtui.errors import InvalidTaskIDError, TaskNotFoundError
from wtui.strategy import RemoteBranchStrategy

_BANNED_CHARS = '/\\<>:"|?*'


@dataclass
class Task:
    """A task directory under the tasks root."""

    id: str
    dir: str
    stale: bool = False


@dataclass
class Service:
    """A service worktree inside a task directory."""

    name: str
    worktree_path: str
    repo_path: str = ""
    branch: str = ""
    is_dirty: bool = False
    ahead: int = 0
    behind: int = 0
    stale: bool = False


@dataclass
class Repo:
    """A repository that can be added to a task."""

    name: str
    path: str


@dataclass
class WorktreeEntry:
    """One entry of a repository's worktree list."""

    path: str
    branch: str = ""


@dataclass
class Config:
    """Settings the task manager works with."""

    tasks_root: str
    root_dir: str = ""
    branch_prefix: str = ""
    base_branch: str = ""
    editor: str = ""


@dataclass
class InitParams:
    """Parameters for creating a new task."""

    task_id: str
    services: list[str] = field(default_factory=list)
    branch_prefix: str = ""
    base_branch: str = ""
    on_status: Callable[[str], None] | None = None
    remote_branch_strategies: dict[str, RemoteBranchStrategy] = field(default_factory=dict)
    branch_suffixes: dict[str, str] = field(default_factory=dict)


@dataclass
class AddParams:
    """Parameters for adding services to an existing task."""

    task_id: str
    services: list[str] = field(default_factory=list)
    on_status: Callable[[str], None] | None = None
    remote_branch_strategies: dict[str, RemoteBranchStrategy] = field(default_factory=dict)
    branch_suffixes: dict[str, str] = field(default_factory=dict)


@runtime_checkable
class GitClient(Protocol):
    """Git operations needed by the task manager; failures raise exceptions."""

    def base_branch(self, repo_path: str) -> str:
        """Return the repository's default base branch."""

    def branch_exists(self, repo_path: str, branch: str) -> bool:
        """Tell whether a local branch exists."""

    def remote_branch_exists(self, repo_path: str, branch: str) -> bool:
        """Tell whether the branch exists on the remote."""

    def list_worktrees(self, repo_path: str) -> list[WorktreeEntry]:
        """List the worktrees registered with the repository."""

    def add_worktree(self, repo_path: str, dest: str, branch: str, new_branch: bool, base: str) -> None:
        """Create a worktree at dest, creating the branch from base if new_branch."""

    def add_worktree_with_tracking(
        self, repo_path: str, dest: str, local_branch: str, remote_branch: str
    ) -> None:
        """Create a worktree whose local branch tracks the remote branch."""

    def common_dir(self, path: str) -> str:
        """Return the common git directory of a worktree."""

    def remove_worktree(self, common_dir: str, worktree_path: str, force: bool) -> None:
        """Remove a worktree."""

    def is_dirty(self, path: str) -> bool:
        """Tell whether the worktree has uncommitted changes."""

    def rev_list_ahead_behind(self, path: str, upstream: str) -> tuple[int, int]:
        """Return how many commits the worktree is ahead of and behind upstream."""

    def fetch(self, path: str) -> None:
        """Fetch from the remote."""

    def merge(self, path: str, branch: str) -> None:
        """Merge branch into the worktree."""

    def rebase(self, path: str, upstream: str) -> None:
        """Rebase the worktree onto upstream."""

    def push(self, path: str, on_line: Callable[[str], None]) -> None:
        """Push the worktree branch, reporting progress lines."""

    def stash(self, worktree_path: str, pop: bool, include_untracked: bool) -> None:
        """Stash changes, or pop the latest stash."""

    def get_worktree_branch(self, worktree_path: str) -> str:
        """Return the branch checked out in the worktree."""

    def delete_branch(self, repo_path: str, branch: str) -> None:
        """Delete a local branch."""


@runtime_checkable
class Resolver(Protocol):
    """Finds repositories by name."""

    def resolve(self, token: str) -> str:
        """Return the repository path for a service token."""

    def find_all(self) -> list[Repo]:
        """Return every known repository."""


@runtime_checkable
class RefreshingResolver(Protocol):
    """A resolver that can rescan its repositories."""

    def refresh(self) -> list[Repo]:
        """Rescan and return every repository."""


@runtime_checkable
class SlnGenerator(Protocol):
    """Creates a solution file for a task."""

    def generate(self, task_dir: str, task_id: str, services: Sequence[Service]) -> None:
        """Write the solution file for the task's services."""


def validate_task_id(task_id: str) -> str:
    """Check that a task ID is safe to use as a directory name and return it."""
    if task_id == "":
        raise TaskNotFoundError("task not found: task ID must not be empty")
    if task_id == ".":
        raise InvalidTaskIDError(f'invalid task ID "{task_id}": single dot is not allowed')
    for ch in _BANNED_CHARS:
        if ch in task_id:
            raise InvalidTaskIDError(
                f'invalid task ID "{task_id}": contains forbidden character "{ch}"'
            )
    if ".." in task_id:
        raise InvalidTaskIDError(f'invalid task ID "{task_id}": contains path traversal sequence')
    return task_id