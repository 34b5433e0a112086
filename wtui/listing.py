"""Listing of tasks and inspection of the service worktrees inside them."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from wtui.domain import GitClient, Service, Task
from wtui.errors import TaskError, TaskNotFoundError

_DETACHED = "(detached)"
_HEADS_PREFIX = "refs/heads/"


def list_tasks(tasks_root: str | os.PathLike[str]) -> list[Task]:
    """Return the task directories under tasks_root, sorted by ID.

    A missing tasks root means there are no tasks yet.
    """
    root = os.fspath(tasks_root)
    try:
        with os.scandir(root) as it:
            names = [entry.name for entry in it if entry.is_dir()]
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise TaskError(f"list: read tasks root {root}: {exc}") from exc

    tasks = []
    for name in sorted(names):
        task_dir = os.path.join(root, name)
        tasks.append(Task(id=name, dir=task_dir, stale=not os.path.exists(task_dir)))
    return tasks


class ServiceInspector:
    """Collects branch and status information for the worktrees of a task."""

    def __init__(self, git: GitClient, logger: logging.Logger | None = None) -> None:
        self._git = git
        self._logger = logger or logging.getLogger(__name__)

    def list_services(self, task_dir: str | os.PathLike[str]) -> list[Service]:
        """Inspect every git worktree in task_dir concurrently; return them sorted by name.

        Subdirectories that are not git worktrees are skipped.
        """
        directory = os.fspath(task_dir)
        if not os.path.exists(directory):
            raise TaskNotFoundError(f"task not found: {Path(directory).name}")
        try:
            with os.scandir(directory) as it:
                names = [entry.name for entry in it if entry.is_dir()]
        except OSError as exc:
            raise TaskError(f"list services: read task dir {directory}: {exc}") from exc

        if not names:
            return []

        with ThreadPoolExecutor(max_workers=len(names)) as pool:
            results = list(pool.map(lambda name: self.inspect(directory, name), names))

        services = [svc for svc in results if svc is not None]
        services.sort(key=lambda svc: svc.name)
        return services

    def inspect(self, task_dir: str | os.PathLike[str], name: str) -> Service | None:
        """Describe one service worktree, or return None if it is not a git worktree."""
        path = os.path.join(os.fspath(task_dir), name)

        if not os.path.exists(path):
            return Service(name=name, worktree_path=path, stale=True)

        try:
            common_dir = self._git.common_dir(path)
        except Exception as exc:
            self._logger.debug("skipping non-git directory: dir=%s reason=%s", path, exc)
            return None

        svc = Service(name=name, worktree_path=path, repo_path=os.path.dirname(common_dir))
        svc.branch = self.current_branch(path, name)

        with ThreadPoolExecutor(max_workers=2) as pool:
            dirty_future = pool.submit(self._git.is_dirty, path)
            ahead_behind_future = (
                pool.submit(self._git.rev_list_ahead_behind, path, f"origin/{svc.branch}")
                if svc.branch
                else None
            )

            try:
                svc.is_dirty = bool(dirty_future.result())
            except Exception as exc:
                self._logger.warning(
                    "could not determine dirty state: service=%s error=%s", name, exc
                )

            if ahead_behind_future is not None:
                try:
                    svc.ahead, svc.behind = ahead_behind_future.result()
                except Exception as exc:
                    self._logger.debug(
                        "could not determine ahead/behind count: service=%s error=%s", name, exc
                    )

        return svc

    def current_branch(self, worktree_path: str, service_name: str) -> str:
        """Return the branch checked out at worktree_path, or "" if detached or unknown."""
        try:
            entries = self._git.list_worktrees(worktree_path)
        except Exception as exc:
            self._logger.warning(
                "could not list worktrees for branch detection: service=%s error=%s",
                service_name, exc,
            )
            return ""

        for entry in entries:
            if entry.path == worktree_path:
                branch = entry.branch.removeprefix(_HEADS_PREFIX)
                return "" if branch == _DETACHED else branch
        return ""