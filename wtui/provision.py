"""Creation of service worktrees inside a task directory."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from wtui.domain import GitClient, Resolver, Service, WorktreeEntry
from wtui.errors import RemoteBranchConflictError, TaskError
from wtui.strategy import RemoteBranchStrategy

_FALLBACK_BASE_BRANCH = "main"


def _failure(message: str, cause: BaseException) -> TaskError:
    err = TaskError(f"{message}: {cause}")
    err.__cause__ = cause
    return err


class _GitCache:
    """Per-run cache of worktree lists and base branches, keyed by repository."""

    def __init__(self, git: GitClient) -> None:
        self._git = git
        self._lock = threading.Lock()
        self._worktrees: dict[str, list[WorktreeEntry]] = {}
        self._base_branches: dict[str, str] = {}

    def list_worktrees(self, repo_path: str) -> list[WorktreeEntry]:
        with self._lock:
            if repo_path in self._worktrees:
                return self._worktrees[repo_path]
        entries = self._git.list_worktrees(repo_path)
        with self._lock:
            self._worktrees[repo_path] = entries
        return entries

    def base_branch(self, repo_path: str) -> str:
        with self._lock:
            if repo_path in self._base_branches:
                return self._base_branches[repo_path]
        branch = self._git.base_branch(repo_path)
        with self._lock:
            self._base_branches[repo_path] = branch
        return branch


class WorktreeProvisioner:
    """Adds one worktree per requested service to a task directory."""

    def __init__(
        self,
        git: GitClient,
        resolver: Resolver,
        logger: logging.Logger | None = None,
    ) -> None:
        self._git = git
        self._resolver = resolver
        self._logger = logger or logging.getLogger(__name__)

    def add_worktrees(
        self,
        task_id: str,
        services: Iterable[str],
        task_dir: str | os.PathLike[str],
        branch_name: str,
        base_branch_override: str = "",
        strategies: Mapping[str, RemoteBranchStrategy] | None = None,
        suffixes: Mapping[str, str] | None = None,
        on_status: Callable[[str], None] | None = None,
    ) -> tuple[int, list[BaseException]]:
        """Add worktrees for all services concurrently.

        Returns the number of services now present in the task and the
        errors collected for the services that failed, in request order.
        """
        tokens = list(services)
        if not tokens:
            return 0, []

        cache = _GitCache(self._git)
        directory = os.fspath(task_dir)
        strategies = strategies or {}
        suffixes = suffixes or {}

        def process(token: str) -> tuple[int, BaseException | None]:
            return self._process_service(
                cache, task_id, token, directory, branch_name,
                base_branch_override, strategies, suffixes, on_status,
            )

        with ThreadPoolExecutor(max_workers=len(tokens)) as pool:
            results = list(pool.map(process, tokens))

        added = sum(count for count, _ in results)
        errors = [err for _, err in results if err is not None]
        return added, errors

    def _status(self, on_status: Callable[[str], None] | None, line: str) -> None:
        if on_status is not None:
            on_status(line)

    def _is_registered(self, cache: _GitCache, repo_path: str, dest: str) -> bool:
        try:
            entries = cache.list_worktrees(repo_path)
        except Exception:
            return False
        return any(entry.path == dest for entry in entries)

    def _add(
        self,
        service_name: str,
        repo_path: str,
        dest: str,
        branch: str,
        new_branch: bool,
        base: str,
        on_status: Callable[[str], None] | None,
    ) -> tuple[int, BaseException | None]:
        self._logger.info(
            "adding worktree: service=%s dest=%s branch=%s new_branch=%s base=%s",
            service_name, dest, branch, new_branch, base,
        )
        try:
            self._git.add_worktree(repo_path, dest, branch, new_branch, base)
        except Exception as exc:
            self._logger.warning(
                "failed to add worktree, skipping: service=%s dest=%s error=%s",
                service_name, dest, exc,
            )
            self._status(on_status, f"Warning: failed to add worktree for {service_name}: {exc}")
            return 0, _failure(f"add worktree {service_name}", exc)
        return 1, None

    def _process_service(
        self,
        cache: _GitCache,
        task_id: str,
        token: str,
        task_dir: str,
        branch_name: str,
        base_branch_override: str,
        strategies: Mapping[str, RemoteBranchStrategy],
        suffixes: Mapping[str, str],
        on_status: Callable[[str], None] | None,
    ) -> tuple[int, BaseException | None]:
        try:
            repo_path = self._resolver.resolve(token)
        except Exception as exc:
            self._logger.warning("service not found, skipping: token=%s error=%s", token, exc)
            self._status(on_status, f"Warning: service not found, skipping: {token}: {exc}")
            return 0, _failure(f"resolve {token}", exc)

        service_name = Path(repo_path).name
        dest = os.path.join(task_dir, service_name)

        if os.path.exists(dest):
            self._logger.info(
                "Skip: worktree destination already exists: service=%s dest=%s",
                service_name, dest,
            )
            return 1, None

        if self._is_registered(cache, repo_path, dest):
            self._logger.info(
                "Skip: worktree already registered with git: service=%s dest=%s",
                service_name, dest,
            )
            return 1, None

        base_branch = base_branch_override
        if not base_branch:
            try:
                base_branch = cache.base_branch(repo_path)
            except Exception as exc:
                self._logger.warning(
                    "could not determine base branch, using 'main': service=%s error=%s",
                    service_name, exc,
                )
                base_branch = _FALLBACK_BASE_BRANCH

        try:
            branch_exists = self._git.branch_exists(repo_path, branch_name)
        except Exception as exc:
            self._logger.warning(
                "could not check branch existence, assuming new branch: service=%s branch=%s error=%s",
                service_name, branch_name, exc,
            )
            branch_exists = False

        if branch_exists:
            return self._add(service_name, repo_path, dest, branch_name, False, base_branch, on_status)

        try:
            remote_exists = self._git.remote_branch_exists(repo_path, branch_name)
        except Exception as exc:
            self._logger.warning(
                "could not check remote branch existence, proceeding assuming no remote: "
                "service=%s branch=%s error=%s",
                service_name, branch_name, exc,
            )
            remote_exists = False

        if not remote_exists:
            return self._add(service_name, repo_path, dest, branch_name, True, base_branch, on_status)

        strategy = strategies.get(service_name)
        if strategy is None:
            return 0, RemoteBranchConflictError(task_id, service_name, branch_name, repo_path)

        if strategy is RemoteBranchStrategy.FETCH_AND_SWITCH:
            self._logger.info(
                "adding worktree with tracking (fetch & switch): service=%s dest=%s branch=%s",
                service_name, dest, branch_name,
            )
            try:
                self._git.add_worktree_with_tracking(repo_path, dest, branch_name, branch_name)
            except Exception as exc:
                self._logger.warning(
                    "failed to add worktree with tracking, skipping: service=%s dest=%s error=%s",
                    service_name, dest, exc,
                )
                self._status(
                    on_status,
                    f"Warning: failed to add worktree with tracking for {service_name}: {exc}",
                )
                return 0, _failure(f"add worktree with tracking {service_name}", exc)
            return 1, None

        if strategy is RemoteBranchStrategy.NEW_BRANCH:
            suffix = suffixes.get(service_name, "")
            if not suffix:
                self._logger.warning(
                    "missing branch suffix for StrategyNewBranch: service=%s", service_name
                )
                self._status(
                    on_status,
                    f"Warning: StrategyNewBranch selected but no suffix provided for {service_name}",
                )
                return 0, TaskError(f"missing branch suffix for {service_name}")
            return self._add(
                service_name, repo_path, dest, branch_name + suffix, True, base_branch, on_status
            )

        self._logger.info(
            "skipping service due to cancel strategy: service=%s branch=%s",
            service_name, branch_name,
        )
        return 0, None


def find_remote_branch_conflict(
    errors: Iterable[BaseException],
) -> RemoteBranchConflictError | None:
    """Return the first unresolved remote branch conflict, if any."""
    for err in errors:
        current: BaseException | None = err
        while current is not None:
            if isinstance(current, RemoteBranchConflictError):
                return current
            current = current.__cause__
    return None


def build_services_from_subdirs(task_dir: str | os.PathLike[str]) -> list[Service]:
    """List the subdirectories of a task directory as services, sorted by name."""
    directory = os.fspath(task_dir)
    try:
        with os.scandir(directory) as it:
            names: Sequence[str] = sorted(
                entry.name for entry in it if entry.is_dir(follow_symlinks=False)
            )
    except OSError:
        return []
    return [Service(name=name, worktree_path=os.path.join(directory, name)) for name in names]