"""The task manager: creates, inspects, syncs, pushes and removes tasks."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable

from wtui.domain import (
    AddParams,
    Config,
    GitClient,
    InitParams,
    RefreshingResolver,
    Repo,
    Resolver,
    Service,
    SlnGenerator,
    Task,
    validate_task_id,
)
from wtui.errors import (
    ServiceNotFoundError,
    TaskError,
    TaskExistsError,
    TaskNotFoundError,
    WorktreeSetupError,
)
from wtui.listing import ServiceInspector, list_tasks
from wtui.provision import (
    WorktreeProvisioner,
    build_services_from_subdirs,
    find_remote_branch_conflict,
)
from wtui.remote import push_services, push_worktree, sync_services, sync_worktree, upstream_for
from wtui.removal import remove_service_worktree, remove_task_worktrees
from wtui.strategy import SyncStrategy
from wtui.workspace import generate_workspace_file

LineSink = Callable[[str], None]


def _discard(_line: str) -> None:
    """Drop a progress line."""


class TaskManager:
    """Manages task directories holding one git worktree per service."""

    def __init__(
        self,
        config: Config,
        git: GitClient,
        resolver: Resolver,
        sln: SlnGenerator | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config
        self._git = git
        self._resolver = resolver
        self._sln = sln
        self._logger = logger or logging.getLogger(__name__)
        self._provisioner = WorktreeProvisioner(git, resolver, self._logger)
        self._inspector = ServiceInspector(git, self._logger)

    def task_dir(self, task_id: str) -> str:
        """Return the directory of a task."""
        return os.path.join(self.config.tasks_root, task_id)

    def resolve_branch_name(self, prefix: str, task_id: str) -> str:
        """Return the task branch name; an empty prefix means the configured one."""
        return (prefix or self.config.branch_prefix) + task_id

    def _service_path(self, task_id: str, service_name: str) -> str:
        path = os.path.join(self.task_dir(task_id), service_name)
        if not os.path.exists(path):
            raise ServiceNotFoundError(
                f"service not found: service {service_name} not in task {task_id}"
            )
        return path

    def _refresh_task_files(self, task_id: str, task_dir: str, phase: str) -> None:
        try:
            generate_workspace_file(task_id, task_dir)
        except OSError as exc:
            self._logger.warning("failed to generate workspace file: error=%s", exc)

        if self._sln is None:
            return
        services = build_services_from_subdirs(task_dir)
        try:
            self._sln.generate(task_dir, task_id, services)
        except Exception as exc:
            self._logger.warning("sln generation failed during %s: error=%s", phase, exc)

    def _check_outcome(
        self,
        phase: str,
        task_id: str,
        requested: int,
        added: int,
        errors: list[BaseException],
        rollback_dir: str | None,
    ) -> None:
        conflict = find_remote_branch_conflict(errors)
        if conflict is not None:
            if added == 0 and rollback_dir is not None:
                shutil.rmtree(rollback_dir, ignore_errors=True)
            raise WorktreeSetupError(
                f"{phase}: remote branch conflicts for task {task_id}", errors
            ) from conflict

        if requested > 0 and added == 0:
            if rollback_dir is not None:
                shutil.rmtree(rollback_dir, ignore_errors=True)
            raise WorktreeSetupError(f"{phase}: no worktrees added for task {task_id}", errors)

    def init(self, params: InitParams) -> None:
        """Create a task directory and a worktree for every requested service.

        An existing task may only be re-initialised with remote branch
        strategies, to resolve conflicts reported by an earlier attempt.
        """
        validate_task_id(params.task_id)
        task_dir = self.task_dir(params.task_id)

        if os.path.exists(task_dir):
            if not params.remote_branch_strategies:
                raise TaskExistsError(f"task already exists: {params.task_id}")
        else:
            try:
                os.makedirs(task_dir, exist_ok=True)
            except OSError as exc:
                raise TaskError(f"init: create task directory {task_dir}: {exc}") from exc

        branch_name = self.resolve_branch_name(params.branch_prefix, params.task_id)
        added, errors = self._provisioner.add_worktrees(
            params.task_id,
            params.services,
            task_dir,
            branch_name,
            params.base_branch,
            params.remote_branch_strategies,
            params.branch_suffixes,
            params.on_status,
        )
        self._check_outcome("init", params.task_id, len(params.services), added, errors, task_dir)
        self._refresh_task_files(params.task_id, task_dir, "init")

    def add(self, params: AddParams) -> None:
        """Add worktrees for more services to an existing task."""
        validate_task_id(params.task_id)
        task_dir = self.task_dir(params.task_id)
        if not os.path.exists(task_dir):
            raise TaskNotFoundError(f"task not found: {params.task_id}")

        branch_name = self.resolve_branch_name("", params.task_id)
        added, errors = self._provisioner.add_worktrees(
            params.task_id,
            params.services,
            task_dir,
            branch_name,
            "",
            params.remote_branch_strategies,
            params.branch_suffixes,
            params.on_status,
        )
        self._check_outcome("add", params.task_id, len(params.services), added, errors, None)
        self._refresh_task_files(params.task_id, task_dir, "add")

    def list(self) -> list[Task]:
        """Return all tasks, sorted by ID."""
        return list_tasks(self.config.tasks_root)

    def list_services(self, task_id: str) -> list[Service]:
        """Return the service worktrees of a task, sorted by name."""
        validate_task_id(task_id)
        task_dir = self.task_dir(task_id)
        if not os.path.exists(task_dir):
            raise TaskNotFoundError(f"task not found: {task_id}")
        return self._inspector.list_services(task_dir)

    def remove(self, task_id: str, force: bool = False, delete_branches: bool = False) -> None:
        """Remove all worktrees of a task and delete its directory."""
        validate_task_id(task_id)
        task_dir = self.task_dir(task_id)
        if not os.path.exists(task_dir):
            raise TaskNotFoundError(f"task not found: {task_id}")
        remove_task_worktrees(self._git, task_dir, force, delete_branches, self._logger)

    def repos(self, refresh: bool = False) -> list[Repo]:
        """Return the known repositories, rescanning them if asked and supported."""
        if refresh and isinstance(self._resolver, RefreshingResolver):
            return self._resolver.refresh()
        return self._resolver.find_all()

    def sync_task(
        self, task_id: str, strategy: SyncStrategy, on_line: LineSink | None = None
    ) -> None:
        """Fetch and merge or rebase every service of a task onto the base branch."""
        emit = on_line or _discard
        validate_task_id(task_id)
        if strategy is SyncStrategy.NOOP:
            emit("sync skipped.")
            return

        services = self.list_services(task_id)
        if not services:
            return
        sync_services(self._git, services, upstream_for(self.config.base_branch), strategy, emit)

    def sync_service(
        self,
        task_id: str,
        service_name: str,
        strategy: SyncStrategy,
        on_line: LineSink | None = None,
    ) -> None:
        """Fetch and merge or rebase one service onto the base branch."""
        emit = on_line or _discard
        validate_task_id(task_id)
        if strategy is SyncStrategy.NOOP:
            emit("sync skipped.")
            return

        path = self._service_path(task_id, service_name)
        sync_worktree(
            self._git, service_name, path, upstream_for(self.config.base_branch), strategy, emit
        )

    def push_task(self, task_id: str, on_line: LineSink | None = None) -> None:
        """Push every service of a task; the first failure is raised after all were tried."""
        emit = on_line or _discard
        validate_task_id(task_id)
        services = self.list_services(task_id)
        if not services:
            return
        push_services(self._git, services, emit)

    def push_service(
        self, task_id: str, service_name: str, on_line: LineSink | None = None
    ) -> None:
        """Push one service of a task."""
        validate_task_id(task_id)
        path = self._service_path(task_id, service_name)
        push_worktree(self._git, service_name, path, on_line or _discard)

    def stash_service(
        self,
        task_id: str,
        service_name: str,
        pop: bool = False,
        include_untracked: bool = False,
    ) -> None:
        """Stash the changes of a service, or pop its latest stash."""
        validate_task_id(task_id)
        path = self._service_path(task_id, service_name)
        try:
            self._git.stash(path, pop, include_untracked)
        except Exception as exc:
            op = "stash pop" if pop else "stash"
            raise TaskError(f"{op} {task_id}/{service_name}: {exc}") from exc

    def remove_service(
        self, task_id: str, service_name: str, remove_branch: bool = False
    ) -> None:
        """Remove one service worktree from a task and, if asked, its branch."""
        validate_task_id(task_id)
        path = self._service_path(task_id, service_name)
        remove_service_worktree(self._git, path, remove_branch)
        if not os.path.exists(self.task_dir(task_id)):
            raise TaskNotFoundError(f"task not found: {task_id}")