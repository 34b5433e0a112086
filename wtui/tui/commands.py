"""Background commands run by the interface and the messages they produce."""

from __future__ import annotations

import dataclasses
import queue
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field

from wtui.domain import AddParams, InitParams, Repo, Service, Task
from wtui.errors import TaskNotFoundError
from wtui.manager import TaskManager
from wtui.strategy import SyncStrategy

Command = Callable[[], object]
LineQueue = "queue.Queue[str | None]"


@dataclass(frozen=True)
class TasksLoadedMsg:
    """The task list was loaded."""

    tasks: list[Task]


@dataclass(frozen=True)
class ReposLoadedMsg:
    """The repository list was loaded, or failed to load."""

    repos: list[Repo] = field(default_factory=list)
    err: BaseException | None = None


@dataclass(frozen=True)
class ServicesLoadedMsg:
    """The services of a task were loaded."""

    task_id: str
    services: list[Service] = field(default_factory=list)


@dataclass(frozen=True)
class CloneSourceServicesLoadedMsg:
    """The services of a task used as a clone source were loaded."""

    source_task_id: str
    services: list[Service] = field(default_factory=list)
    err: BaseException | None = None


@dataclass(frozen=True)
class OutputLineMsg:
    """One line of operation output, with the command that reads the next one."""

    line: str
    next: Command


@dataclass(frozen=True)
class CommandDoneMsg:
    """An operation finished; err is None on success."""

    err: BaseException | None
    op: str


@dataclass(frozen=True)
class LazygitDoneMsg:
    """The lazygit session for a service ended."""

    task_id: str
    service_name: str
    worktree_path: str
    err: BaseException | None = None


@dataclass(frozen=True)
class ChannelDrainedMsg:
    """No more output lines will arrive."""


@dataclass(frozen=True)
class DirtyServicesLoadedMsg:
    """How many services a task has and which of them are dirty."""

    service_count: int = 0
    dirty_services: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class Batch:
    """Commands to be run concurrently."""

    commands: tuple[Command, ...]


@dataclass(frozen=True)
class ExecCommand:
    """An external program that takes over the terminal while it runs."""

    args: tuple[str, ...]
    directory: str
    on_done: Callable[[BaseException | None], object] | None = None

    @property
    def name(self) -> str:
        """The program to start."""
        return self.args[0]

    def run(self) -> object:
        """Run the program and return the message built from its outcome."""
        error: BaseException | None = None
        try:
            subprocess.run(list(self.args), cwd=self.directory, check=True)
        except (OSError, subprocess.SubprocessError) as exc:
            error = exc
        if self.on_done is None:
            return CommandDoneMsg(err=error, op=" ".join(self.args))
        return self.on_done(error)


def _outcome(op: str, action: Callable[[], object]) -> CommandDoneMsg:
    try:
        action()
    except Exception as exc:
        return CommandDoneMsg(err=exc, op=op)
    return CommandDoneMsg(err=None, op=op)


def _streaming(op: str, action: Callable[[queue.Queue], object]) -> Batch:
    lines: queue.Queue[str | None] = queue.Queue()

    def run() -> CommandDoneMsg:
        try:
            return _outcome(op, lambda: action(lines))
        finally:
            lines.put(None)

    return Batch((run, read_next_line(lines)))


def load_tasks_cmd(manager: TaskManager) -> Command:
    """Load the task list."""

    def run() -> object:
        try:
            tasks = manager.list()
        except Exception as exc:
            return CommandDoneMsg(err=exc, op="Load tasks")
        return TasksLoadedMsg(tasks=tasks)

    return run


def load_services_cmd(manager: TaskManager, task_id: str) -> Command:
    """Load the services of a task; a vanished task yields no services."""

    def run() -> object:
        try:
            services = manager.list_services(task_id)
        except TaskNotFoundError:
            return ServicesLoadedMsg(task_id=task_id, services=[])
        except Exception as exc:
            return CommandDoneMsg(err=exc, op="Load services for task " + task_id)
        return ServicesLoadedMsg(task_id=task_id, services=services)

    return run


def load_clone_source_services_cmd(manager: TaskManager, task_id: str) -> Command:
    """Load the services of the task to clone from."""

    def run() -> object:
        try:
            services = manager.list_services(task_id)
        except Exception as exc:
            return CloneSourceServicesLoadedMsg(source_task_id=task_id, err=exc)
        return CloneSourceServicesLoadedMsg(source_task_id=task_id, services=services)

    return run


def load_repos_cmd(manager: TaskManager, force: bool) -> Command:
    """Load the known repositories, rescanning them if force is set."""

    def run() -> object:
        try:
            repos = manager.repos(force)
        except Exception as exc:
            return ReposLoadedMsg(err=exc)
        return ReposLoadedMsg(repos=repos)

    return run


def load_dirty_services_cmd(manager: TaskManager, task_id: str) -> Command:
    """Count the services of a task and name the dirty ones."""

    def run() -> object:
        try:
            services = manager.list_services(task_id)
        except Exception:
            return DirtyServicesLoadedMsg()
        return DirtyServicesLoadedMsg(
            service_count=len(services),
            dirty_services=[svc.name for svc in services if svc.is_dirty],
        )

    return run


def init_task_cmd(manager: TaskManager, params: InitParams) -> Batch:
    """Create a task, streaming status lines while it runs."""

    def action(lines: queue.Queue) -> None:
        manager.init(dataclasses.replace(params, on_status=lines.put))

    return _streaming("Init task " + params.task_id, action)


def add_service_cmd(manager: TaskManager, params: AddParams) -> Batch:
    """Add services to a task, streaming status lines while it runs."""

    def action(lines: queue.Queue) -> None:
        manager.add(dataclasses.replace(params, on_status=lines.put))

    return _streaming("Add services to " + params.task_id, action)


def remove_task_cmd(
    manager: TaskManager, task_id: str, force: bool, delete_branches: bool
) -> Command:
    """Remove a task."""
    return lambda: _outcome(
        "Remove task " + task_id, lambda: manager.remove(task_id, force, delete_branches)
    )


def sync_task_cmd(manager: TaskManager, task_id: str, strategy: SyncStrategy) -> Batch:
    """Sync every service of a task, streaming output lines."""
    return _streaming(
        "Sync task " + task_id, lambda lines: manager.sync_task(task_id, strategy, lines.put)
    )


def sync_service_cmd(
    manager: TaskManager, task_id: str, service_name: str, strategy: SyncStrategy
) -> Batch:
    """Sync one service, streaming output lines."""
    return _streaming(
        "Sync service " + service_name,
        lambda lines: manager.sync_service(task_id, service_name, strategy, lines.put),
    )


def push_task_cmd(manager: TaskManager, task_id: str) -> Batch:
    """Push every service of a task, streaming output lines."""
    return _streaming(
        "Push task " + task_id, lambda lines: manager.push_task(task_id, lines.put)
    )


def push_service_cmd(manager: TaskManager, task_id: str, service_name: str) -> Batch:
    """Push one service, streaming output lines."""
    return _streaming(
        "Push service " + service_name,
        lambda lines: manager.push_service(task_id, service_name, lines.put),
    )


def stash_service_cmd(
    manager: TaskManager, task_id: str, service_name: str, pop: bool, include_untracked: bool
) -> Command:
    """Stash the changes of a service, or pop its latest stash."""
    op = ("Unstashing service " if pop else "Stashing service ") + service_name
    return lambda: _outcome(
        op, lambda: manager.stash_service(task_id, service_name, pop, include_untracked)
    )


def remove_service_cmd(
    manager: TaskManager, task_id: str, service_name: str, remove_branch: bool
) -> Command:
    """Remove one service from a task."""
    return lambda: _outcome(
        "Remove service " + service_name,
        lambda: manager.remove_service(task_id, service_name, remove_branch),
    )


def rider_task_cmd(task_id: str, directory: str) -> ExecCommand:
    """Open the task's solution in Rider."""
    name, args = rider_task_args(task_id)
    return exec_process_cmd(name, args, directory, "Open Rider for " + task_id)


def rider_task_args(task_id: str) -> tuple[str, list[str]]:
    """Return the program and arguments that open the task's solution."""
    return "rider", [task_id + ".sln"]


def code_workspace_task_cmd(editor: str, task_id: str, directory: str) -> ExecCommand:
    """Open the task's workspace file in the configured editor."""
    name, args = code_workspace_task_args(editor, task_id)
    return exec_process_cmd(name, args, directory, f"Open {editor} for {task_id}")


def code_workspace_task_args(editor: str, task_id: str) -> tuple[str, list[str]]:
    """Return the program and arguments that open the task's workspace file."""
    return editor, [task_id + ".code-workspace"]


def lazygit_service_cmd(task_id: str, service_name: str, worktree_path: str) -> ExecCommand:
    """Run lazygit in a service worktree."""
    return dataclasses.replace(
        lazygit_service_exec_cmd(worktree_path),
        on_done=lambda err: lazygit_service_done_msg(task_id, service_name, worktree_path, err),
    )


def lazygit_service_exec_cmd(worktree_path: str) -> ExecCommand:
    """Return the lazygit process for a worktree, started inside it."""
    name, args = lazygit_service_args(worktree_path)
    return ExecCommand(args=(name, *args), directory=worktree_path)


def lazygit_service_args(worktree_path: str) -> tuple[str, list[str]]:
    """Return the program and arguments that run lazygit on a worktree."""
    return "lazygit", ["-p", worktree_path]


def lazygit_service_done_msg(
    task_id: str, service_name: str, worktree_path: str, error: BaseException | None
) -> LazygitDoneMsg:
    """Build the message sent when lazygit exits."""
    return LazygitDoneMsg(
        task_id=task_id, service_name=service_name, worktree_path=worktree_path, err=error
    )


def read_next_line(lines: queue.Queue) -> Command:
    """Return a command that waits for the next line; None in the queue ends the stream."""

    def run() -> object:
        line = lines.get()
        if line is None:
            return ChannelDrainedMsg()
        return OutputLineMsg(line=line, next=read_next_line(lines))

    return run


def exec_process_cmd(name: str, args: list[str], directory: str, op: str) -> ExecCommand:
    """Return an external program run in directory that reports completion as op."""
    return ExecCommand(
        args=(name, *args),
        directory=directory,
        on_done=lambda err: exec_process_done_msg(op, err),
    )


def exec_process_done_msg(op: str, error: BaseException | None) -> CommandDoneMsg:
    """Build the message sent when an external program exits."""
    return CommandDoneMsg(err=error, op=op)