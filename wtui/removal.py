"""Removal of service worktrees and whole task directories."""

from __future__ import annotations

import logging
import os
import shutil

from wtui.domain import GitClient
from wtui.errors import TaskError


def _failure(message: str, cause: BaseException) -> TaskError:
    err = TaskError(f"{message}: {cause}")
    err.__cause__ = cause
    return err


def remove_task_worktrees(
    git: GitClient,
    task_dir: str | os.PathLike[str],
    force: bool = False,
    delete_branches: bool = False,
    logger: logging.Logger | None = None,
) -> None:
    """Remove every worktree of a task, then the task directory itself.

    Without force, any worktree failure raises TaskError and leaves the
    task directory in place; with force, failures are logged and the
    directory is deleted anyway.
    """
    log = logger or logging.getLogger(__name__)
    directory = os.fspath(task_dir)
    try:
        with os.scandir(directory) as it:
            names = sorted(entry.name for entry in it if entry.is_dir(follow_symlinks=False))
    except OSError as exc:
        raise _failure(f"remove: read task dir {directory}", exc) from exc

    failures: list[TaskError] = []
    for name in names:
        subdir = os.path.join(directory, name)

        try:
            common_dir = git.common_dir(subdir)
        except Exception as exc:
            log.warning(
                "could not determine common git dir, skipping worktree removal: service=%s error=%s",
                name, exc,
            )
            failures.append(_failure(f"common-dir for {name}", exc))
            continue

        branch_name = ""
        if delete_branches:
            try:
                branch_name = git.get_worktree_branch(subdir)
            except Exception:
                branch_name = ""

        try:
            git.remove_worktree(common_dir, subdir, force)
        except Exception as exc:
            log.warning(
                "failed to remove worktree: service=%s error=%s force=%s", name, exc, force
            )
            failures.append(_failure(f"remove worktree {name}", exc))
            continue

        log.info("removed worktree: service=%s", name)

        if delete_branches and branch_name:
            try:
                git.delete_branch(common_dir, branch_name)
            except Exception as exc:
                log.warning(
                    "failed to delete branch: service=%s branch=%s error=%s",
                    name, branch_name, exc,
                )
                failures.append(_failure(f"delete branch {branch_name}", exc))
            else:
                log.info("deleted branch: service=%s branch=%s", name, branch_name)

    if failures and not force:
        raise TaskError("\n".join(str(err) for err in failures)) from failures[0]

    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise _failure(f"remove: delete task directory {directory}", exc) from exc

    log.info("task removed")


def remove_service_worktree(
    git: GitClient,
    worktree_path: str | os.PathLike[str],
    remove_branch: bool = False,
) -> None:
    """Remove one service worktree and, if asked, its branch."""
    path = os.fspath(worktree_path)

    try:
        common_dir = git.common_dir(path)
    except Exception as exc:
        raise _failure(f"remove service: not found common directory for {path}", exc) from exc

    branch_name = ""
    if remove_branch:
        try:
            branch_name = git.get_worktree_branch(path)
        except Exception as exc:
            raise _failure(f"remove service: failed to get branch name {path}", exc) from exc

    try:
        git.remove_worktree(common_dir, path, False)
    except Exception as exc:
        raise _failure(f"remove service: failed delete worktree {path}", exc) from exc

    if remove_branch:
        try:
            git.delete_branch(common_dir, branch_name)
        except Exception as exc:
            raise _failure(f"remove service: failed delete branch {branch_name}", exc) from exc