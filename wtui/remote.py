"""Syncing worktrees with their upstream branch and pushing them."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed

from wtui.domain import GitClient, Service
from wtui.errors import TaskError
from wtui.strategy import SyncStrategy

_DEFAULT_BASE_BRANCH = "develop"

LineSink = Callable[[str], None]


def upstream_for(base_branch: str) -> str:
    """Return the remote branch to sync against; an empty base means develop."""
    return "origin/" + (base_branch or _DEFAULT_BASE_BRANCH)


def _serialized(on_line: LineSink) -> LineSink:
    lock = threading.Lock()

    def emit(line: str) -> None:
        with lock:
            on_line(line)

    return emit


def _run_all(
    worker: Callable[[Service], BaseException | None], services: list[Service]
) -> None:
    """Run worker for every service concurrently and raise the first failure."""
    if not services:
        return
    first: BaseException | None = None
    with ThreadPoolExecutor(max_workers=len(services)) as pool:
        futures = [pool.submit(worker, svc) for svc in services]
        for future in as_completed(futures):
            err = future.result()
            if err is not None and first is None:
                first = err
    if first is not None:
        raise first


def _apply(
    git: GitClient,
    name: str,
    path: str,
    upstream: str,
    strategy: SyncStrategy,
    emit: LineSink,
) -> str | None:
    """Merge or rebase; return the failing step name, or None on success."""
    if strategy is SyncStrategy.MERGE:
        emit(f"[{name}] merging {upstream}...")
        git.merge(path, upstream)
    elif strategy is SyncStrategy.REBASE:
        emit(f"[{name}] rebasing onto {upstream}...")
        git.rebase(path, upstream)
    return None


def _is_behind(git: GitClient, name: str, path: str, upstream: str, emit: LineSink) -> bool:
    try:
        _, behind = git.rev_list_ahead_behind(path, upstream)
    except Exception:
        emit(f"[{name}] could not determine ahead/behind, proceeding...")
        return True
    if behind == 0:
        emit(f"[{name}] already up to date.")
        return False
    return True


def sync_services(
    git: GitClient,
    services: Iterable[Service],
    upstream: str,
    strategy: SyncStrategy,
    on_line: LineSink,
) -> None:
    """Fetch and merge or rebase every service concurrently.

    Stale and dirty services are skipped with a message. All services are
    attempted; the first git failure is raised afterwards unchanged.
    """
    emit = _serialized(on_line)
    if strategy is SyncStrategy.NOOP:
        emit("sync skipped.")
        return

    def worker(svc: Service) -> BaseException | None:
        name = svc.name
        if svc.stale:
            emit(f"[{name}] worktree missing, skipping.")
            return None
        if svc.is_dirty:
            emit(f"[{name}] dirty working tree, stash or commit first.")
            return None

        emit(f"[{name}] fetching...")
        try:
            git.fetch(svc.worktree_path)
        except Exception as exc:
            emit(f"[{name}] fetch error: {exc}")
            return exc

        if not _is_behind(git, name, svc.worktree_path, upstream, emit):
            return None

        try:
            _apply(git, name, svc.worktree_path, upstream, strategy, emit)
        except Exception as exc:
            emit(f"[{name}] {strategy} error: {exc}")
            return exc

        emit(f"[{name}] done.")
        return None

    _run_all(worker, list(services))


def sync_worktree(
    git: GitClient,
    service_name: str,
    worktree_path: str,
    upstream: str,
    strategy: SyncStrategy,
    on_line: LineSink,
) -> None:
    """Fetch and merge or rebase one worktree; a dirty worktree is left alone."""
    if strategy is SyncStrategy.NOOP:
        on_line("sync skipped.")
        return

    try:
        dirty = git.is_dirty(worktree_path)
    except Exception:
        on_line(f"[{service_name}] could not check dirty state, proceeding...")
    else:
        if dirty:
            on_line(f"[{service_name}] dirty working tree, stash or commit first.")
            return

    on_line(f"[{service_name}] fetching...")
    try:
        git.fetch(worktree_path)
    except Exception as exc:
        on_line(f"[{service_name}] fetch error: {exc}")
        raise TaskError(f"sync {service_name}: fetch: {exc}") from exc

    if not _is_behind(git, service_name, worktree_path, upstream, on_line):
        return

    try:
        _apply(git, service_name, worktree_path, upstream, strategy, on_line)
    except Exception as exc:
        on_line(f"[{service_name}] {strategy} error: {exc}")
        raise TaskError(f"sync {service_name}: {strategy}: {exc}") from exc

    on_line(f"[{service_name}] done.")


def push_services(git: GitClient, services: Iterable[Service], on_line: LineSink) -> None:
    """Push every service concurrently; raise the first failure after all were tried."""
    emit = _serialized(on_line)

    def worker(svc: Service) -> BaseException | None:
        emit(f"[{svc.name}] pushing...")
        try:
            git.push(svc.worktree_path, emit)
        except Exception as exc:
            emit(f"[{svc.name}] push error: {exc}")
            return exc
        emit(f"[{svc.name}] pushed.")
        return None

    _run_all(worker, list(services))


def push_worktree(
    git: GitClient, service_name: str, worktree_path: str, on_line: LineSink
) -> None:
    """Push one worktree, reporting progress lines."""
    on_line(f"[{service_name}] pushing...")
    try:
        git.push(worktree_path, on_line)
    except Exception as exc:
        raise TaskError(f"push {service_name}: {exc}") from exc
    on_line(f"[{service_name}] pushed.")