"""Strategies for remote branch conflicts and for syncing worktrees."""

from __future__ import annotations

from enum import IntEnum


class RemoteBranchStrategy(IntEnum):
    """How to handle a task branch that already exists on the remote."""

    FETCH_AND_SWITCH = 0
    NEW_BRANCH = 1
    CANCEL = 2

    def __str__(self) -> str:
        return _REMOTE_LABELS[self]


_REMOTE_LABELS = {
    RemoteBranchStrategy.FETCH_AND_SWITCH: "Track Remote Branch",
    RemoteBranchStrategy.NEW_BRANCH: "New Branch",
    RemoteBranchStrategy.CANCEL: "Cancel",
}


class SyncStrategy(IntEnum):
    """How to bring a worktree up to date with its upstream branch."""

    MERGE = 0
    REBASE = 1
    NOOP = 2

    def __str__(self) -> str:
        return self.name.lower()


def remote_branch_strategy_name(value: int) -> str:
    """Return the display label for a remote branch strategy value."""
    try:
        return str(RemoteBranchStrategy(value))
    except ValueError:
        return "Unknown"


def sync_strategy_name(value: int) -> str:
    """Return the display name for a sync strategy value."""
    try:
        return str(SyncStrategy(value))
    except ValueError:
        return "unknown"