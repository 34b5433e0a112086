import pytest

from wtui.strategy import (
    RemoteBranchStrategy,
    SyncStrategy,
    remote_branch_strategy_name,
    sync_strategy_name,
)


@pytest.mark.parametrize(
    "strategy, want",
    [
        (SyncStrategy.MERGE, "merge"),
        (SyncStrategy.REBASE, "rebase"),
        (SyncStrategy.NOOP, "noop"),
    ],
)
def test_sync_strategy_str(strategy, want):
    assert str(strategy) == want
    assert sync_strategy_name(strategy) == want


def test_sync_strategy_unknown_value():
    assert sync_strategy_name(99) == "unknown"


@pytest.mark.parametrize(
    "strategy, want",
    [
        (RemoteBranchStrategy.FETCH_AND_SWITCH, "Track Remote Branch"),
        (RemoteBranchStrategy.NEW_BRANCH, "New Branch"),
        (RemoteBranchStrategy.CANCEL, "Cancel"),
    ],
)
def test_remote_branch_strategy_str(strategy, want):
    assert str(strategy) == want
    assert remote_branch_strategy_name(int(strategy)) == want


def test_remote_branch_strategy_unknown_value():
    assert remote_branch_strategy_name(99) == "Unknown"


def test_numeric_values_follow_declaration_order():
    assert [sync_strategy_name(v) for v in (0, 1, 2)] == ["merge", "rebase", "noop"]
    assert [remote_branch_strategy_name(v) for v in (0, 1, 2)] == [
        "Track Remote Branch",
        "New Branch",
        "Cancel",
    ]