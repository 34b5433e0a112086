import pytest

from wtui.tui.focus import FocusPanel


@pytest.mark.parametrize(
    "panel, want",
    [
        (FocusPanel.TASKS, FocusPanel.SERVICES),
        (FocusPanel.SERVICES, FocusPanel.TASKS),
        (FocusPanel.OUTPUT, FocusPanel.TASKS),
    ],
)
def test_next(panel, want):
    assert panel.next() is want


@pytest.mark.parametrize(
    "panel, want",
    [
        (FocusPanel.SERVICES, FocusPanel.TASKS),
        (FocusPanel.TASKS, FocusPanel.SERVICES),
        (FocusPanel.OUTPUT, FocusPanel.SERVICES),
    ],
)
def test_prev(panel, want):
    assert panel.prev() is want


@pytest.mark.parametrize(
    "panel, want",
    [(FocusPanel.TASKS, "tasks"), (FocusPanel.SERVICES, "services"), (FocusPanel.OUTPUT, "output")],
)
def test_str(panel, want):
    assert str(panel) == want


def test_next_then_prev_round_trip():
    for panel in (FocusPanel.TASKS, FocusPanel.SERVICES):
        assert panel.next().prev() is panel