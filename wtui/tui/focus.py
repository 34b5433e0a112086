"""Which panel of the interface has keyboard focus."""

from __future__ import annotations

from enum import IntEnum


class FocusPanel(IntEnum):
    """A focusable panel."""

    TASKS = 0
    SERVICES = 1
    OUTPUT = 2

    def next(self) -> FocusPanel:
        """Cycle forward between the tasks and services panels."""
        return FocusPanel.SERVICES if self is FocusPanel.TASKS else FocusPanel.TASKS

    def prev(self) -> FocusPanel:
        """Cycle backward between the tasks and services panels."""
        return FocusPanel.TASKS if self is FocusPanel.SERVICES else FocusPanel.SERVICES

    def __str__(self) -> str:
        return self.name.lower()