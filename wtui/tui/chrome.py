"""Header and footer lines of the interface."""

from __future__ import annotations

from wtui.tui.focus import FocusPanel

APP_TITLE = "wtui — git worktree manager"

_TASK_HINTS = (
    "[i] init  [c] clone  [d] remove  [S] sync  [P] push  [R] Rider  [C] VS Code  "
    "[?] help  [,] config  [/] filter  [Tab] services  [q] quit"
)
_SERVICE_HINTS_LAZYGIT = "[a] add service  [d] remove service  [g] lazygit  [Esc] back  [?] help"
_SERVICE_HINTS = (
    "[a] add service  [s] sync service  [p] push service  [d] remove service  "
    "[ctrl+s] stash  [ctrl+u] unstash  [Esc] back  [?] help"
)
_OUTPUT_HINTS = "[j/k] scroll  [g/G] top/bottom  [Esc] back"
_DEFAULT_HINTS = "[q] quit"


def render_footer(
    focus: FocusPanel,
    lazygit_available: bool = False,
    op_running: bool = False,
    spinner_frame: str = "",
) -> str:
    """Return the key hints for the focused panel, led by the spinner while busy."""
    if focus == FocusPanel.TASKS:
        hints = _TASK_HINTS
    elif focus == FocusPanel.SERVICES:
        hints = _SERVICE_HINTS_LAZYGIT if lazygit_available else _SERVICE_HINTS
    elif focus == FocusPanel.OUTPUT:
        hints = _OUTPUT_HINTS
    else:
        hints = _DEFAULT_HINTS

    if op_running:
        hints = f"{spinner_frame}  {hints}"
    return hints


def render_header(width: int) -> str:
    """Return the title, left-aligned and padded to width."""
    return APP_TITLE.ljust(width)