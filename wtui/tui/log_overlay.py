"""Overlay showing the git commands recorded in the JSON log file."""

from __future__ import annotations

import json
import os
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

_COLOR_BORDER = "#7C3AED"
_COLOR_TITLE = "#7C3AED"
_COLOR_TIME = "#6B7280"
_COLOR_PREFIX = "#10B981"
_COLOR_CMD = "#9CA3AF"
_COLOR_HINT = "#4A4A4A"
_COLOR_EMPTY = "#6B7280"
_COLOR_FILTER = "#F59E0B"

_RESET = "\x1b[0m"
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")
_ANSI_SPLIT = re.compile(r"(\x1b\[[0-9;]*m)")
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


@dataclass(frozen=True)
class LogTickMsg:
    """Time to look for new log lines."""


def log_tick_cmd() -> Callable[[], LogTickMsg]:
    """Return a command that waits one second and then asks for a refresh."""

    def tick() -> LogTickMsg:
        time.sleep(1.0)
        return LogTickMsg()

    return tick


def log_box_dimensions(term_width: int, term_height: int) -> tuple[int, int]:
    """Return the overlay box size for a terminal size."""
    width = max(term_width * 85 // 100, 60)
    width = min(width, term_width - 2)
    height = max(term_height * 80 // 100, 10)
    height = min(height, term_height - 2)
    return width, height


def log_viewport_dimensions(term_width: int, term_height: int) -> tuple[int, int]:
    """Return the size of the scrollable area inside the overlay box."""
    box_width, box_height = log_box_dimensions(term_width, term_height)
    return max(box_width - 4, 10), max(box_height - 4, 1)


def _style(text: str, color: str, bold: bool = False) -> str:
    red, green, blue = (int(color[i : i + 2], 16) for i in (1, 3, 5))
    weight = "1;" if bold else ""
    return f"\x1b[{weight}38;2;{red};{green};{blue}m{text}{_RESET}"


def _fit(text: str, width: int) -> str:
    """Cut text to width visible characters, keeping colour codes, and pad it."""
    pieces: list[str] = []
    used = 0
    cut = False
    for part in _ANSI_SPLIT.split(text):
        if _ANSI_RE.fullmatch(part):
            pieces.append(part)
            continue
        room = max(width - used, 0)
        if len(part) > room:
            pieces.append(part[:room])
            used += room
            cut = True
            break
        pieces.append(part)
        used += len(part)
    if cut:
        pieces.append(_RESET)
    return "".join(pieces) + " " * max(width - used, 0)


def _format_time(value: object) -> str | None:
    if value is None:
        return "00:00:00"
    if not isinstance(value, str):
        return None
    text = _LONG_FRACTION.sub(r"\1", value)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        stamp = datetime.fromisoformat(text)
    except ValueError:
        return None
    return stamp.astimezone().strftime("%H:%M:%S")


@dataclass(frozen=True)
class _Entry:
    rendered: str
    task_id: str


def _parse_entry(raw: bytes) -> _Entry | None:
    try:
        record = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        return None
    if not isinstance(record, dict):
        return None

    msg = record.get("msg") or ""
    argv = record.get("argv") or []
    task_id = record.get("task_id") or ""
    if not isinstance(msg, str) or not isinstance(task_id, str):
        return None
    if not isinstance(argv, list) or not all(isinstance(arg, str) for arg in argv):
        return None
    stamp = _format_time(record.get("time"))
    if stamp is None:
        return None
    if not msg.startswith("exec ") or not argv:
        return None

    rendered = (
        _style(stamp, _COLOR_TIME)
        + " "
        + _style("$", _COLOR_PREFIX)
        + " "
        + _style(" ".join(argv), _COLOR_CMD)
    )
    return _Entry(rendered=rendered, task_id=task_id)


class _Viewport:
    """A fixed-size window onto lines of text."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.lines: list[str] = []
        self.y_offset = 0

    @property
    def max_offset(self) -> int:
        return max(len(self.lines) - self.height, 0)

    def set_content(self, text: str) -> None:
        self.lines = text.split("\n")
        self.y_offset = min(self.y_offset, self.max_offset)

    def scroll_down(self, count: int) -> None:
        self.y_offset = min(self.y_offset + count, self.max_offset)

    def scroll_up(self, count: int) -> None:
        self.y_offset = max(self.y_offset - count, 0)

    def goto_top(self) -> None:
        self.y_offset = 0

    def goto_bottom(self) -> None:
        self.y_offset = self.max_offset

    def view(self) -> list[str]:
        visible = self.lines[self.y_offset : self.y_offset + self.height]
        visible += [""] * (self.height - len(visible))
        return visible


class LogOverlay:
    """Scrollable list of logged commands, optionally limited to one task."""

    def __init__(
        self,
        log_path: str | os.PathLike[str],
        term_width: int,
        term_height: int,
        task_filter: str = "",
    ) -> None:
        self.log_path = os.fspath(log_path)
        self.task_filter = task_filter
        self._default_filter = task_filter
        self.term_width = term_width
        self.term_height = term_height
        self._offset = 0
        self._entries: list[_Entry] = []
        self._viewport = _Viewport(*log_viewport_dimensions(term_width, term_height))
        self.refresh()

    def set_size(self, term_width: int, term_height: int) -> None:
        """Resize the overlay to a new terminal size."""
        self.term_width = term_width
        self.term_height = term_height
        self._viewport.width, self._viewport.height = log_viewport_dimensions(
            term_width, term_height
        )
        self._rebuild()

    def refresh(self) -> None:
        """Read log lines appended since the last refresh."""
        try:
            with open(self.log_path, "rb") as handle:
                handle.seek(self._offset)
                data = handle.read()
        except OSError:
            return
        if not data:
            return
        self._offset += len(data)

        added = False
        for raw in data.split(b"\n"):
            if not raw:
                continue
            entry = _parse_entry(raw)
            if entry is None:
                continue
            self._entries.append(entry)
            added = True

        if added:
            self._rebuild()
            self._viewport.goto_bottom()

    def _rebuild(self) -> None:
        visible = [
            entry.rendered
            for entry in self._entries
            if not self.task_filter or entry.task_id == self.task_filter
        ]
        if visible:
            self._viewport.set_content("\n".join(visible))
            return
        message = "No commands logged yet."
        if self.task_filter:
            message = f"No commands logged for task {self.task_filter}."
        self._viewport.set_content(_style(message, _COLOR_EMPTY))

    def update(self, key: str) -> bool:
        """Handle a key press; return whether the overlay used it."""
        viewport = self._viewport
        if key in ("j", "down"):
            viewport.scroll_down(1)
        elif key in ("k", "up"):
            viewport.scroll_up(1)
        elif key == "g":
            viewport.goto_top()
        elif key == "G":
            viewport.goto_bottom()
        elif key == "f":
            self.task_filter = "" if self.task_filter else self._default_filter
            self._rebuild()
            viewport.goto_bottom()
        elif key in ("pgdown", " ", "space"):
            viewport.scroll_down(viewport.height)
        elif key in ("pgup", "b"):
            viewport.scroll_up(viewport.height)
        elif key == "ctrl+d":
            viewport.scroll_down(viewport.height // 2)
        elif key == "ctrl+u":
            viewport.scroll_up(viewport.height // 2)
        else:
            return False
        return True

    def view(self) -> str:
        """Render the overlay centred in the terminal."""
        box_width, box_height = log_box_dimensions(self.term_width, self.term_height)
        inner_width = max(box_width - 6, 0)
        inner_height = max(box_height - 2, 0)

        title = _style("Logs", _COLOR_TITLE, bold=True)
        if self.task_filter:
            title += "  " + _style(f"[task: {self.task_filter}]", _COLOR_FILTER)

        hint = "[j/k] scroll  [g/G] top/bottom  [f] "
        hint += "clear filter  " if self.task_filter else "filter by task  "
        hint += "[L/Esc] close"

        content = [title, *self._viewport.view(), _style(hint, _COLOR_HINT)]
        content += [""] * (inner_height - len(content))

        vertical = _style("│", _COLOR_BORDER)
        rule = "─" * (inner_width + 2)
        box = [_style(f"╭{rule}╮", _COLOR_BORDER)]
        box += [f"{vertical} {_fit(line, inner_width)} {vertical}" for line in content]
        box.append(_style(f"╰{rule}╯", _COLOR_BORDER))

        box_outer_width = inner_width + 4
        left = max((self.term_width - box_outer_width) // 2, 0)
        right = max(self.term_width - left - box_outer_width, 0)
        rows = [" " * left + line + " " * right for line in box]

        top = max((self.term_height - len(rows)) // 2, 0)
        bottom = max(self.term_height - top - len(rows), 0)
        blank = " " * self.term_width
        return "\n".join([blank] * top + rows + [blank] * bottom)