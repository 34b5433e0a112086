"""Global key bindings."""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass(frozen=True)
class KeyBinding:
    """Keys that trigger an action, with the help text shown for it."""

    keys: tuple[str, ...]
    help_key: str
    help_text: str

    def matches(self, key: str) -> bool:
        """Tell whether the pressed key triggers this binding."""
        return key in self.keys


@dataclass(frozen=True)
class KeyMap:
    """The application's global key bindings."""

    tab: KeyBinding
    panel_tasks: KeyBinding
    panel_services: KeyBinding
    panel_output: KeyBinding
    quit: KeyBinding
    force_quit: KeyBinding
    refresh: KeyBinding
    help: KeyBinding
    escape: KeyBinding
    toggle_logs: KeyBinding

    def bindings(self) -> list[KeyBinding]:
        """Return every binding in declaration order."""
        return [getattr(self, f.name) for f in fields(self)]


def _bind(key: str, text: str) -> KeyBinding:
    return KeyBinding(keys=(key,), help_key=key, help_text=text)


def default_keymap() -> KeyMap:
    """Return the default key bindings."""
    return KeyMap(
        tab=_bind("tab", "next panel"),
        panel_tasks=_bind("1", "focus tasks"),
        panel_services=_bind("2", "focus services"),
        panel_output=_bind("0", "focus output"),
        quit=_bind("q", "quit"),
        force_quit=_bind("ctrl+c", "quit"),
        refresh=_bind("r", "refresh tasks/repos"),
        help=_bind("?", "help"),
        escape=_bind("esc", "back"),
        toggle_logs=_bind("L", "logs"),
    )