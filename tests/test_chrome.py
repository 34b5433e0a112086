import pytest

from wtui.tui.chrome import APP_TITLE, render_footer, render_header
from wtui.tui.focus import FocusPanel


@pytest.mark.parametrize("key", ["i", "c", "d", "S", "P", "R", "C", "?", ",", "/", "Tab", "q"])
def test_footer_tasks_lists_every_key(key):
    assert f"[{key}]" in render_footer(FocusPanel.TASKS)


def test_footer_tasks_labels():
    footer = render_footer(FocusPanel.TASKS, False, False, "")
    for label in ("init", "Rider", "VS Code", "config", "filter", "quit"):
        assert label in footer


@pytest.mark.parametrize("key", ["a", "s", "p", "d", "ctrl+s", "ctrl+u", "Esc", "?"])
def test_footer_services_lists_every_key(key):
    assert f"[{key}]" in render_footer(FocusPanel.SERVICES)


def test_footer_services_labels():
    footer = render_footer(FocusPanel.SERVICES)
    for label in ("add service", "sync service", "push service", "remove service", "unstash"):
        assert label in footer


def test_footer_services_lazygit_available_includes_hint():
    assert "[g] lazygit" in render_footer(FocusPanel.SERVICES, lazygit_available=True)


def test_footer_services_lazygit_unavailable_excludes_hint():
    assert "lazygit" not in render_footer(FocusPanel.SERVICES, lazygit_available=False)


@pytest.mark.parametrize("key", ["j/k", "g/G", "Esc"])
def test_footer_output_lists_navigation_keys(key):
    assert f"[{key}]" in render_footer(FocusPanel.OUTPUT)


def test_footer_spinner_leads_when_running():
    idle = render_footer(FocusPanel.OUTPUT)
    busy = render_footer(FocusPanel.OUTPUT, op_running=True, spinner_frame="*")
    assert busy == "*  " + idle


def test_header_pads_to_width():
    header = render_header(80)
    assert len(header) == 80
    assert header.startswith(APP_TITLE)


def test_header_narrower_than_title_keeps_title():
    assert render_header(5) == APP_TITLE