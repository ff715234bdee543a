from pathlib import Path

from clife import render
from clife.browser import Browser, Input, Screen
from clife.catalog import EntryRepository, Note, Project


def _text(fragments):
    return "".join(text for _, text in fragments)


def _browser(tmp_path):
    (tmp_path / "work").mkdir()
    (tmp_path / "work" / "todo.md").write_text("- milk\n- eggs\n", encoding="utf-8")
    (tmp_path / "work" / "plan.md").write_text("plan\n", encoding="utf-8")
    (tmp_path / "root.md").write_text("root\n", encoding="utf-8")
    repo = EntryRepository(
        [Note(Path("work/todo.md")), Note(Path("work/plan.md")), Note(Path("root.md"))],
        [Project(Path("work"), (0, 1))],
    )
    return Browser(repo, tmp_path)


def test_projects_panel_marks_selection(tmp_path):
    browser = _browser(tmp_path)
    browser.handle(Input.NEXT)
    fragments = render.projects_fragments(browser, 10)
    assert ("class:selected", "📁 / (root)") in fragments
    browser.handle(Input.DOWN)
    fragments = render.projects_fragments(browser, 10)
    assert ("class:selected", "📁 work") in fragments
    assert ("class:project", "📁 / (root)") in fragments


def test_unfocused_selection_is_dimmed(tmp_path):
    browser = _browser(tmp_path)
    fragments = render.projects_fragments(browser, 10)
    assert ("class:selected.unfocused", "📁 / (root)") in fragments


def test_notes_panel_lists_root_notes_on_root_row(tmp_path):
    browser = _browser(tmp_path)
    text = _text(render.notes_fragments(browser, 10))
    assert "📄 root.md" in text
    assert "todo.md" not in text


def test_notes_panel_labels_relative_to_project(tmp_path):
    browser = _browser(tmp_path)
    browser.state.current_selected_project = 1
    text = _text(render.notes_fragments(browser, 10))
    assert "📄 todo.md" in text
    assert "📄 plan.md" in text
    assert "root.md" not in text


def test_preview_panel_shows_note_lines(tmp_path):
    browser = _browser(tmp_path)
    browser.state.current_selected_project = 1
    browser.reload_preview()
    assert _text(render.preview_fragments(browser, 10)) == "- milk\n- eggs"
    assert _text(render.preview_fragments(browser, 1)) == "- milk"


def test_empty_panels(tmp_path):
    browser = Browser(EntryRepository([], []), tmp_path)
    assert _text(render.projects_fragments(browser, 5)) == "📁 / (root)\n"
    assert _text(render.notes_fragments(browser, 5)) == "No notes found."
    assert _text(render.preview_fragments(browser, 5)) == "Nothing selected."


def test_status_bar_shows_counts_and_focus(tmp_path):
    browser = _browser(tmp_path)
    fragments = render.status_fragments(browser)
    assert ("class:status.screen", " Search ") in fragments
    text = _text(fragments)
    assert "3 notes across 1 projects" in text
    assert render.HELP_TEXT in text


def test_status_bar_prefers_error_banner(tmp_path):
    browser = _browser(tmp_path)
    browser.set_error("Failed to delete work")
    fragments = render.status_fragments(browser)
    assert ("class:error", " Failed to delete work ") in fragments
    assert render.HELP_TEXT not in _text(fragments)


def test_title_highlights_focused_panel(tmp_path):
    browser = _browser(tmp_path)
    browser.state.current_screen = Screen.NOTES
    assert render.title_fragments(browser, Screen.NOTES) == [("class:title.focused", "▶ Notes")]
    assert render.title_fragments(browser, Screen.PREVIEW) == [("class:title", "  Preview")]


def test_render_does_not_mutate_state(tmp_path):
    browser = _browser(tmp_path)
    before = repr(browser.state)
    render.projects_fragments(browser, 3)
    render.notes_fragments(browser, 3)
    render.preview_fragments(browser, 3)
    render.status_fragments(browser)
    render.search_fragments(browser)
    assert repr(browser.state) == before


def test_colors_wrap_plain_output():
    line = f"{render.Colors.GREEN}done{render.Colors.END}"
    assert line == "\033[92mdone\033[0m"
