"""
Formatted text for each panel of the browser.

Every function here only reads the Browser; none of them mutate it.
They return prompt_toolkit (style, text) fragment lists.
"""

from typing import List, Tuple

from prompt_toolkit.styles import Style

from clife.browser import SCREEN_RING, Browser, Screen

Fragments = List[Tuple[str, str]]


# --- Color Constants ---
class Colors:
    """ANSI color codes for output printed outside the full-screen application."""
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    END = '\033[0m'


ROOT_LABEL = "/ (root)"

HELP_TEXT = "Tab: next panel  ↑/↓: move  n: new note  p: new project  d: delete  e: edit  q: quit"


def create_style() -> Style:
    """Create the application styling."""
    return Style.from_dict({
        'search-bar': 'bg:#000000 #ffffff',
        'title': 'fg:#888888',
        'title.focused': 'fg:#00aa00 bold',
        'selected': 'bg:#0055aa #ffffff bold',
        'selected.unfocused': 'bg:#444444 #ffffff',
        'project': 'fg:#00aa00 bold',
        'empty': 'fg:#888888 italic',
        'status': 'bg:#222222 #aaaaaa',
        'status.screen': 'bg:#222222 #00aa00 bold',
        'status.message': 'bg:#222222 #00aa00',
        'error': 'bg:#aa0000 #ffffff bold',
    })


def title_fragments(browser: Browser, screen: Screen) -> Fragments:
    """Panel title, highlighted when the panel has focus."""
    focused = browser.state.current_screen is screen
    style = "class:title.focused" if focused else "class:title"
    marker = "▶ " if focused else "  "
    return [(style, f"{marker}{screen.value}")]


def _selection_style(browser: Browser, screen: Screen) -> str:
    if browser.state.current_screen is screen:
        return "class:selected"
    return "class:selected.unfocused"


def search_fragments(browser: Browser) -> Fragments:
    if browser.state.search_text:
        return [("", browser.state.search_text)]
    if browser.state.current_screen is Screen.SEARCH:
        return []
    return [("class:empty", "Search for a note")]


def projects_fragments(browser: Browser, height: int) -> Fragments:
    """
    Visible part of the project list.

    Args:
        browser: Browser to read from
        height: Number of rows available to the panel
    """
    result: Fragments = []
    _, rows = browser.project_window(height)
    for index, project in rows:
        label = ROOT_LABEL if project.is_root else str(project)
        if index == browser.state.current_selected_project:
            result.append((_selection_style(browser, Screen.PROJECTS), f"📁 {label}"))
        else:
            result.append(("class:project", f"📁 {label}"))
        result.append(("", "\n"))
    return result


def notes_fragments(browser: Browser, height: int) -> Fragments:
    """Visible part of the selected project's notes."""
    if not browser.visible_notes():
        return [("class:empty", "No notes found.")]
    project = browser.selected_project
    result: Fragments = []
    offset, rows = browser.note_window(height)
    for position, (_, note) in enumerate(rows, start=offset):
        if project is None or project.is_root:
            label = str(note)
        else:
            label = note.relative_path.relative_to(project.relative_path).as_posix()
        if position == browser.state.current_selected_note:
            result.append((_selection_style(browser, Screen.NOTES), f"📄 {label}"))
        else:
            result.append(("", f"📄 {label}"))
        result.append(("", "\n"))
    return result


def preview_fragments(browser: Browser, height: int) -> Fragments:
    note = browser.selected_note
    if note is None:
        return [("class:empty", "Nothing selected.")]
    lines = browser.preview_window(height)
    if not lines:
        return [("class:empty", "(empty note)")]
    return [("", "\n".join(lines))]


def status_fragments(browser: Browser) -> Fragments:
    """Status bar: screen ring, counts, then the error banner, a message or key help."""
    repository = browser.repository
    result: Fragments = []
    for screen in SCREEN_RING:
        style = "class:status.screen" if screen is browser.state.current_screen else "class:status"
        result.append((style, f" {screen.value} "))
    result.append(("class:status",
                   f"│ {repository.note_count} notes across {repository.project_count} projects │ "))
    if browser.state.error_message:
        result.append(("class:error", f" {browser.state.error_message} "))
    elif browser.state.status_message:
        result.append(("class:status.message", browser.state.status_message))
    else:
        result.append(("class:status", HELP_TEXT))
    return result
