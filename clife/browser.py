"""
Browser state machine.

Tracks which of the four screens is focused, the selected project and
note, the loaded preview, and the scroll window of each list. One
Browser is driven by exactly one event loop; every input is handled to
completion before the next is read.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from clife.catalog import EntryRepository, Note, Project
from clife.config import DEFAULT_SCROLL_BUFFER

logger = logging.getLogger(__name__)


class Screen(Enum):
    SEARCH = "Search"
    PROJECTS = "Projects"
    NOTES = "Notes"
    PREVIEW = "Preview"


# Order in which the "next" input cycles through the screens
SCREEN_RING: Tuple[Screen, ...] = (Screen.SEARCH, Screen.PROJECTS, Screen.NOTES, Screen.PREVIEW)


class Input(Enum):
    NEXT = "next"
    UP = "up"
    DOWN = "down"
    QUIT = "quit"


def next_screen(screen: Screen, ring: Tuple[Screen, ...] = SCREEN_RING) -> Screen:
    return ring[(ring.index(screen) + 1) % len(ring)]


def wrap_index(index: int, step: int, count: int) -> int:
    """
    Move index by step, wrapping around a list of count items.

    Stepping below 0 lands on count - 1 and stepping past the end lands on 0.
    An empty list always yields 0.
    """
    if count <= 0:
        return 0
    return (index + step) % count


def scroll_offset(selected_index: int, length: int, scroll_buffer: int) -> int:
    """
    First visible row of a list so the cursor keeps scroll_buffer rows of context.

    The top of the list stays pinned while the cursor is within the first
    scroll_buffer rows, and the bottom stays pinned once it is within the
    last scroll_buffer rows. The result never decreases as selected_index
    grows and always lies in [0, max(length - 1, 0)].
    """
    if selected_index < scroll_buffer:
        offset = 0
    elif selected_index <= length - scroll_buffer:
        offset = selected_index - scroll_buffer
    else:
        offset = length - 2 * scroll_buffer
    return max(0, min(offset, length - 1))


def visible_window(selected_index: int, length: int, scroll_buffer: int, height: int) -> int:
    """
    Offset of a window of height rows, nudged so the selected row is inside it.
    """
    offset = scroll_offset(selected_index, length, scroll_buffer)
    if height <= 0 or not 0 <= selected_index < length:
        return offset
    if selected_index >= offset + height:
        offset = selected_index - height + 1
    elif selected_index < offset:
        offset = selected_index
    return max(0, offset)


@dataclass
class BrowserState:
    """Mutable state of one browsing session."""

    current_screen: Screen = Screen.SEARCH
    current_selected_project: int = 0
    current_selected_note: int = 0
    current_preview_lines: List[str] = field(default_factory=list)
    current_preview_line: int = 0
    search_text: str = ""
    status_message: Optional[str] = None
    error_message: Optional[str] = None
    exit: bool = False


class Browser:
    """Handles inputs and keeps the state consistent with the repository."""

    def __init__(self, repository: EntryRepository, root: Path,
                 scroll_buffer: int = DEFAULT_SCROLL_BUFFER):
        self.repository = repository
        self.root = Path(root)
        self.scroll_buffer = scroll_buffer
        self.state = BrowserState()
        self._preview_key: Optional[Path] = None
        self.load_preview()

    # --- Selection helpers ---

    def project_rows(self) -> Tuple[Project, ...]:
        """
        Rows of the projects panel.

        The root comes first, holding the notes that sit directly in it, then
        every directory project in catalog order.
        """
        return self.repository.project_tiers

    @property
    def selected_project(self) -> Optional[Project]:
        rows = self.project_rows()
        index = self.state.current_selected_project
        if 0 <= index < len(rows):
            return rows[index]
        return None

    def visible_notes(self) -> List[Tuple[int, Note]]:
        """Notes of the selected project row as (catalog_index, note) pairs."""
        project = self.selected_project
        if project is None:
            return []
        return self.repository.notes_in(project)

    @property
    def selected_note(self) -> Optional[Note]:
        notes = self.visible_notes()
        index = self.state.current_selected_note
        if 0 <= index < len(notes):
            return notes[index][1]
        return None

    # --- Input handling ---

    def handle(self, event: Input) -> bool:
        """
        Apply one input to the state.

        Returns:
            False once the browser should exit, True otherwise
        """
        self.state.error_message = None
        self.state.status_message = None
        if event is Input.QUIT:
            self.state.exit = True
        elif event is Input.NEXT:
            self.state.current_screen = next_screen(self.state.current_screen)
        elif event in (Input.UP, Input.DOWN):
            self._move(-1 if event is Input.UP else 1)
        return not self.state.exit

    def _move(self, step: int) -> None:
        screen = self.state.current_screen
        if screen is Screen.PROJECTS:
            self.state.current_selected_project = wrap_index(
                self.state.current_selected_project, step, len(self.project_rows()))
            self.load_preview()
        elif screen is Screen.NOTES:
            self.state.current_selected_note = wrap_index(
                self.state.current_selected_note, step, len(self.visible_notes()))
            self.load_preview()
        elif screen is Screen.PREVIEW:
            last = max(len(self.state.current_preview_lines) - 1, 0)
            self.state.current_preview_line = max(0, min(self.state.current_preview_line + step, last))

    def set_search_text(self, text: str) -> None:
        self.state.search_text = text

    def set_message(self, message: str) -> None:
        self.state.status_message = message

    def set_error(self, message: str) -> None:
        logger.warning("%s", message)
        self.state.error_message = message

    # --- Preview ---

    def load_preview(self) -> None:
        """
        Read the selected note into the preview when the selection changed.

        The whole file is read at once. A file that cannot be opened or
        decoded leaves the preview empty and sets the error banner.
        """
        note = self.selected_note
        key = note.relative_path if note else None
        if key == self._preview_key:
            return
        self._preview_key = key
        self.state.current_preview_line = 0
        self.state.current_preview_lines = []
        if note is None:
            return
        path = self.root / note.relative_path
        try:
            with open(path, "r", encoding="utf-8") as f:
                self.state.current_preview_lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            self.set_error(f"Cannot preview {note}: {e}")

    def reload_preview(self) -> None:
        """Re-read the selected note, e.g. after it was edited."""
        self._preview_key = None
        self.load_preview()

    # --- Rebuild ---

    def rebuild(self, repository: EntryRepository) -> None:
        """Swap in a freshly built repository and reset every selection."""
        self.repository = repository
        self.state.current_selected_project = 0
        self.state.current_selected_note = 0
        self._preview_key = None
        self.load_preview()

    # --- Scrolling ---

    def project_window(self, height: int) -> Tuple[int, List[Tuple[int, Project]]]:
        """
        Visible slice of the projects panel.

        Returns:
            (offset, [(project_index, project), ...]) for at most height rows
        """
        projects = list(enumerate(self.project_rows()))
        offset = visible_window(self.state.current_selected_project, len(projects),
                                self.scroll_buffer, height)
        return offset, projects[offset:offset + max(height, 0)]

    def note_window(self, height: int) -> Tuple[int, List[Tuple[int, Note]]]:
        """
        Visible slice of the notes panel.

        Returns:
            (offset, [(note_index, note), ...]) for at most height rows
        """
        notes = self.visible_notes()
        offset = visible_window(self.state.current_selected_note, len(notes),
                                self.scroll_buffer, height)
        return offset, notes[offset:offset + max(height, 0)]

    def preview_window(self, height: int) -> List[str]:
        start = self.state.current_preview_line
        return self.state.current_preview_lines[start:start + max(height, 0)]
