"""
Full-screen terminal browser.

The prompt_toolkit application only ever mutates the Browser. Keys that
change files end the application with a pending action; the run loop
performs the action with ordinary prompts, rebuilds the catalog when
files changed, and starts the application again.
"""

import logging
from typing import Optional, Tuple

from prompt_toolkit import Application
from prompt_toolkit.application.current import get_app
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout.containers import ConditionalContainer, HSplit, VSplit, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.layout.layout import Layout

from clife import prompts
from clife.actions import (
    CREATE_NOTE,
    CREATE_PROJECT,
    DELETE_NOTE,
    DELETE_PROJECT,
    ActionExecutor,
)
from clife.browser import Browser, Input, Screen
from clife.catalog import EntryRepository
from clife.config import Config
from clife.errors import ActionError, PathError
from clife.render import (
    Colors,
    create_style,
    notes_fragments,
    preview_fragments,
    projects_fragments,
    search_fragments,
    status_fragments,
    title_fragments,
)

logger = logging.getLogger(__name__)

OPEN_NOTE = "open_note"

# Rows taken by everything except the panel bodies
CHROME_HEIGHT = 5

# (action kind, path relative to the root)
PendingAction = Tuple[str, str]


class ClifeApp:
    """Main application class for the clife browser."""

    def __init__(self, config: Config, repository: Optional[EntryRepository] = None):
        self.config = config
        if repository is None:
            repository = EntryRepository.build(config.root_dir, config.ignore_dirs)
        self.browser = Browser(repository, config.root_dir, config.menu_scroll_buffer)
        self.executor = ActionExecutor(config.root_dir, config.editor)
        self.pending: Optional[PendingAction] = None
        self.kb = KeyBindings()
        self._windows = {}
        self._setup_key_bindings()

    @property
    def repository(self) -> EntryRepository:
        return self.browser.repository

    def rebuild(self) -> None:
        """Re-index the root directory and reset the browser's selections."""
        repository = EntryRepository.build(self.config.root_dir, self.config.ignore_dirs)
        self.browser.rebuild(repository)

    def _setup_key_bindings(self) -> None:
        """Set up all key bindings for the application."""
        browser = self.browser
        in_search = Condition(lambda: browser.state.current_screen is Screen.SEARCH)

        def request(event, action: Optional[PendingAction]) -> None:
            if action is not None:
                self.pending = action
                event.app.exit()

        # Quit commands
        @self.kb.add("c-c", eager=True)
        @self.kb.add("c-q", eager=True)
        @self.kb.add("q", filter=~in_search)
        def quit_app(event):
            """Quit the application."""
            browser.handle(Input.QUIT)
            event.app.exit()

        # Navigation
        @self.kb.add("tab")
        def next_panel(event):
            """Focus the next panel."""
            browser.handle(Input.NEXT)
            self._focus_current(event.app.layout)

        @self.kb.add("down")
        def move_down(event):
            """Move selection down."""
            browser.handle(Input.DOWN)

        @self.kb.add("up")
        def move_up(event):
            """Move selection up."""
            browser.handle(Input.UP)

        # File operations
        @self.kb.add("n", filter=~in_search)
        def create_note(event):
            """Create a new note in the selected project."""
            request(event, self.create_note_action())

        @self.kb.add("p", filter=~in_search)
        def create_project(event):
            """Create a new project."""
            request(event, (CREATE_PROJECT, ""))

        @self.kb.add("d", filter=~in_search)
        def delete_entry(event):
            """Delete the selected project or note."""
            request(event, self.delete_action())

        @self.kb.add("e", filter=~in_search)
        @self.kb.add("enter", filter=~in_search)
        def open_note(event):
            """Open the selected note in the editor."""
            note = browser.selected_note
            if note is not None:
                request(event, (OPEN_NOTE, str(note)))

    # --- Pending actions ---

    def create_note_action(self) -> PendingAction:
        project = self.browser.selected_project
        if project is None or project.is_root:
            return (CREATE_NOTE, "")
        return (CREATE_NOTE, str(project))

    def delete_action(self) -> Optional[PendingAction]:
        """Delete the focused entry: the project on the Projects screen, else the note."""
        if self.browser.state.current_screen is Screen.PROJECTS:
            project = self.browser.selected_project
            # The root row stands for the root directory, which is never deleted
            if project is None or project.is_root:
                return None
            return (DELETE_PROJECT, str(project))
        if self.browser.state.current_screen in (Screen.NOTES, Screen.PREVIEW):
            note = self.browser.selected_note
            return (DELETE_NOTE, str(note)) if note is not None else None
        return None

    def perform(self, action: PendingAction) -> None:
        """
        Carry out a pending action outside the full-screen application.

        Action failures are reported in the browser's error banner; the
        catalog is rebuilt whenever files changed.
        """
        kind, target = action
        try:
            if kind == CREATE_NOTE:
                self._create_note(target)
            elif kind == CREATE_PROJECT:
                self._create_project()
            elif kind in (DELETE_NOTE, DELETE_PROJECT):
                self._delete(kind, target)
            elif kind == OPEN_NOTE:
                self._open(target)
            else:
                raise ValueError(f"Unknown action: {kind}")
        except (ActionError, PathError) as e:
            logger.error("%s failed: %s", kind, e)
            print(f"{Colors.RED}✗ {e}{Colors.END}")
            self.browser.set_error(str(e))

    def _create_note(self, project_path: str) -> None:
        where = f"'{project_path}'" if project_path else "the root"
        print(f"{Colors.CYAN}New note in {where}{Colors.END}")
        name = prompts.ask_name("note")
        if name is None:
            self.browser.set_message("Note creation cancelled")
            return
        result = self.executor.create_note(name, project_path)
        print(f"{Colors.GREEN}✓ {result.message}{Colors.END}")
        self.rebuild()
        self.browser.set_message(result.message)
        status = self.executor.open_in_editor(result.path)
        if status != 0:
            self.browser.set_error(f"Editor exited with status {status}")

    def _create_project(self) -> None:
        name = prompts.ask_name("project")
        if name is None:
            self.browser.set_message("Project creation cancelled")
            return
        result = self.executor.create_project(name)
        if result.changed:
            print(f"{Colors.GREEN}✓ {result.message}{Colors.END}")
            self.rebuild()
        else:
            print(f"{Colors.YELLOW}⚠ {result.message}{Colors.END}")
        self.browser.set_message(result.message)

    def _delete(self, kind: str, target: str) -> None:
        if not prompts.confirm_delete(target):
            print(f"{Colors.YELLOW}Deletion cancelled.{Colors.END}")
            self.browser.set_message("Deletion cancelled")
            return
        if kind == DELETE_PROJECT:
            result = self.executor.delete_project(target)
        else:
            result = self.executor.delete_note(target)
        print(f"{Colors.GREEN}✓ {result.message}{Colors.END}")
        self.rebuild()
        self.browser.set_message(result.message)

    def _open(self, target: str) -> None:
        status = self.executor.open_in_editor(target)
        self.browser.reload_preview()
        if status != 0:
            self.browser.set_error(f"Editor exited with status {status}")

    # --- Layout ---

    def _panel_height(self) -> int:
        """Rows available to each panel body in the current terminal."""
        return max(get_app().output.get_size().rows - CHROME_HEIGHT, 1)

    def _focus_current(self, layout: Layout) -> None:
        window = self._windows.get(self.browser.state.current_screen)
        if window is not None:
            layout.focus(window)

    def _panel(self, screen: Screen, body: Window, weight: int) -> HSplit:
        title = Window(FormattedTextControl(lambda: title_fragments(self.browser, screen)), height=1)
        return HSplit([title, body], width=Dimension(weight=weight))

    def _create_layout(self) -> Layout:
        """Create the application layout."""
        browser = self.browser
        in_search = Condition(lambda: browser.state.current_screen is Screen.SEARCH)

        # Search buffer and window
        search_buffer = Buffer(
            document=Document(browser.state.search_text, len(browser.state.search_text)),
            on_text_changed=lambda buff: browser.set_search_text(buff.text),
            multiline=False,
        )
        search_window = Window(
            content=BufferControl(buffer=search_buffer),
            height=1,
            style="class:search-bar"
        )
        search_placeholder = Window(
            content=FormattedTextControl(lambda: search_fragments(browser)),
            height=1,
            style="class:search-bar"
        )

        projects_window = Window(
            FormattedTextControl(lambda: projects_fragments(browser, self._panel_height()),
                                 focusable=True),
        )
        notes_window = Window(
            FormattedTextControl(lambda: notes_fragments(browser, self._panel_height()),
                                 focusable=True),
        )
        preview_window = Window(
            FormattedTextControl(lambda: preview_fragments(browser, self._panel_height()),
                                 focusable=True),
            wrap_lines=False,
        )
        self._windows = {
            Screen.SEARCH: search_window,
            Screen.PROJECTS: projects_window,
            Screen.NOTES: notes_window,
            Screen.PREVIEW: preview_window,
        }

        top_section = HSplit([
            Window(FormattedTextControl("Search Notes (Tab: next panel, Ctrl-Q: quit):"), height=1),
            ConditionalContainer(search_window, filter=in_search),
            ConditionalContainer(search_placeholder, filter=~in_search),
            Window(height=1, char='─'),
        ])

        panels = VSplit([
            self._panel(Screen.PROJECTS, projects_window, 25),
            Window(width=1, char='│'),
            self._panel(Screen.NOTES, notes_window, 25),
            Window(width=1, char='│'),
            self._panel(Screen.PREVIEW, preview_window, 50),
        ])

        status_bar = Window(FormattedTextControl(lambda: status_fragments(browser)),
                            height=1, style="class:status")

        root_container = HSplit([top_section, panels, status_bar])
        return Layout(root_container, focused_element=self._windows[browser.state.current_screen])

    def run(self) -> None:
        """Run the main application loop."""
        while not self.browser.state.exit:
            self.pending = None
            app = Application(
                layout=self._create_layout(),
                key_bindings=self.kb,
                full_screen=True,
                style=create_style(),
            )
            app.run()

            if self.pending is None:
                break
            self.perform(self.pending)
