"""
Filesystem actions: create and delete notes and projects, open the editor.

Every successful mutation invalidates the catalog; callers rebuild the
EntryRepository whenever an ActionResult reports ``changed``.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Union

from clife.config import DEFAULT_EDITOR, NOTE_EXTENSION
from clife.errors import ActionError, NameValidationError, PathError

logger = logging.getLogger(__name__)

# Path separators, shell metacharacters, quotes and punctuation
INVALID_NAME_CHARS: FrozenSet[str] = frozenset("/\\\"'*;-?[]()~!${}<>#@&|`")

CREATE_NOTE = "create_note"
CREATE_PROJECT = "create_project"
DELETE_NOTE = "delete_note"
DELETE_PROJECT = "delete_project"


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action."""

    kind: str
    path: Path
    changed: bool
    message: str


def validate_name(name: str) -> str:
    """
    Validate a proposed note or project name.

    Args:
        name: Raw user input

    Returns:
        The name with surrounding whitespace removed

    Raises:
        NameValidationError: if the name is empty or contains a disallowed character
    """
    cleaned = name.strip()
    if not cleaned:
        raise NameValidationError("Name is empty")
    bad = sorted({ch for ch in cleaned if ch in INVALID_NAME_CHARS or ch.isspace()})
    if bad:
        shown = " ".join(repr(ch) for ch in bad)
        raise NameValidationError(f"Name contains invalid characters: {shown}")
    if set(cleaned) == {"."}:
        raise NameValidationError(f"'{cleaned}' is not a usable name")
    return cleaned


def is_name_valid(name: str) -> bool:
    try:
        validate_name(name)
    except NameValidationError:
        return False
    return True


class ActionExecutor:
    """Runs actions against the files under one root directory."""

    def __init__(self, root: Union[str, Path], editor: str = DEFAULT_EDITOR):
        self.root = Path(root)
        self.editor = editor

    def _resolve(self, relative_path: Union[str, Path]) -> Path:
        """Join relative_path onto the root, refusing anything that escapes it."""
        root = os.path.abspath(self.root)
        target = os.path.normpath(os.path.join(root, relative_path))
        if os.path.commonpath([root, target]) != root or target == root:
            raise PathError(f"'{relative_path}' is not inside {self.root}")
        return self.root / relative_path

    def create_note(self, name: str, project_path: Union[str, Path] = "") -> ActionResult:
        """
        Create an empty note file in a project.

        The file is named ``<name>.md``; if that exists, ``<name>_1.md``,
        ``<name>_2.md`` and so on are tried until a free name is found.
        Existing files are never overwritten.

        Args:
            name: Note name without extension
            project_path: Project directory relative to the root, "" for the root itself

        Raises:
            NameValidationError: for a rejected name
            ActionError: if the project does not exist or the file cannot be created
        """
        name = validate_name(name)
        project = Path(project_path)
        folder = self.root if project == Path(".") else self._resolve(project)
        if not folder.is_dir():
            raise ActionError(f"Project '{project_path}' does not exist")

        suffix = 0
        while True:
            filename = f"{name}{NOTE_EXTENSION}" if suffix == 0 else f"{name}_{suffix}{NOTE_EXTENSION}"
            note_path = folder / filename
            try:
                with open(note_path, "x", encoding="utf-8"):
                    pass
            except FileExistsError:
                logger.debug("%s already exists, trying again", note_path)
                suffix += 1
                continue
            except OSError as e:
                raise ActionError(f"Could not create {note_path}: {e}") from e
            break

        logger.info("Created note %s", note_path)
        return ActionResult(CREATE_NOTE, note_path, True, f"New note created: {filename}")

    def create_project(self, name: str) -> ActionResult:
        """
        Create a project directory directly under the root.

        An existing directory of the same name is left untouched and
        reported as already existing.

        Raises:
            NameValidationError: for a rejected name
            ActionError: if the directory cannot be created
        """
        name = validate_name(name)
        project_path = self.root / name
        if project_path.exists():
            logger.info("Project %s already exists", project_path)
            return ActionResult(CREATE_PROJECT, project_path, False,
                                f"Project '{name}' already exists")
        try:
            project_path.mkdir()
        except OSError as e:
            raise ActionError(f"Could not create project {project_path}: {e}") from e
        logger.info("Created project %s", project_path)
        return ActionResult(CREATE_PROJECT, project_path, True, f"New project created: {name}")

    def delete(self, relative_path: Union[str, Path], kind: str = DELETE_NOTE) -> ActionResult:
        """
        Delete a note file or a whole project directory.

        Directories are removed recursively with everything inside them.

        Raises:
            PathError: if the path is the root or lies outside it
            ActionError: if the deletion fails
        """
        full_path = self._resolve(relative_path)
        try:
            if full_path.is_dir() and not full_path.is_symlink():
                shutil.rmtree(full_path)
            else:
                full_path.unlink()
        except OSError as e:
            raise ActionError(f"Failed to delete {full_path}: {e}") from e
        logger.info("Deleted %s", full_path)
        return ActionResult(kind, full_path, True, f"Deleted {relative_path}")

    def delete_note(self, relative_path: Union[str, Path]) -> ActionResult:
        return self.delete(relative_path, DELETE_NOTE)

    def delete_project(self, relative_path: Union[str, Path]) -> ActionResult:
        return self.delete(relative_path, DELETE_PROJECT)

    def open_in_editor(self, note_path: Union[str, Path]) -> int:
        """
        Open a note in the editor and wait for it to exit.

        Args:
            note_path: Absolute path, or a path relative to the root

        Returns:
            The editor's exit status

        Raises:
            ActionError: if the editor cannot be started
        """
        path = Path(note_path)
        if not path.is_absolute():
            path = self.root / path
        command = self.editor.split() + [os.fspath(path)]
        try:
            completed = subprocess.run(command)
        except OSError as e:
            raise ActionError(f"Could not start editor '{self.editor}': {e}") from e
        logger.info("Editor %s exited with status %d", self.editor, completed.returncode)
        return completed.returncode
