"""
Catalog of notes and projects under the root directory.

A note is any file under the root, a project is any directory. Both are
kept in filesystem enumeration order, which is not sorted.
"""

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from clife.errors import CatalogError, PathError

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# Relative path of the pseudo-project standing for the root itself
ROOT_PATH = Path(".")


@dataclass(frozen=True)
class Note:
    """A single note file, identified by its path relative to the root."""

    relative_path: Path

    @property
    def filename(self) -> str:
        return self.relative_path.name

    def __str__(self) -> str:
        return self.relative_path.as_posix()


@dataclass(frozen=True)
class Project:
    """A directory under the root together with the notes beneath it."""

    relative_path: Path
    note_indices: Tuple[int, ...] = ()

    @property
    def name(self) -> str:
        return self.relative_path.name

    @property
    def is_root(self) -> bool:
        return self.relative_path == ROOT_PATH

    def contains(self, note: Note) -> bool:
        """True if the note lives directly or transitively under this project."""
        parts = self.relative_path.parts
        note_parts = note.relative_path.parts
        return len(note_parts) > len(parts) and note_parts[:len(parts)] == parts

    def __str__(self) -> str:
        return self.relative_path.as_posix()


def relative_to_root(path: PathLike, root: PathLike) -> Path:
    """
    Strip the root prefix from a path.

    Raises:
        PathError: if path is not under root
    """
    try:
        return Path(path).relative_to(root)
    except ValueError as e:
        raise PathError(f"{path} is not under {root}") from e


def is_ignored(path: PathLike, ignore_names: Iterable[str]) -> bool:
    """True if any component of path exactly matches an ignored name."""
    ignored = set(ignore_names)
    return any(part in ignored for part in Path(path).parts)


def _directory_key(path: str) -> Tuple[int, int]:
    try:
        info = os.stat(path)
    except OSError as e:
        raise CatalogError(f"Cannot read directory {path}: {e}") from e
    return info.st_dev, info.st_ino


def _scan(directory: str) -> Iterator[os.DirEntry]:
    try:
        return os.scandir(directory)
    except OSError as e:
        raise CatalogError(f"Cannot read directory {directory}: {e}") from e


def build(root: PathLike, ignore_names: Sequence[str]) -> Tuple[List[Note], List[Project]]:
    """
    Walk root depth-first and collect its notes and projects.

    Directories are entered in the order they are enumerated, exactly as a
    recursive walk would, but using an explicit stack so deep trees cannot
    exhaust the call stack. A directory reached a second time, for
    example through a symlink loop, is skipped.

    Args:
        root: Directory to index
        ignore_names: Directory names to skip along with everything beneath them

    Returns:
        (notes, projects), each project carrying its note_indices

    Raises:
        CatalogError: if any directory or entry cannot be read
        PathError: if an entry turns out not to live under root
    """
    root_path = os.fspath(root)
    notes: List[Note] = []
    projects: List[Project] = []

    visited = {_directory_key(root_path)}
    stack = [_scan(root_path)]
    try:
        while stack:
            try:
                entry = next(stack[-1])
            except StopIteration:
                stack.pop().close()
                continue
            except OSError as e:
                raise CatalogError(f"Failed to read an entry under {root_path}: {e}") from e

            relative_path = relative_to_root(entry.path, root_path)
            try:
                entry_is_dir = entry.is_dir()
            except OSError as e:
                raise CatalogError(f"Failed to read {entry.path}: {e}") from e

            if entry_is_dir:
                if is_ignored(os.path.abspath(entry.path), ignore_names):
                    continue
                key = _directory_key(entry.path)
                if key in visited:
                    logger.warning("Skipping %s: directory already indexed", entry.path)
                    continue
                visited.add(key)
                projects.append(Project(relative_path))
                stack.append(_scan(entry.path))
            else:
                notes.append(Note(relative_path))
    finally:
        for iterator in stack:
            iterator.close()

    projects = [
        replace(project, note_indices=tuple(
            index for index, note in enumerate(notes) if project.contains(note)
        ))
        for project in projects
    ]
    logger.info("Indexed %d notes across %d projects under %s",
                len(notes), len(projects), root_path)
    return notes, projects


class EntryRepository:
    """Read-only result of one catalog build."""

    def __init__(self, notes: Sequence[Note], projects: Sequence[Project]):
        self.notes: Tuple[Note, ...] = tuple(notes)
        self.projects: Tuple[Project, ...] = tuple(projects)
        # Notes directly in the root belong to no directory project
        self.root_project = Project(ROOT_PATH, tuple(
            index for index, note in enumerate(self.notes) if len(note.relative_path.parts) == 1
        ))

    @classmethod
    def build(cls, root: PathLike, ignore_names: Sequence[str]) -> "EntryRepository":
        notes, projects = build(root, ignore_names)
        return cls(notes, projects)

    @property
    def note_count(self) -> int:
        return len(self.notes)

    @property
    def project_count(self) -> int:
        return len(self.projects)

    @property
    def project_tiers(self) -> Tuple[Project, ...]:
        """The root pseudo-project followed by every directory project."""
        return (self.root_project,) + self.projects

    def notes_in(self, project: Project) -> List[Tuple[int, Note]]:
        """(note_index, note) pairs listed by a project's note_indices."""
        return [(i, self.notes[i]) for i in project.note_indices]

    def notes_for_project(self, index: int) -> List[Tuple[int, Note]]:
        """
        Get the notes belonging to a project.

        Args:
            index: Position of the project in self.projects

        Returns:
            (note_index, note) pairs in catalog order, empty if index is out of range
        """
        if not 0 <= index < len(self.projects):
            return []
        return self.notes_in(self.projects[index])

    def __repr__(self) -> str:
        return f"EntryRepository(notes={len(self.notes)}, projects={len(self.projects)})"
