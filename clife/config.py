"""
Runtime configuration for clife.

The root directory comes from the CLIFE_ROOT_DIR environment variable and
is required. A small optional JSON file can tune the menu scroll buffer
and the editor; a missing or broken file just means defaults.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from clife.errors import ConfigError

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
ROOT_ENV_VAR = "CLIFE_ROOT_DIR"
CONFIG_ENV_VAR = "CLIFE_CONFIG"
CONFIG_FILE = Path("~/.clife_config.json")
DEFAULT_EDITOR = "vim"
DEFAULT_SCROLL_BUFFER = 5
NOTE_EXTENSION = ".md"
IGNORE_DIRS: Tuple[str, ...] = (".git", "build")


@dataclass
class Config:
    """All settings the user can influence."""

    # Where everything is stored locally
    root_dir: Path
    # Directory names skipped while indexing
    ignore_dirs: Tuple[str, ...] = IGNORE_DIRS
    # Rows kept visible above/below the cursor before a list scrolls
    menu_scroll_buffer: int = DEFAULT_SCROLL_BUFFER
    editor: str = DEFAULT_EDITOR


def load_settings(path: Path) -> Dict[str, Any]:
    """
    Load optional settings from a JSON file.

    Args:
        path: Location of the settings file

    Returns:
        The decoded settings, or an empty dict if the file is missing or invalid.
    """
    path = path.expanduser()
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return {}
    return data


def _scroll_buffer(settings: Mapping[str, Any]) -> int:
    value = settings.get("scroll_buffer", DEFAULT_SCROLL_BUFFER)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("Invalid scroll_buffer %r, using %d", value, DEFAULT_SCROLL_BUFFER)
        return DEFAULT_SCROLL_BUFFER
    return value


def get_editor(environ: Mapping[str, str], settings: Mapping[str, Any]) -> str:
    """
    Get the preferred text editor.

    Returns:
        $EDITOR if set, else the settings file's editor, else DEFAULT_EDITOR
    """
    editor = environ.get("EDITOR") or settings.get("editor")
    if isinstance(editor, str) and editor.strip():
        return editor.strip()
    return DEFAULT_EDITOR


def load_config(environ: Optional[Mapping[str, str]] = None,
                settings_path: Optional[Path] = None) -> Config:
    """
    Build the Config from the environment and the optional settings file.

    Args:
        environ: Environment mapping, defaults to os.environ
        settings_path: Settings file, defaults to $CLIFE_CONFIG or CONFIG_FILE

    Raises:
        ConfigError: if the root directory variable is not set
    """
    if environ is None:
        environ = os.environ
    root = environ.get(ROOT_ENV_VAR, "").strip()
    if not root:
        raise ConfigError(f"Please set the {ROOT_ENV_VAR} environment variable.")

    if settings_path is None:
        settings_path = Path(environ.get(CONFIG_ENV_VAR) or CONFIG_FILE)
    settings = load_settings(settings_path)

    return Config(
        root_dir=Path(root).expanduser(),
        menu_scroll_buffer=_scroll_buffer(settings),
        editor=get_editor(environ, settings),
    )


def ensure_root(config: Config) -> bool:
    """
    Create the root directory if it does not exist yet.

    Returns:
        True if the directory was created, False if it was already there

    Raises:
        ConfigError: if the root exists but is not a directory, or cannot be created
    """
    root = config.root_dir
    if root.is_dir():
        return False
    if root.exists():
        raise ConfigError(f"{root} exists but is not a directory")
    try:
        root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Could not create {root}: {e}") from e
    logger.info("Created root directory %s", root)
    return True
