#!/usr/bin/env python3
"""
clife - A Terminal User Interface for a tree of notes

Indexes every file (note) and directory (project) under a root directory
and lets you browse, preview, create and delete them from the terminal.

Usage:
    CLIFE_ROOT_DIR=~/notes clife

Configuration:
    - CLIFE_ROOT_DIR: root directory, required; created if missing
    - Settings file: ~/.clife_config.json (or $CLIFE_CONFIG), keys
      "scroll_buffer" and "editor"
    - Editor: $EDITOR, else the settings file, else vim
    - Log file: ~/.clife.log (or $CLIFE_LOG_FILE)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from clife.app import ClifeApp
from clife.catalog import EntryRepository
from clife.config import ensure_root, load_config
from clife.errors import CatalogError, ConfigError, PathError
from clife.render import Colors

LOG_ENV_VAR = "CLIFE_LOG_FILE"
LOG_FILE = Path("~/.clife.log")

logger = logging.getLogger("clife")


def setup_logging(log_file: Optional[Path] = None) -> None:
    """Send log records to a file so they never draw over the full-screen UI."""
    if log_file is None:
        log_file = Path(os.environ.get(LOG_ENV_VAR) or LOG_FILE)
    logging.basicConfig(
        filename=os.fspath(log_file.expanduser()),
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> int:
    """Main entry point for clife."""
    setup_logging()
    logger.info("clife startup")
    try:
        config = load_config()
        if ensure_root(config):
            print(f"{Colors.YELLOW}No clife folder detected, {config.root_dir} directory created!{Colors.END}")
        repository = EntryRepository.build(config.root_dir, config.ignore_dirs)
    except (ConfigError, CatalogError, PathError) as e:
        logger.error("Startup failed: %s", e)
        print(f"{Colors.RED}Error: {e}{Colors.END}", file=sys.stderr)
        return 1

    print(f"{Colors.GREEN}Found {repository.note_count} notes across "
          f"{repository.project_count} projects!{Colors.END}")

    try:
        ClifeApp(config, repository).run()
    except (CatalogError, PathError) as e:
        logger.error("Rebuilding the catalog failed: %s", e)
        print(f"{Colors.RED}Error: {e}{Colors.END}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    print("\nGoodbye! 👋")
    return 0


if __name__ == "__main__":
    sys.exit(main())
