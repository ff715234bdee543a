"""clife - browse, preview, create and delete notes from the terminal."""

__version__ = "0.1.0"
