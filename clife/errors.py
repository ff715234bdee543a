"""Exceptions raised by clife."""


class ClifeError(Exception):
    """Base class for every error clife raises on purpose."""


class ConfigError(ClifeError):
    """The environment or root directory is unusable."""


class PathError(ClifeError):
    """A path does not live under the root directory."""


class CatalogError(ClifeError):
    """The root directory tree could not be read."""


class ActionError(ClifeError):
    """A create, delete or editor action failed."""


class NameValidationError(ActionError, ValueError):
    """A proposed note or project name was rejected."""
