"""One-shot prompts shown between runs of the full-screen browser."""

from pathlib import Path
from typing import Optional, Union

from prompt_toolkit import prompt
from prompt_toolkit.shortcuts import confirm
from prompt_toolkit.validation import ValidationError, Validator

from clife.actions import validate_name
from clife.errors import NameValidationError


class NameValidator(Validator):
    """Rejects names the action executor would refuse, so the user can retype."""

    def validate(self, document):
        try:
            validate_name(document.text)
        except NameValidationError as e:
            raise ValidationError(message=str(e), cursor_position=len(document.text)) from e


def ask_name(kind: str) -> Optional[str]:
    """
    Ask for the name of a new note or project.

    Args:
        kind: "note" or "project", only used in the question

    Returns:
        The validated name, or None if the user cancelled with Ctrl-C/Ctrl-D
    """
    try:
        answer = prompt(f"What would you like to name this {kind}? ",
                        validator=NameValidator(), validate_while_typing=False)
    except (KeyboardInterrupt, EOFError):
        return None
    return validate_name(answer)


def confirm_delete(path: Union[str, Path]) -> bool:
    """Ask the user to confirm deleting path."""
    try:
        return confirm(f"Are you sure you want to delete {path}?")
    except (KeyboardInterrupt, EOFError):
        return False
