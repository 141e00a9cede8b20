"""Interactive terminal input: free text, passwords, selections, yes/no.

Sensitive values are read with getpass and never echoed.
"""

import getpass
from typing import List, Optional, Sequence

from ..vault.exceptions import InputAborted, MismatchError
from .output import Console

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}


def prompt(
    message: str,
    require_confirmation: bool = False,
    is_sensitive: bool = False,
    console: Optional[Console] = None,
) -> str:
    """
    Read one value from the terminal.

    Args:
        message: Prompt shown to the user (hidden in quiet mode)
        require_confirmation: Ask a second time and compare the answers
        is_sensitive: Read without echo (getpass)
        console: Output settings; defaults to a non-quiet Console

    Raises:
        MismatchError: The confirmation does not match the first answer
        InputAborted: Input ended (EOF) before an answer was given
    """
    console = console or Console()
    value = _read(console.prompt_text(message), is_sensitive)
    if require_confirmation:
        confirmation = _read(console.prompt_text("Confirmation"), is_sensitive)
        if confirmation != value:
            raise MismatchError("The answers don't match.")
    return value


def confirm(message: str, console: Optional[Console] = None) -> bool:
    """Ask a yes/no question until the answer is one of y/yes/n/no."""
    console = console or Console()
    while True:
        answer = _read(console.prompt_text(message), False).strip().lower()
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        console.error("Please type yes or no")


def select_one(message: str, options: Sequence[str], console: Optional[Console] = None) -> str:
    """Show a numbered list of ``options`` and return the one picked."""
    console = console or Console()
    _show_options(options, console)
    while True:
        answer = _read(console.prompt_text(message), False).strip()
        picked = _parse_choices(answer, len(options))
        if picked is not None and len(picked) == 1:
            return options[picked[0]]
        console.error(f"Please enter a number between 1 and {len(options)}")


def select_many(
    message: str,
    options: Sequence[str],
    console: Optional[Console] = None,
) -> List[str]:
    """Show a numbered list and return every option picked (comma-separated numbers)."""
    console = console or Console()
    _show_options(options, console)
    while True:
        answer = _read(console.prompt_text(f"{message} (comma-separated)"), False).strip()
        if not answer:
            return []
        picked = _parse_choices(answer, len(options))
        if picked is not None:
            return [options[index] for index in picked]
        console.error(f"Please enter numbers between 1 and {len(options)}, separated by commas")


def _read(text: str, is_sensitive: bool) -> str:
    try:
        if is_sensitive:
            return getpass.getpass(text)
        return input(text)
    except EOFError:
        raise InputAborted("Input aborted") from None


def _show_options(options: Sequence[str], console: Console) -> None:
    if not options:
        raise ValueError("Nothing to select from")
    for number, option in enumerate(options, start=1):
        print(f"  {number}) {option}", file=console.stdout)


def _parse_choices(answer: str, count: int) -> Optional[List[int]]:
    """Turn "2, 3" into zero-based indexes, de-duplicated in order; None if invalid."""
    indexes: List[int] = []
    for part in answer.split(","):
        part = part.strip()
        if not part.isdigit():
            return None
        index = int(part) - 1
        if not 0 <= index < count:
            return None
        if index not in indexes:
            indexes.append(index)
    return indexes
