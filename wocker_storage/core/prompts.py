"""Interactive input used to fill in missing storage fields."""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Tuple

import typer
from rich.console import Console

from wocker_storage.core.logger import console as default_console

# Returns an error message for invalid input, None when the value is accepted
Validator = Callable[[str], Optional[str]]


class Prompter(ABC):
    """Source of interactive answers for the storage manager."""

    @abstractmethod
    def ask_text(
        self,
        message: str,
        validator: Optional[Validator] = None,
        default: Optional[str] = None,
        hide_input: bool = False,
    ) -> str:
        pass

    @abstractmethod
    def ask_select(self, message: str, options: List[Tuple[str, Any]]) -> Any:
        """Ask to pick one of (label, value) options and return the value."""
        pass

    @abstractmethod
    def ask_confirm(self, message: str, default: bool = False) -> bool:
        pass


class TyperPrompter(Prompter):
    """Terminal prompts via typer, re-asking until the validator accepts."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or default_console

    def ask_text(
        self,
        message: str,
        validator: Optional[Validator] = None,
        default: Optional[str] = None,
        hide_input: bool = False,
    ) -> str:
        while True:
            value = typer.prompt(message.rstrip(":"), default=default, hide_input=hide_input)
            value = str(value)
            if not hide_input:
                value = value.strip()
            error = validator(value) if validator else None
            if error is None:
                return value
            self.console.print(f"[red]{error}[/red]")

    def ask_select(self, message: str, options: List[Tuple[str, Any]]) -> Any:
        self.console.print(message)
        for index, (label, _) in enumerate(options, start=1):
            self.console.print(f"  [cyan]{index}[/cyan]) {label}")

        while True:
            choice = typer.prompt("Choose", default="1")
            if choice.isdigit() and 1 <= int(choice) <= len(options):
                return options[int(choice) - 1][1]
            for label, value in options:
                if choice.lower() in (label.lower(), str(getattr(value, "value", value)).lower()):
                    return value
            self.console.print(f"[red]Invalid choice: {choice}[/red]")

    def ask_confirm(self, message: str, default: bool = False) -> bool:
        return typer.confirm(message.rstrip(":"), default=default)
