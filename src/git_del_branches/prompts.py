"""Operator prompts."""

from typing import Protocol, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt


class OperationCancelled(Exception):
    """The operator aborted a prompt."""


class Prompter(Protocol):
    """What the interactive flow needs from the terminal."""

    def select(self, message: str, options: Sequence[str]) -> list[int]:
        """Let the operator pick options, returns their indices in list order."""
        ...

    def confirm(self, message: str, default: bool = False) -> bool: ...

    def ask(self, message: str, password: bool = False) -> str: ...


def parse_selection(text: str, count: int) -> list[int]:
    """Parse a selection such as ``1,3-5`` into zero-based indices.

    ``all`` or ``*`` select everything and a blank answer selects nothing.
    Indices are returned sorted and without duplicates.

    Raises:
        ValueError: If the text is not a valid selection for ``count`` options
    """
    text = text.strip()
    if not text:
        return []
    if text.lower() in ("all", "*"):
        return list(range(count))

    chosen: set[int] = set()
    for part in text.replace(" ", ",").split(","):
        if not part:
            continue
        start_text, sep, end_text = part.partition("-")
        try:
            start = int(start_text)
            end = int(end_text) if sep else start
        except ValueError:
            raise ValueError(f"'{part}' is not a number or a range") from None
        if start > end:
            raise ValueError(f"Range '{part}' is backwards")
        if start < 1 or end > count:
            raise ValueError(f"'{part}' is outside 1-{count}")
        chosen.update(range(start - 1, end))
    return sorted(chosen)


class ConsolePrompter:
    """Prompts on a rich console.

    Ctrl-C and end of input at any prompt raise OperationCancelled.
    """

    def __init__(self, console: Console) -> None:
        self.console = console

    def select(self, message: str, options: Sequence[str]) -> list[int]:
        self.console.print(f"[bold]{escape(message)}[/bold]")
        width = len(str(len(options)))
        for number, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{number:>{width}}[/cyan]  {escape(option)}")

        while True:
            answer = self._ask(
                Prompt,
                "Branches to delete ([cyan]1,3-5[/cyan], [cyan]all[/cyan], empty for none)",
                default="",
                show_default=False,
            )
            try:
                return parse_selection(answer, len(options))
            except ValueError as err:
                self.console.print(f"[red]Invalid selection:[/red] {escape(str(err))}")

    def confirm(self, message: str, default: bool = False) -> bool:
        return self._ask(Confirm, escape(message), default=default)

    def ask(self, message: str, password: bool = False) -> str:
        return self._ask(Prompt, escape(message), password=password)

    def _ask(self, prompt_type, message: str, **kwargs):
        try:
            return prompt_type.ask(message, console=self.console, **kwargs)
        except (KeyboardInterrupt, EOFError) as err:
            self.console.print()
            raise OperationCancelled() from err
