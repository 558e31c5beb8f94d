"""
Terminal UI printer with Rich formatting support.

Provides the output surface for aurup:
- Semantic colors via Rich theme (menu numbers, old/new versions, repos)
- Escaped markup spans so callers can compose lines from plain strings
- `::` action headers on stdout, warnings and errors on stderr
- A single-line prompt used by the upgrade menu
"""

from __future__ import annotations

from typing import IO

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme
from wcwidth import wcswidth

THEME = Theme({
    "number_menu": "magenta",
    "old_version": "red",
    "new_version": "bold green",
    "repo": "bold blue",
    "bold": "bold",
    "action": "bold blue",
    "warning": "bold yellow",
    "error": "bold red",
    "dim": "dim",
})


def display_width(text: str) -> int:
    """Return the terminal column width of text.

    wcswidth returns -1 for strings holding control characters; those fall
    back to the character count.
    """
    width = int(wcswidth(text))
    return width if width >= 0 else len(text)


class Printer:
    """Terminal output with Rich formatting.

    Args:
        use_plain: Disable colors and styles entirely.
        file: Optional stream for regular output (defaults to stdout).
        err_file: Optional stream for warnings and errors (defaults to stderr).
    """

    def __init__(
        self,
        use_plain: bool = False,
        file: IO[str] | None = None,
        err_file: IO[str] | None = None,
    ):
        self.use_plain = use_plain
        color_system = None if use_plain else "auto"
        self.console = Console(
            theme=THEME,
            file=file,
            highlight=False,
            color_system=color_system,
        )
        self.err_console = Console(
            theme=THEME,
            file=err_file,
            stderr=err_file is None,
            highlight=False,
            color_system=color_system,
        )

    def to_stderr(self) -> Printer:
        """Return a printer whose regular output also goes to the error stream."""
        err = self.err_console.file
        return Printer(use_plain=self.use_plain, file=err, err_file=err)

    # === Span helpers ===

    @staticmethod
    def escape(text: str) -> str:
        """Escape text so Rich prints it literally."""
        return escape(text)

    def markup(self, style: str, text: str) -> str:
        """Return text as an escaped markup span in the given theme style."""
        if not text:
            return ""
        return f"[{style}]{escape(text)}[/{style}]"

    # === Output ===

    def line(self, markup: str) -> None:
        """Print one line of pre-built markup without wrapping."""
        self.console.print(markup, soft_wrap=True)

    def action(self, text: str) -> None:
        """Print an action header: `:: text`."""
        self.console.print(
            f"[action]::[/action] [bold]{escape(text)}[/bold]",
            soft_wrap=True,
        )

    def info(self, text: str) -> None:
        """Print plain informational text."""
        self.console.print(escape(text), soft_wrap=True)

    def warn(self, text: str) -> None:
        """Print `warning: text` to stderr."""
        self.err_console.print(f"[warning]warning:[/warning] {escape(text)}", soft_wrap=True)

    def error(self, text: str) -> None:
        """Print `error: text` to stderr."""
        self.err_console.print(f"[error]error:[/error] {escape(text)}", soft_wrap=True)

    def prompt(self, text: str) -> str:
        """Read one line of input after a `:: text` prompt.

        EOFError and KeyboardInterrupt propagate to the caller.
        """
        return self.console.input(f"[action]::[/action] [bold]{escape(text)}[/bold] ")
