from __future__ import annotations

from typing import IO, Optional

from rich.console import Console
from rich.filesize import decimal
from rich.theme import Theme

INDENT_SIZE = 2

THEME = Theme(
    {
        "comment": "yellow",
        "info": "green",
    }
)


def make_console(file: Optional[IO[str]] = None, *, stderr: bool = False) -> Console:
    """Console with soft wrap so long paths and hashes are never folded."""
    return Console(file=file, stderr=stderr, theme=THEME, soft_wrap=True)


def format_size(size: int) -> str:
    return decimal(size)


class LinePrinter:
    """Writes one line per call, optionally indented by depth."""

    def __init__(self, console: Console):
        self.console = console

    def line(self, message: str = "", *, depth: int = 0, indent: bool = False) -> None:
        prefix = " " * (depth * INDENT_SIZE) if indent else ""
        self.console.print(prefix + message, highlight=False, emoji=False)

    def verbatim(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, emoji=False)
