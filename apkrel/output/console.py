"""Console output abstraction.

Services report progress through ``ConsoleProtocol`` rather than printing
directly, so the publish pipeline can be driven against ``MockConsole`` in
tests and ``RichConsole`` on a terminal or CI log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None:
        """Print a diagnostic line; only shown in verbose mode."""
        ...


class RichConsole:
    """Console implementation using Rich.

    ``soft_wrap`` is enabled so long URLs and paths stay on one line and
    remain greppable in CI logs.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        # Import Rich lazily to avoid import-time dependency
        from rich.console import Console

        self._console = Console(soft_wrap=True, highlight=False)
        self._verbose = verbose
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        # markup=False: file names and release notes may contain [brackets].
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._prefixed("OK", "green", message)

    def error(self, message: str) -> None:
        self._prefixed("error:", "red bold", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self.print(message, Style.DIM)

    def _prefixed(self, prefix: str, style: str, message: str) -> None:
        from rich.text import Text

        line = Text(prefix, style=style)
        line.append(" ")
        line.append(message)
        self._console.print(line)


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing.

    Debug lines are always captured, regardless of verbosity.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"OK {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def debug(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.DIM))

    # Test helper methods

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def last(self) -> str:
        """Most recent non-empty message."""
        for o in reversed(self.outputs):
            if o.message:
                return o.message
        return ""

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]
