"""Console output for the deploy step.

Services print progress through ``ConsoleProtocol`` so they stay testable:
``RichConsole`` writes to the CI log, ``MockConsole`` records lines in tests.
Debug lines are only shown when verbose logging is enabled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Line styles; the value is the Rich theme entry used to render it."""

    DEFAULT = "none"
    SUCCESS = "gplay.success"
    ERROR = "gplay.error"
    WARNING = "gplay.warning"
    INFO = "gplay.info"
    DIM = "gplay.dim"
    DEBUG = "gplay.debug"
    HEADER = "gplay.header"

    def __str__(self) -> str:
        return self.name.lower()


_THEME = {
    Style.SUCCESS.value: "green",
    Style.ERROR.value: "red bold",
    Style.WARNING.value: "yellow",
    Style.INFO.value: "cyan",
    Style.DIM.value: "dim",
    Style.DEBUG.value: "dim italic",
    Style.HEADER.value: "blue bold",
}

# Label printed before the message, and the style of the label only.
_PREFIXES = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def debug(self, message: str) -> None:
        """Print only when verbose logging is on."""
        ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


class RichConsole:
    """Console backed by Rich.

    Errors go to stderr so CI logs keep them even when stdout is captured.
    Messages are never parsed as markup: paths and API errors contain
    ``[brackets]``.
    """

    def __init__(self, *, verbose: bool = False) -> None:
        from rich.console import Console
        from rich.theme import Theme

        self.verbose = verbose
        theme = Theme(_THEME)
        self._out = Console(theme=theme, highlight=False)
        self._err = Console(theme=theme, highlight=False, stderr=True)

    def _emit(self, message: str, style: Style, *, stderr: bool = False) -> None:
        target = self._err if stderr else self._out
        prefix = _PREFIXES.get(style)
        if prefix is None:
            target.print(message, style=style.value, markup=False)
            return
        target.print(prefix, style=style.value, end=" ", markup=False)
        target.print(message, markup=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._emit(message, style)

    def success(self, message: str) -> None:
        self._emit(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._emit(message, Style.ERROR, stderr=True)

    def warning(self, message: str) -> None:
        self._emit(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._emit(message, Style.INFO)

    def debug(self, message: str) -> None:
        if self.verbose:
            self._emit(message, Style.DEBUG)

    def header(self, message: str) -> None:
        self._out.print()
        self._emit(message, Style.HEADER)

    def newline(self) -> None:
        self._out.print()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


@dataclass
class MockConsole:
    """Records every line, prefixed the way ``RichConsole`` prints it."""

    verbose: bool = True
    outputs: list[OutputRecord] = field(default_factory=list)

    def _record(self, message: str, style: Style) -> None:
        prefix = _PREFIXES.get(style)
        self.outputs.append(OutputRecord(f"{prefix} {message}" if prefix else message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._record(message, Style.SUCCESS)

    def error(self, message: str) -> None:
        self._record(message, Style.ERROR)

    def warning(self, message: str) -> None:
        self._record(message, Style.WARNING)

    def info(self, message: str) -> None:
        self._record(message, Style.INFO)

    def debug(self, message: str) -> None:
        if self.verbose:
            self._record(message, Style.DEBUG)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(o.style is style for o in self.outputs)

    def has_error(self) -> bool:
        return self.count(Style.ERROR) > 0

    def has_warning(self) -> bool:
        return self.count(Style.WARNING) > 0
