from __future__ import annotations

from gplay.output.console import ConsoleProtocol, RichConsole


def build_console(*, verbose: bool) -> ConsoleProtocol:
    return RichConsole(verbose=verbose)
