"""Error presentation utilities.

Centralized error formatting and exit code mapping for the deploy command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from gplay.core.errors import ErrorCode
from gplay.output.console import Style
from gplay.services.publish.config import ConfigError
from gplay.services.publish.errors import PublishError

if TYPE_CHECKING:
    from gplay.output.console import ConsoleProtocol

__all__ = [
    "config_error_exit_code",
    "print_config_error",
    "print_publish_error",
    "publish_error_exit_code",
]


def print_publish_error(error: PublishError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        for line in error.hint.splitlines():
            console.print(f"hint: {line}", Style.DIM)


def publish_error_exit_code(error: PublishError) -> int:
    match error.kind:
        case "invalid_input":
            return int(ErrorCode.USER_ERROR)
        case "key_download_failed" | "auth_failed":
            return int(ErrorCode.ENV_ERROR)
        case "io_failed":
            return int(ErrorCode.IO_ERROR)
        case "network_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case _:
            return int(ErrorCode.PUBLISH_ERROR)


def print_config_error(error: ConfigError, console: ConsoleProtocol) -> None:
    console.error(f"Couldn't create config: {error.message}")
    if error.field:
        console.print(f"input: {error.field}", Style.DIM)


def config_error_exit_code(error: ConfigError) -> int:
    del error
    return int(ErrorCode.USER_ERROR)
