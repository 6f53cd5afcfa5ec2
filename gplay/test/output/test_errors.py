from __future__ import annotations

import pytest

from gplay.core.errors import ErrorCode
from gplay.output.console import MockConsole, Style
from gplay.output.errors import (
    config_error_exit_code,
    print_config_error,
    print_publish_error,
    publish_error_exit_code,
)
from gplay.services.publish.config import ConfigError
from gplay.services.publish.errors import PublishError


def test_print_publish_error_with_multiline_hint() -> None:
    console = MockConsole()
    error = PublishError(kind="commit_failed", message="failed to commit edit", hint="first\nsecond")

    print_publish_error(error, console)

    assert console.messages == ["error: failed to commit edit", "hint: first", "hint: second"]
    assert console.count(Style.DIM) == 2


def test_with_hint_appends() -> None:
    error = PublishError(kind="upload_failed", message="m", hint="a").with_hint("b")
    assert error.hint == "a\nb"
    assert PublishError(kind="upload_failed", message="m").with_hint("b").hint == "b"


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("invalid_input", ErrorCode.USER_ERROR),
        ("key_download_failed", ErrorCode.ENV_ERROR),
        ("auth_failed", ErrorCode.ENV_ERROR),
        ("io_failed", ErrorCode.IO_ERROR),
        ("network_failed", ErrorCode.NETWORK_ERROR),
        ("edit_failed", ErrorCode.PUBLISH_ERROR),
        ("upload_failed", ErrorCode.PUBLISH_ERROR),
        ("track_failed", ErrorCode.PUBLISH_ERROR),
        ("commit_failed", ErrorCode.PUBLISH_ERROR),
        ("review_blocked", ErrorCode.PUBLISH_ERROR),
    ],
)
def test_publish_error_exit_code(kind: str, code: ErrorCode) -> None:
    assert publish_error_exit_code(PublishError(kind=kind, message="x")) == int(code)  # type: ignore[arg-type]


def test_print_config_error() -> None:
    console = MockConsole()

    print_config_error(ConfigError("track is required", "track"), console)

    assert console.messages == ["error: Couldn't create config: track is required", "input: track"]
    assert config_error_exit_code(ConfigError("x")) == int(ErrorCode.USER_ERROR)
