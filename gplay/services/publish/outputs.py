from __future__ import annotations

import shutil

from gplay.core.result import Err, Ok, Result
from gplay.platform.process import ProcessError, run
from gplay.services.publish.timeouts import ENVMAN_TIMEOUT_SECONDS

FAILURE_REASON_KEY = "FAILURE_REASON"


def export_output(key: str, value: str) -> Result[bool, ProcessError]:
    """Expose ``key=value`` to later CI steps through envman.

    Returns Ok(False) when envman is not installed (running outside CI).
    """
    if shutil.which("envman") is None:
        return Ok(False)

    result = run(["envman", "add", "--key", key, "--value", value], timeout=ENVMAN_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return result
    return Ok(True)
