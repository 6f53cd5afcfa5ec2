"""Process exit codes.

The step reports the kind of failure through its exit status so CI logs can
tell a bad input apart from a rejected edit.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the deploy command.

    - 0: Success
    - 1: User error (invalid or missing step input)
    - 2: Environment error (service account key, authentication)
    - 3: Publish error (the Publisher API rejected an upload, track or commit)
    - 4: Network error (transport retries exhausted)
    - 5: I/O error (artifact or auxiliary file unreadable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    PUBLISH_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
