from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PublishErrorKind = Literal[
    "invalid_input",
    "key_download_failed",
    "auth_failed",
    "io_failed",
    "network_failed",
    "edit_failed",
    "upload_failed",
    "track_failed",
    "commit_failed",
    "review_blocked",
]


@dataclass(frozen=True, slots=True)
class PublishError:
    kind: PublishErrorKind
    message: str
    hint: str | None = None
    # HTTP status of the failed API call, 0 when there was no response.
    status: int = 0

    def with_hint(self, hint: str) -> PublishError:
        """Return a copy with ``hint`` appended to any existing hint."""
        merged = f"{self.hint}\n{hint}" if self.hint else hint
        return PublishError(kind=self.kind, message=self.message, hint=merged, status=self.status)
