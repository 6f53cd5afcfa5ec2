"""Authenticated Android Publisher client.

This module provides:
- service account key loading (local path, file:// URI or http(s) URL)
- ``build_publisher``: googleapiclient resource over an authorized httplib2
  transport (token refresh on 401 is handled by google-auth-httplib2)
- ``execute``: runs one API request with bounded, fixed-wait retries on
  401 / 429 / 5xx and converts failures into ``PublishError`` values
"""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import build_http

from gplay.core.result import Err, Ok, Result
from gplay.core.structured import StrDict, as_str_dict
from gplay.services.publish.errors import PublishError, PublishErrorKind
from gplay.services.publish.timeouts import (
    API_RETRY_ATTEMPTS,
    API_RETRY_DELAY_SECONDS,
    KEY_DOWNLOAD_RETRY_ATTEMPTS,
    KEY_DOWNLOAD_RETRY_DELAY_SECONDS,
    KEY_DOWNLOAD_TIMEOUT_SECONDS,
)

__all__ = [
    "ANDROIDPUBLISHER_SCOPE",
    "KeyLocation",
    "build_publisher",
    "download_key",
    "execute",
    "http_error_text",
    "is_retryable_status",
    "load_service_account_info",
    "parse_key_uri",
]

ANDROIDPUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"

Opener = Callable[..., Any]

# Raised below the googleapiclient layer; httplib2 re-raises http.client errors
# after its own single retry.
_TRANSPORT_ERRORS = (httplib2.HttpLib2Error, http.client.HTTPException, OSError)

_DOWNLOAD_TRANSIENT_ERRORS = (
    urllib.error.URLError,
    http.client.HTTPException,
    TimeoutError,
    ConnectionError,
)


@dataclass(frozen=True, slots=True)
class KeyLocation:
    location: str
    is_remote: bool


def parse_key_uri(uri: str) -> KeyLocation:
    """Classify the key input: http(s) URLs are remote, anything else a path."""
    scheme = urllib.parse.urlparse(uri).scheme.lower()
    if scheme in ("http", "https"):
        return KeyLocation(location=uri, is_remote=True)
    return KeyLocation(location=uri.removeprefix("file://"), is_remote=False)


def _is_transient_download_error(error: Exception) -> bool:
    if isinstance(error, urllib.error.HTTPError):
        return is_retryable_status(error.code)
    return isinstance(error, _DOWNLOAD_TRANSIENT_ERRORS)


def download_key(
    url: str,
    *,
    opener: Opener = urllib.request.urlopen,
    attempts: int = KEY_DOWNLOAD_RETRY_ATTEMPTS,
    delay: float = KEY_DOWNLOAD_RETRY_DELAY_SECONDS,
) -> Result[bytes, PublishError]:
    attempts = max(1, attempts)
    last = ""
    for attempt in range(attempts):
        try:
            with opener(url, timeout=KEY_DOWNLOAD_TIMEOUT_SECONDS) as response:
                return Ok(response.read())
        except (http.client.HTTPException, OSError) as e:
            last = str(e)
            if attempt < attempts - 1 and _is_transient_download_error(e):
                sleep(delay)
                continue
            break

    return Err(
        PublishError(
            kind="key_download_failed",
            message=f"failed to download json key file, error: {last}",
            hint="Check that the service account key URL is reachable from the build machine",
        )
    )


def load_service_account_info(
    key_uri: str, *, opener: Opener = urllib.request.urlopen
) -> Result[StrDict, PublishError]:
    """Read and parse the service account JSON key."""
    key = parse_key_uri(key_uri)
    if key.is_remote:
        downloaded = download_key(key.location, opener=opener)
        if isinstance(downloaded, Err):
            return downloaded
        raw = downloaded.value
    else:
        try:
            raw = Path(key.location).read_bytes()
        except OSError as e:
            return Err(
                PublishError(
                    kind="auth_failed",
                    message=f"failed to read json key file: {e}",
                    hint=key.location,
                )
            )

    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(PublishError(kind="auth_failed", message=f"invalid json key file: {e}"))

    info = as_str_dict(obj)
    if info is None:
        return Err(PublishError(kind="auth_failed", message="json key file must be a JSON object"))
    return Ok(info)


def build_publisher(info: StrDict) -> Result[Any, PublishError]:
    """Build an ``androidpublisher`` v3 resource from service account info."""
    try:
        credentials = service_account.Credentials.from_service_account_info(
            info, scopes=[ANDROIDPUBLISHER_SCOPE]
        )
        authorized = AuthorizedHttp(credentials, http=build_http())
        service = build("androidpublisher", "v3", http=authorized, cache_discovery=False)
    except (ValueError, KeyError, GoogleAuthError) as e:
        return Err(
            PublishError(
                kind="auth_failed",
                message=f"failed to create auth config from json key file, error: {e}",
            )
        )
    except (HttpError, *_TRANSPORT_ERRORS) as e:
        return Err(
            PublishError(
                kind="network_failed",
                message=f"failed to create publisher service, error: {e}",
            )
        )
    return Ok(service)


def is_retryable_status(status: int) -> bool:
    return status == 401 or status == 429 or status >= 500


def http_error_text(error: HttpError) -> str:
    """Best-effort human readable message from an API error response."""
    content = getattr(error, "content", b"") or b""
    text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else str(content)
    try:
        payload: object = json.loads(text)
    except json.JSONDecodeError:
        payload = None

    data = as_str_dict(payload)
    err = as_str_dict(data.get("error")) if data is not None else None
    if err is not None and isinstance(err.get("message"), str):
        return f"Error {error.resp.status}: {err['message']}"
    if text.strip():
        return f"Error {error.resp.status}: {text.strip()}"
    return str(error)


def _run(request: Any) -> object:
    # HttpRequest.resumable is set for resumable media uploads.
    if getattr(request, "resumable", None) is not None:
        response: object = None
        while response is None:
            _, response = request.next_chunk()
        return response
    return request.execute()


def execute(
    request: Any,
    *,
    kind: PublishErrorKind,
    message: str,
    hint: str | None = None,
    attempts: int = API_RETRY_ATTEMPTS,
    delay: float = API_RETRY_DELAY_SECONDS,
) -> Result[StrDict, PublishError]:
    attempts = max(1, attempts)
    for attempt in range(attempts):
        try:
            response = _run(request)
        except HttpError as e:
            status = int(e.resp.status)
            if attempt < attempts - 1 and is_retryable_status(status):
                sleep(delay)
                continue
            return Err(
                PublishError(
                    kind=kind,
                    message=f"{message}, error: {http_error_text(e)}",
                    hint=hint,
                    status=status,
                )
            )
        except GoogleAuthError as e:
            return Err(PublishError(kind="auth_failed", message=f"{message}, error: {e}", hint=hint))
        except _TRANSPORT_ERRORS as e:
            if attempt < attempts - 1:
                sleep(delay)
                continue
            return Err(PublishError(kind="network_failed", message=f"{message}, error: {e}", hint=hint))

        return Ok(as_str_dict(response) or {})

    return Err(PublishError(kind=kind, message=message, hint=hint))
