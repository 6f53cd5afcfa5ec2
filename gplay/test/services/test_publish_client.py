from __future__ import annotations

import http.client
import json
import urllib.error
from pathlib import Path

import httplib2
import pytest

from gplay.core.result import Err, Ok
from gplay.services.publish import client as client_mod
from gplay.services.publish.client import (
    KeyLocation,
    download_key,
    execute,
    http_error_text,
    is_retryable_status,
    load_service_account_info,
    parse_key_uri,
)
from gplay.test.fakes import http_error


def _no_sleep(seconds: float) -> None:
    del seconds


class _ScriptedRequest:
    """Request whose ``execute`` plays back a list of outcomes."""

    resumable = None

    def __init__(self, *outcomes: object) -> None:
        self._outcomes = list(outcomes)
        self.calls = 0

    def execute(self) -> object:
        self.calls += 1
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class _ChunkedRequest:
    resumable = object()

    def __init__(self) -> None:
        self.chunks = 0

    def next_chunk(self) -> tuple[object, object]:
        self.chunks += 1
        if self.chunks < 3:
            return object(), None
        return None, {"versionCode": 7}


class _Response:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def __enter__(self) -> _Response:
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def read(self) -> bytes:
        return self._body


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://example.com/key.json", KeyLocation("https://example.com/key.json", True)),
        ("HTTP://example.com/key.json", KeyLocation("HTTP://example.com/key.json", True)),
        ("file:///bitrise/key.json", KeyLocation("/bitrise/key.json", False)),
        ("/bitrise/key.json", KeyLocation("/bitrise/key.json", False)),
        ("key.json", KeyLocation("key.json", False)),
    ],
)
def test_parse_key_uri(uri: str, expected: KeyLocation) -> None:
    assert parse_key_uri(uri) == expected


@pytest.mark.parametrize(
    ("status", "expected"),
    [(401, True), (429, True), (500, True), (503, True), (400, False), (403, False), (404, False)],
)
def test_is_retryable_status(status: int, expected: bool) -> None:
    assert is_retryable_status(status) is expected


def test_http_error_text_uses_api_message() -> None:
    error = http_error(403, "The caller does not have permission")
    assert http_error_text(error) == "Error 403: The caller does not have permission"


def test_http_error_text_falls_back_to_body() -> None:
    from googleapiclient.errors import HttpError

    error = HttpError(resp=httplib2.Response({"status": 502}), content=b"Bad Gateway")
    assert http_error_text(error) == "Error 502: Bad Gateway"


class TestExecute:
    def test_returns_response(self) -> None:
        request = _ScriptedRequest({"id": "edit-1"})

        result = execute(request, kind="edit_failed", message="failed to create edit")

        assert result == Ok({"id": "edit-1"})

    def test_retries_transient_status(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        request = _ScriptedRequest(
            http_error(503, "Backend unavailable"),
            http_error(401, "Token expired"),
            {"id": "edit-1"},
        )

        result = execute(request, kind="edit_failed", message="failed to create edit")

        assert isinstance(result, Ok)
        assert request.calls == 3

    def test_does_not_retry_client_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        request = _ScriptedRequest(http_error(404, "Package not found: com.example"))

        result = execute(request, kind="edit_failed", message="failed to create edit")

        assert isinstance(result, Err)
        assert request.calls == 1
        assert result.error.kind == "edit_failed"
        assert result.error.status == 404
        assert result.error.message == (
            "failed to create edit, error: Error 404: Package not found: com.example"
        )

    def test_gives_up_after_attempts(self, monkeypatch: pytest.MonkeyPatch) -> None:
        slept: list[float] = []
        monkeypatch.setattr(client_mod, "sleep", slept.append)
        request = _ScriptedRequest(*(http_error(500, "Internal error encountered.") for _ in range(3)))

        result = execute(request, kind="commit_failed", message="failed to commit", attempts=3, delay=2.0)

        assert isinstance(result, Err)
        assert request.calls == 3
        assert slept == [2.0, 2.0]
        assert "Internal error encountered" in result.error.message

    def test_transport_error_becomes_network_failed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        request = _ScriptedRequest(ConnectionResetError("reset"), ConnectionResetError("reset"))

        result = execute(request, kind="edit_failed", message="failed to create edit", attempts=2)

        assert isinstance(result, Err)
        assert result.error.kind == "network_failed"
        assert request.calls == 2

    def test_http_client_error_is_retried_then_network_failed(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        request = _ScriptedRequest(
            http.client.IncompleteRead(b"partial"), http.client.IncompleteRead(b"partial")
        )

        result = execute(request, kind="upload_failed", message="failed to upload", attempts=2)

        assert isinstance(result, Err)
        assert result.error.kind == "network_failed"
        assert request.calls == 2

    def test_http_client_error_recovers_on_retry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        request = _ScriptedRequest(http.client.BadStatusLine(""), {"versionCode": 9})

        result = execute(request, kind="upload_failed", message="failed to upload")

        assert result == Ok({"versionCode": 9})
        assert request.calls == 2

    def test_resumable_upload_polls_chunks(self) -> None:
        request = _ChunkedRequest()

        result = execute(request, kind="upload_failed", message="failed to upload")

        assert result == Ok({"versionCode": 7})
        assert request.chunks == 3


class TestKeyLoading:
    def test_download_retries_then_succeeds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        outcomes: list[object] = [urllib.error.URLError("timed out"), _Response(b"{}")]

        def opener(url: str, *, timeout: float) -> object:
            del url, timeout
            outcome = outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        assert download_key("https://example.com/key.json", opener=opener) == Ok(b"{}")
        assert outcomes == []

    def test_download_retries_truncated_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        calls: list[str] = []

        class _Truncated(_Response):
            def read(self) -> bytes:
                raise http.client.IncompleteRead(b"{")

        def opener(url: str, *, timeout: float) -> object:
            del timeout
            calls.append(url)
            return _Truncated(b"")

        result = download_key("https://example.com/key.json", opener=opener, attempts=3)

        assert isinstance(result, Err)
        assert result.error.kind == "key_download_failed"
        assert len(calls) == 3

    def test_download_does_not_retry_not_found(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(client_mod, "sleep", _no_sleep)
        calls: list[str] = []

        def opener(url: str, *, timeout: float) -> object:
            del timeout
            calls.append(url)
            raise urllib.error.HTTPError(url, 404, "Not Found", {}, None)  # type: ignore[arg-type]

        result = download_key("https://example.com/key.json", opener=opener)

        assert isinstance(result, Err)
        assert result.error.kind == "key_download_failed"
        assert len(calls) == 1

    def test_load_local_key(self, tmp_path: Path) -> None:
        key = tmp_path / "key.json"
        key.write_text(json.dumps({"type": "service_account", "client_email": "ci@x"}), encoding="utf-8")

        result = load_service_account_info(f"file://{key}")

        assert result == Ok({"type": "service_account", "client_email": "ci@x"})

    def test_load_remote_key(self) -> None:
        def opener(url: str, *, timeout: float) -> object:
            del url, timeout
            return _Response(b'{"type": "service_account"}')

        result = load_service_account_info("https://example.com/key.json", opener=opener)

        assert result == Ok({"type": "service_account"})

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        key = tmp_path / "key.json"
        key.write_text("not json", encoding="utf-8")

        result = load_service_account_info(str(key))

        assert isinstance(result, Err)
        assert result.error.kind == "auth_failed"

    def test_load_non_object_json(self, tmp_path: Path) -> None:
        key = tmp_path / "key.json"
        key.write_text("[1, 2]", encoding="utf-8")

        result = load_service_account_info(str(key))

        assert isinstance(result, Err)
        assert "JSON object" in result.error.message
