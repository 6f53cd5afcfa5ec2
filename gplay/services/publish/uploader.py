"""Upload apps and their auxiliary files into an open edit.

Uploads are staged in the edit and only become visible on commit. The first
failure stops the batch and leaves the edit uncommitted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from googleapiclient.http import MediaFileUpload

from gplay.core.result import Err, Ok, Result
from gplay.core.structured import as_int
from gplay.output.console import ConsoleProtocol
from gplay.services.publish.client import execute
from gplay.services.publish.errors import PublishError
from gplay.services.publish.model import AppKind, ArtifactInput, ExpansionFile
from gplay.services.publish.timeouts import UPLOAD_CHUNK_SIZE

__all__ = [
    "APK_MIMETYPE",
    "BUNDLE_INSTALLATION_WARNING",
    "EditSession",
    "OCTET_STREAM",
    "upload_artifacts",
]

APK_MIMETYPE = "application/vnd.android.package-archive"
OCTET_STREAM = "application/octet-stream"

BUNDLE_INSTALLATION_WARNING = (
    "The installation of the app bundle may be too large and trigger user warning on some "
    "devices, and this needs to be explicitly acknowledged in the request."
)


@dataclass(frozen=True, slots=True)
class EditSession:
    """An open edit on one package."""

    service: Any
    package_name: str
    edit_id: str

    def edits(self) -> Any:
        return self.service.edits()


def _media(path: str, mimetype: str) -> Result[MediaFileUpload, PublishError]:
    try:
        return Ok(MediaFileUpload(path, mimetype=mimetype, chunksize=UPLOAD_CHUNK_SIZE, resumable=True))
    except OSError as e:
        return Err(PublishError(kind="io_failed", message=f"failed to read file ({path}), error: {e}"))


def _close(media: MediaFileUpload) -> None:
    media.stream().close()


def _upload_bundle(
    session: EditSession, path: str, *, ack_bundle_installation_warning: bool
) -> Result[int, PublishError]:
    media = _media(path, OCTET_STREAM)
    if isinstance(media, Err):
        return media

    try:
        request = session.edits().bundles().upload(
            packageName=session.package_name,
            editId=session.edit_id,
            media_body=media.value,
            ackBundleInstallationWarning=ack_bundle_installation_warning,
        )
        result = execute(request, kind="upload_failed", message="failed to upload app bundle")
    finally:
        _close(media.value)
    if isinstance(result, Err):
        if BUNDLE_INSTALLATION_WARNING in result.error.message:
            return Err(
                result.error.with_hint(
                    "To acknowledge this warning, set the Acknowledge Bundle Installation "
                    "Warning (ack_bundle_installation_warning) input to true."
                )
            )
        return result
    return Ok(as_int(result.value.get("versionCode")) or 0)


def _upload_apk(session: EditSession, path: str) -> Result[int, PublishError]:
    media = _media(path, APK_MIMETYPE)
    if isinstance(media, Err):
        return media

    try:
        request = session.edits().apks().upload(
            packageName=session.package_name,
            editId=session.edit_id,
            media_body=media.value,
        )
        result = execute(request, kind="upload_failed", message="failed to upload apk")
    finally:
        _close(media.value)
    if isinstance(result, Err):
        return result
    return Ok(as_int(result.value.get("versionCode")) or 0)


def _upload_expansion_file(
    session: EditSession, expansion: ExpansionFile, version_code: int
) -> Result[None, PublishError]:
    media = _media(expansion.path, OCTET_STREAM)
    if isinstance(media, Err):
        return media

    try:
        request = session.edits().expansionfiles().upload(
            packageName=session.package_name,
            editId=session.edit_id,
            apkVersionCode=version_code,
            expansionFileType=str(expansion.slot),
            media_body=media.value,
        )
        result = execute(request, kind="upload_failed", message="failed to upload expansion file")
    finally:
        _close(media.value)
    if isinstance(result, Err):
        return result
    return Ok(None)


def _upload_deobfuscation_file(
    session: EditSession, path: str, version_code: int, *, file_type: str
) -> Result[None, PublishError]:
    media = _media(path, OCTET_STREAM)
    if isinstance(media, Err):
        return media

    label = "mapping file" if file_type == "proguard" else "native symbols file"
    try:
        request = session.edits().deobfuscationfiles().upload(
            packageName=session.package_name,
            editId=session.edit_id,
            apkVersionCode=version_code,
            deobfuscationFileType=file_type,
            media_body=media.value,
        )
        result = execute(request, kind="upload_failed", message=f"failed to upload {label}")
    finally:
        _close(media.value)
    if isinstance(result, Err):
        return result
    return Ok(None)


def _upload_one(
    session: EditSession,
    artifact: ArtifactInput,
    *,
    ack_bundle_installation_warning: bool,
    console: ConsoleProtocol,
) -> Result[int, PublishError]:
    path = artifact.app.path
    console.debug(
        f"Uploading file {path} with package name '{session.package_name}', "
        f"AppEditId '{session.edit_id}'"
    )

    if artifact.app.kind is AppKind.AAB:
        uploaded = _upload_bundle(
            session, path, ack_bundle_installation_warning=ack_bundle_installation_warning
        )
        if isinstance(uploaded, Err):
            return uploaded
        version_code = uploaded.value
        console.print(f"Uploaded app bundle version: {version_code}")
    else:
        uploaded = _upload_apk(session, path)
        if isinstance(uploaded, Err):
            return uploaded
        version_code = uploaded.value
        console.print(f"Uploaded apk version: {version_code}")

        if artifact.expansion_file is not None:
            exp = _upload_expansion_file(session, artifact.expansion_file, version_code)
            if isinstance(exp, Err):
                return exp
            console.print(f"Uploaded expansion file {artifact.expansion_file}")

    if version_code == 0:
        return Ok(version_code)

    if artifact.mapping_file:
        mapped = _upload_deobfuscation_file(
            session, artifact.mapping_file, version_code, file_type="proguard"
        )
        if isinstance(mapped, Err):
            return mapped
        console.print(f"Uploaded mapping file for apk version: {version_code}")

    if artifact.native_symbols_file:
        symbols = _upload_deobfuscation_file(
            session, artifact.native_symbols_file, version_code, file_type="nativeCode"
        )
        if isinstance(symbols, Err):
            return symbols
        console.print(f"Uploaded native symbols file for apk version: {version_code}")

    return Ok(version_code)


def upload_artifacts(
    session: EditSession,
    artifacts: Sequence[ArtifactInput],
    *,
    ack_bundle_installation_warning: bool,
    console: ConsoleProtocol,
) -> Result[list[int], PublishError]:
    """Upload every artifact and return the version codes, in input order."""
    version_codes: list[int] = []
    for artifact in artifacts:
        result = _upload_one(
            session,
            artifact,
            ack_bundle_installation_warning=ack_bundle_installation_warning,
            console=console,
        )
        if isinstance(result, Err):
            return result

        code = result.value
        if code in version_codes:
            console.warning(f"Version code {code} was returned by more than one uploaded app")
        version_codes.append(code)

    return Ok(version_codes)
