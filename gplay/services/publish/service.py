"""Edit orchestration.

One run is one edit: insert, list tracks, upload, update the target track,
then validate (dry run) or commit. Track and release changes are staged in
memory and sent as a single track update inside the edit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from gplay.core.result import Err, Ok, Result
from gplay.output.console import ConsoleProtocol
from gplay.services.publish.client import execute
from gplay.services.publish.config import PublishConfig
from gplay.services.publish.errors import PublishError
from gplay.services.publish.model import Track
from gplay.services.publish.notes import read_localized_notes
from gplay.services.publish.tracks import find_track, update_release
from gplay.services.publish.uploader import EditSession, upload_artifacts

__all__ = [
    "PublishService",
    "PublishSummary",
    "REVIEW_BLOCKED_SIGNATURE",
    "TRANSIENT_SERVER_ERROR_SIGNATURES",
]

REVIEW_BLOCKED_SIGNATURE = "Changes cannot be sent for review automatically"

TRANSIENT_SERVER_ERROR_SIGNATURES = (
    "Internal error encountered",
    "Error 500:",
    "Error 503:",
)

_REVIEW_HINT = (
    "Set the Retry Without Sending to Review (retry_without_sending_to_review) input to true "
    "to commit the changes without sending them for review, then send them for review from "
    "the Google Play Console."
)

_TRANSIENT_HINT = (
    "This looks like a temporary Google Play server error. Try again later, or upload the "
    "artifacts manually in the Google Play Console."
)


@dataclass(frozen=True, slots=True)
class PublishSummary:
    edit_id: str
    version_codes: tuple[int, ...]
    track: Track
    committed: bool


class PublishService:
    def __init__(self, *, config: PublishConfig, publisher: Any, console: ConsoleProtocol) -> None:
        self._config = config
        self._publisher = publisher
        self._console = console

    def run(self) -> Result[PublishSummary, PublishError]:
        result = self._run()
        if isinstance(result, Err) and _is_transient_server_error(result.error):
            return Err(result.error.with_hint(_TRANSIENT_HINT))
        return result

    def _run(self) -> Result[PublishSummary, PublishError]:
        cfg = self._config
        console = self._console

        console.header("Create new edit")
        edit = self._insert_edit()
        if isinstance(edit, Err):
            return edit
        session = EditSession(service=self._publisher, package_name=cfg.package_name, edit_id=edit.value)
        console.print(f"editID: {session.edit_id}")

        console.header("Listing tracks")
        tracks = self._list_tracks(session)
        if isinstance(tracks, Err):
            return tracks

        console.header("Upload apks or app bundles")
        uploaded = upload_artifacts(
            session,
            cfg.artifacts,
            ack_bundle_installation_warning=cfg.ack_bundle_installation_warning,
            console=console,
        )
        if isinstance(uploaded, Err):
            return uploaded
        version_codes = uploaded.value

        console.header("Update track")
        track = self._update_track(session, tracks.value, version_codes)
        if isinstance(track, Err):
            return track

        finished = self._finish(
            session,
            dry_run=cfg.dry_run,
            changes_not_sent_for_review=cfg.changes_not_sent_for_review,
        )
        if isinstance(finished, Err):
            return finished

        return Ok(
            PublishSummary(
                edit_id=session.edit_id,
                version_codes=tuple(version_codes),
                track=track.value,
                committed=finished.value,
            )
        )

    def _insert_edit(self) -> Result[str, PublishError]:
        request = self._publisher.edits().insert(packageName=self._config.package_name, body={})
        result = execute(request, kind="edit_failed", message="failed to perform edit insert call")
        if isinstance(result, Err):
            return result

        edit_id = result.value.get("id")
        if not isinstance(edit_id, str) or not edit_id:
            return Err(PublishError(kind="edit_failed", message="edit insert call returned no edit id"))
        return Ok(edit_id)

    def _list_tracks(self, session: EditSession) -> Result[list[Track], PublishError]:
        request = session.edits().tracks().list(
            packageName=session.package_name, editId=session.edit_id
        )
        result = execute(request, kind="track_failed", message="failed to list tracks")
        if isinstance(result, Err):
            return result

        raw = result.value.get("tracks")
        tracks = [Track.from_api(t) for t in raw if isinstance(t, dict)] if isinstance(raw, list) else []
        for track in tracks:
            self._console.print(f"Found {track.describe()}")
        return Ok(tracks)

    def _update_track(
        self, session: EditSession, tracks: list[Track], version_codes: list[int]
    ) -> Result[Track, PublishError]:
        cfg = self._config
        notes: dict[str, str] | None = None
        if cfg.whatsnews_dir is not None:
            read = read_localized_notes(cfg.whatsnews_dir)
            if isinstance(read, Err):
                return read
            notes = read.value
            if notes:
                self._console.print(f"Found release notes for: {', '.join(sorted(notes))}")
            else:
                self._console.debug("No recent changes found")

        track = find_track(tracks, cfg.track)
        update_release(track, version_codes, cfg.release, notes, self._console)

        request = session.edits().tracks().update(
            packageName=session.package_name,
            editId=session.edit_id,
            track=cfg.track,
            body=track.to_api(),
        )
        result = execute(request, kind="track_failed", message=f"failed to update track ({cfg.track})")
        if isinstance(result, Err):
            return result

        self._console.print(f"Updated {track.describe()}")
        return Ok(track)

    def _finish(
        self, session: EditSession, *, dry_run: bool, changes_not_sent_for_review: bool
    ) -> Result[bool, PublishError]:
        """Validate or commit the edit; Ok(True) when it was committed."""
        result = self._validate_or_commit(
            session, dry_run=dry_run, changes_not_sent_for_review=changes_not_sent_for_review
        )
        if isinstance(result, Ok) or REVIEW_BLOCKED_SIGNATURE not in result.error.message:
            return result

        if not self._config.retry_without_sending_to_review:
            return Err(
                PublishError(
                    kind="review_blocked",
                    message=result.error.message,
                    hint=_REVIEW_HINT,
                    status=result.error.status,
                )
            )

        self._console.warning(
            "Changes cannot be sent for review automatically, "
            "retrying with changesNotSentForReview=true"
        )
        return self._validate_or_commit(session, dry_run=False, changes_not_sent_for_review=True)

    def _validate_or_commit(
        self, session: EditSession, *, dry_run: bool, changes_not_sent_for_review: bool
    ) -> Result[bool, PublishError]:
        edits = session.edits()
        if dry_run:
            self._console.header("Validating edit")
            request = edits.validate(packageName=session.package_name, editId=session.edit_id)
            result = execute(request, kind="commit_failed", message="failed to validate edit")
            if isinstance(result, Err):
                return result
            self._console.success("Edit is valid (dry run, not committed)")
            return Ok(False)

        self._console.header("Committing edit")
        request = edits.commit(
            packageName=session.package_name,
            editId=session.edit_id,
            changesNotSentForReview=changes_not_sent_for_review,
        )
        result = execute(request, kind="commit_failed", message="failed to commit edit")
        if isinstance(result, Err):
            return result
        self._console.success("Edit committed")
        return Ok(True)


def _is_transient_server_error(error: PublishError) -> bool:
    return any(sig in error.message for sig in TRANSIENT_SERVER_ERROR_SIGNATURES)
