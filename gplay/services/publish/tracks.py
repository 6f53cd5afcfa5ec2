"""Track and release reconciliation.

The Publisher API rejects a track update that carries more than one
``completed`` release, or a staged release that leaves no upgrade path from a
version already rolled out. So instead of building a fresh release, the
target track's existing release with the desired status is reused and the
uploaded version codes are merged into it.

Usage:
    track = find_track(tracks, "beta")
    release = update_release(track, [101, 102], settings, notes, console)
    # track.to_api() is the body for edits.tracks.update
"""

from __future__ import annotations

from collections.abc import Sequence

from gplay.output.console import ConsoleProtocol
from gplay.services.publish.model import (
    RELEASE_STATUS_COMPLETED,
    RELEASE_STATUS_HALTED,
    RELEASE_STATUS_IN_PROGRESS,
    Release,
    ReleaseSettings,
    ReleaseStatus,
    Track,
)
from gplay.services.publish.notes import localized_texts

__all__ = [
    "find_track",
    "locate_or_create_release",
    "merge_version_codes",
    "release_status",
    "should_apply_user_fraction",
    "sort_and_filter_version_codes",
    "update_release",
]


def find_track(tracks: Sequence[Track], name: str) -> Track:
    """Return the track called ``name``, or an empty unsaved track shell."""
    for track in tracks:
        if track.name == name:
            return track
    return Track(name=name, releases=[])


def release_status(status: ReleaseStatus | None, user_fraction: float) -> ReleaseStatus:
    """Explicit status wins; otherwise a non-zero fraction means a staged rollout."""
    if status:
        return status
    if user_fraction != 0:
        return RELEASE_STATUS_IN_PROGRESS
    return RELEASE_STATUS_COMPLETED


def should_apply_user_fraction(status: str) -> bool:
    return status in (RELEASE_STATUS_IN_PROGRESS, RELEASE_STATUS_HALTED)


def locate_or_create_release(track: Track, status: str) -> Release:
    """Return the first release with ``status``, appending a new one if absent."""
    for release in track.releases:
        if release.status == status:
            return release
    release = Release(status=status)
    track.releases.append(release)
    return release


def sort_and_filter_version_codes(current: Sequence[int], new: Sequence[int]) -> list[int]:
    """Pair both lists in ascending order and keep the higher code of each pair.

    A new code replaces the current one only when it is strictly higher; on a
    tie the current code is kept.
    """
    return [n if c < n else c for c, n in zip(sorted(current), sorted(new))]


def merge_version_codes(
    current: Sequence[int], new: Sequence[int], *, untrack_blocking: bool
) -> list[int]:
    if not untrack_blocking:
        return [*current, *new]
    if len(current) != len(new):
        return list(new)
    return sort_and_filter_version_codes(current, new)


def _remove_blocking_versions(
    release: Release, new_codes: Sequence[int], console: ConsoleProtocol
) -> list[int]:
    console.print(f"Checking app versions on release: {release.name or ''}")
    console.debug(f"Current version codes: {release.version_codes}")
    console.debug(f"New version codes: {list(new_codes)}")

    merged = merge_version_codes(release.version_codes, new_codes, untrack_blocking=True)
    if len(release.version_codes) != len(new_codes):
        if release.version_codes:
            console.warning(
                f"Mismatching app count, removing ({release.version_codes}) versions "
                f"from release: {release.name or ''}"
            )
        return merged

    for code in new_codes:
        if code not in merged:
            console.warning(
                f"Currently released app version is higher than new ({code}), "
                "app with new version code ignored"
            )
    for code in release.version_codes:
        if code not in merged:
            console.print(f"Shadowing app found, removing current ({code}) version")
    return merged


def update_release(
    track: Track,
    version_codes: Sequence[int],
    settings: ReleaseSettings,
    notes: dict[str, str] | None,
    console: ConsoleProtocol,
) -> Release:
    """Merge the uploaded version codes into the track's matching release.

    The track is mutated in place; the caller submits the whole track.
    ``notes`` of ``None`` keeps the release's existing notes; a dict replaces
    them, an empty one clears them.
    """
    status = release_status(settings.status, settings.user_fraction)
    if settings.status is None and status == RELEASE_STATUS_IN_PROGRESS:
        console.print(
            f"Release is a staged rollout, {settings.user_fraction} of users will receive it."
        )

    release = locate_or_create_release(track, status)

    if settings.untrack_blocking_versions:
        release.version_codes = _remove_blocking_versions(release, version_codes, console)
    else:
        release.version_codes = merge_version_codes(
            release.version_codes, version_codes, untrack_blocking=False
        )

    if settings.name:
        release.name = settings.name

    if settings.update_priority is not None:
        release.in_app_update_priority = settings.update_priority

    if not should_apply_user_fraction(status):
        release.user_fraction = None
    elif settings.user_fraction > 0:
        release.user_fraction = settings.user_fraction

    if notes is not None:
        release.release_notes = localized_texts(notes)

    console.print(f"Release version codes are: {release.version_codes}")
    return release
