from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import PurePath
from typing import Literal

from gplay.core.structured import StrDict, as_int, get_dicts, get_float, get_int, get_list, get_str


ReleaseStatus = Literal["draft", "inProgress", "halted", "completed"]

RELEASE_STATUS_DRAFT: ReleaseStatus = "draft"
RELEASE_STATUS_IN_PROGRESS: ReleaseStatus = "inProgress"
RELEASE_STATUS_HALTED: ReleaseStatus = "halted"
RELEASE_STATUS_COMPLETED: ReleaseStatus = "completed"

RELEASE_STATUSES: tuple[ReleaseStatus, ...] = (
    RELEASE_STATUS_DRAFT,
    RELEASE_STATUS_IN_PROGRESS,
    RELEASE_STATUS_HALTED,
    RELEASE_STATUS_COMPLETED,
)


class AppKind(StrEnum):
    APK = "apk"
    AAB = "aab"

    @classmethod
    def from_path(cls, path: str) -> AppKind | None:
        """Classify a path by its (case-insensitive) extension."""
        suffix = PurePath(path).suffix.lower()
        if suffix == ".apk":
            return cls.APK
        if suffix == ".aab":
            return cls.AAB
        return None


class ExpansionSlot(StrEnum):
    MAIN = "main"
    PATCH = "patch"


@dataclass(frozen=True, slots=True)
class AppArtifact:
    path: str
    kind: AppKind


@dataclass(frozen=True, slots=True)
class ExpansionFile:
    """An .obb file uploaded next to an APK."""

    slot: ExpansionSlot
    path: str

    def __str__(self) -> str:
        return f"{self.slot}:{self.path}"


@dataclass(frozen=True, slots=True)
class ArtifactInput:
    """One app to upload, with the auxiliary files that belong to it."""

    app: AppArtifact
    expansion_file: ExpansionFile | None = None
    mapping_file: str | None = None
    native_symbols_file: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseSettings:
    """Release-level settings applied to the target track."""

    track: str
    user_fraction: float = 0.0
    status: ReleaseStatus | None = None
    name: str | None = None
    update_priority: int | None = None
    untrack_blocking_versions: bool = False


@dataclass(frozen=True, slots=True)
class LocalizedText:
    language: str
    text: str

    def to_api(self) -> StrDict:
        return {"language": self.language, "text": self.text}


_RELEASE_FIELDS = frozenset(
    {"name", "status", "versionCodes", "userFraction", "releaseNotes", "inAppUpdatePriority"}
)


@dataclass(slots=True)
class Release:
    """A TrackRelease, mutated in place while reconciling a track."""

    status: str
    version_codes: list[int] = field(default_factory=list)
    name: str | None = None
    user_fraction: float | None = None
    release_notes: list[LocalizedText] = field(default_factory=list)
    in_app_update_priority: int | None = None
    # Fields we do not model (countryTargeting, ...) are sent back untouched.
    extra: StrDict = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: StrDict) -> Release:
        codes = [c for c in (as_int(v) for v in get_list(data, "versionCodes")) if c is not None]
        notes = [
            LocalizedText(language=get_str(n, "language") or "", text=str(n.get("text") or ""))
            for n in get_dicts(data, "releaseNotes")
        ]
        return cls(
            status=get_str(data, "status") or "",
            version_codes=codes,
            name=get_str(data, "name"),
            user_fraction=get_float(data, "userFraction"),
            release_notes=notes,
            in_app_update_priority=get_int(data, "inAppUpdatePriority"),
            extra={k: v for k, v in data.items() if k not in _RELEASE_FIELDS},
        )

    def to_api(self) -> StrDict:
        body: StrDict = dict(self.extra)
        body["status"] = self.status
        # int64 fields travel as strings in the v3 API.
        body["versionCodes"] = [str(c) for c in self.version_codes]
        if self.name:
            body["name"] = self.name
        if self.user_fraction is not None:
            body["userFraction"] = self.user_fraction
        if self.release_notes:
            body["releaseNotes"] = [n.to_api() for n in self.release_notes]
        if self.in_app_update_priority is not None:
            body["inAppUpdatePriority"] = self.in_app_update_priority
        return body

    def describe(self) -> str:
        return f"'{self.name or ''}' release versionCodes: {self.version_codes}, status: '{self.status}'"


@dataclass(slots=True)
class Track:
    name: str
    releases: list[Release] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: StrDict) -> Track:
        return cls(
            name=get_str(data, "track") or "",
            releases=[Release.from_api(r) for r in get_dicts(data, "releases")],
        )

    def to_api(self) -> StrDict:
        return {"track": self.name, "releases": [r.to_api() for r in self.releases]}

    def describe(self) -> str:
        lines = [f"{self.name} track:"]
        lines.extend(f"- {r.describe()}" for r in self.releases)
        return "\n".join(lines)
