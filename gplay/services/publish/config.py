"""Typed, validated configuration for a deploy run.

Raw step inputs (``DeployInputs``) come from CLI options or their environment
variables. ``load_config`` checks them before any remote call and returns an
immutable ``PublishConfig`` that every component receives explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import cast

from gplay.core.result import Err, Ok, Result
from gplay.services.publish.client import parse_key_uri
from gplay.services.publish.inputs import build_artifacts, parse_input_list, resolve_app_paths
from gplay.services.publish.model import (
    RELEASE_STATUSES,
    ArtifactInput,
    ReleaseSettings,
    ReleaseStatus,
)

__all__ = [
    "ConfigError",
    "DeployInputs",
    "PublishConfig",
    "load_config",
]

MAX_UPDATE_PRIORITY = 5


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Invalid step input."""

    message: str
    field: str | None = None


@dataclass(frozen=True, slots=True)
class DeployInputs:
    """Step inputs as received, before validation."""

    service_account_json_key_path: str
    package_name: str
    app_path: str
    track: str
    expansionfile_path: str = ""
    user_fraction: float | None = None
    status: str = ""
    release_name: str = ""
    update_priority: int = 0
    whatsnews_dir: str = ""
    mapping_file: str = ""
    native_symbols_file: str = ""
    untrack_blocking_versions: bool = False
    changes_not_sent_for_review: bool = False
    retry_without_sending_to_review: bool = False
    ack_bundle_installation_warning: bool = False
    dry_run: bool = False
    verbose_log: bool = False
    apk_path: str = ""


@dataclass(frozen=True, slots=True)
class PublishConfig:
    key_uri: str
    package_name: str
    artifacts: tuple[ArtifactInput, ...]
    release: ReleaseSettings
    whatsnews_dir: Path | None = None
    changes_not_sent_for_review: bool = False
    retry_without_sending_to_review: bool = False
    ack_bundle_installation_warning: bool = False
    dry_run: bool = False
    verbose: bool = False
    warnings: tuple[str, ...] = ()

    @property
    def track(self) -> str:
        return self.release.track

    def describe(self) -> list[tuple[str, str]]:
        """Key/value lines for the config summary; the key location is redacted."""
        r = self.release
        return [
            ("service_account_json_key_path", "<redacted>"),
            ("package_name", self.package_name),
            ("apps", ", ".join(a.app.path for a in self.artifacts)),
            ("track", r.track),
            ("user_fraction", str(r.user_fraction)),
            ("status", r.status or ""),
            ("release_name", r.name or ""),
            ("update_priority", str(r.update_priority or 0)),
            ("whatsnews_dir", str(self.whatsnews_dir or "")),
            ("untrack_blocking_versions", str(r.untrack_blocking_versions).lower()),
            ("changes_not_sent_for_review", str(self.changes_not_sent_for_review).lower()),
            ("retry_without_sending_to_review", str(self.retry_without_sending_to_review).lower()),
            ("ack_bundle_installation_warning", str(self.ack_bundle_installation_warning).lower()),
            ("dry_run", str(self.dry_run).lower()),
        ]


def _validate_key_uri(uri: str) -> ConfigError | None:
    if not uri.strip():
        return ConfigError("service account json key path is required", "service_account_json_key_path")
    key = parse_key_uri(uri.strip())
    if not key.is_remote and not Path(key.location).is_file():
        return ConfigError(f"json key path not exist at: {key.location}", "service_account_json_key_path")
    return None


def _validate_fraction(value: float | None) -> Result[float, ConfigError]:
    if value is None:
        return Ok(0.0)
    if not 0.0 <= value < 1.0:
        return Err(
            ConfigError(
                f"user fraction must be 0 (full rollout) or between 0.0 and 1.0 (exclusive), got: {value}",
                "user_fraction",
            )
        )
    return Ok(value)


def _validate_status(value: str) -> Result[ReleaseStatus | None, ConfigError]:
    status = value.strip()
    if not status:
        return Ok(None)
    if status not in RELEASE_STATUSES:
        return Err(
            ConfigError(
                f"invalid release status: {status}, supported: {', '.join(RELEASE_STATUSES)}",
                "status",
            )
        )
    return Ok(cast(ReleaseStatus, status))


def _missing_files(raw: str) -> list[str]:
    return [p for p in parse_input_list(raw) if not Path(p).is_file()]


def load_config(inputs: DeployInputs) -> Result[PublishConfig, ConfigError]:
    """Validate step inputs into a ``PublishConfig``."""
    if err := _validate_key_uri(inputs.service_account_json_key_path):
        return Err(err)

    if not inputs.package_name.strip():
        return Err(ConfigError("package name is required", "package_name"))
    if not inputs.track.strip():
        return Err(ConfigError("track is required", "track"))

    fraction = _validate_fraction(inputs.user_fraction)
    if isinstance(fraction, Err):
        return fraction

    status = _validate_status(inputs.status)
    if isinstance(status, Err):
        return status

    if not 0 <= inputs.update_priority <= MAX_UPDATE_PRIORITY:
        return Err(
            ConfigError(
                f"update priority must be between 0 and {MAX_UPDATE_PRIORITY}, got: {inputs.update_priority}",
                "update_priority",
            )
        )

    whatsnews_dir: Path | None = None
    if inputs.whatsnews_dir.strip():
        whatsnews_dir = Path(inputs.whatsnews_dir.strip())
        if not whatsnews_dir.is_dir():
            return Err(ConfigError(f"what's new directory not exist at: {whatsnews_dir}", "whatsnews_dir"))

    for field_name, raw in (
        ("mapping_file", inputs.mapping_file),
        ("native_symbols_file", inputs.native_symbols_file),
    ):
        missing = _missing_files(raw)
        if missing:
            return Err(ConfigError(f"{field_name.replace('_', ' ')} not exist at: {missing[0]}", field_name))

    selection = resolve_app_paths(inputs.app_path, apk_path=inputs.apk_path or None)
    if not selection.apps:
        return Err(ConfigError("no app provided", "app_path"))

    for app in selection.apps:
        if not Path(app.path).is_file():
            return Err(ConfigError(f"app not exist at: {app.path}", "app_path"))

    artifacts = build_artifacts(
        selection.apps,
        expansion_files=inputs.expansionfile_path,
        mapping_files=inputs.mapping_file,
        native_symbols_files=inputs.native_symbols_file,
    )
    if isinstance(artifacts, Err):
        return Err(ConfigError(artifacts.error.message))

    for artifact in artifacts.value:
        exp = artifact.expansion_file
        if exp is not None and not Path(exp.path).is_file():
            return Err(ConfigError(f"expansion file not exist at: {exp.path}", "expansionfile_path"))

    release = ReleaseSettings(
        track=inputs.track.strip(),
        user_fraction=fraction.value,
        status=status.value,
        name=inputs.release_name.strip() or None,
        update_priority=inputs.update_priority or None,
        untrack_blocking_versions=inputs.untrack_blocking_versions,
    )

    return Ok(
        PublishConfig(
            key_uri=inputs.service_account_json_key_path.strip(),
            package_name=inputs.package_name.strip(),
            artifacts=artifacts.value,
            release=release,
            whatsnews_dir=whatsnews_dir,
            changes_not_sent_for_review=inputs.changes_not_sent_for_review,
            retry_without_sending_to_review=inputs.retry_without_sending_to_review,
            ack_bundle_installation_warning=inputs.ack_bundle_installation_warning,
            dry_run=inputs.dry_run,
            verbose=inputs.verbose_log,
            warnings=selection.warnings,
        )
    )
