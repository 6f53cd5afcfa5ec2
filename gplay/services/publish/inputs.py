"""App path resolution and per-artifact input records.

Step inputs arrive as delimited strings. This module turns them into
``ArtifactInput`` records once, so the uploader never has to re-zip the app,
expansion file and mapping file lists by index.

Usage:
    selection = resolve_app_paths("app.apk|app.aab")
    # selection.apps == (AppArtifact("app.aab", AppKind.AAB),)
    # selection.warnings == ("Both .aab and .apk files provided, ...",)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from gplay.core.result import Err, Ok, Result
from gplay.services.publish.errors import PublishError
from gplay.services.publish.model import (
    AppArtifact,
    AppKind,
    ArtifactInput,
    ExpansionFile,
    ExpansionSlot,
)

__all__ = [
    "AppSelection",
    "build_artifacts",
    "parse_expansion_entry",
    "parse_expansion_files",
    "parse_input_list",
    "parse_positional_files",
    "resolve_app_paths",
]

# Newline, a literal backslash-n typed into a CI input field, and pipe.
_SEPARATORS = ("\n", "\\n", "|")

APK_PATH_DEPRECATION = (
    "step input 'APK file path' (apk_path) is deprecated and will be removed, "
    "use 'APK or App Bundle file path' (app_path) instead!"
)


@dataclass(frozen=True, slots=True)
class AppSelection:
    apps: tuple[AppArtifact, ...]
    warnings: tuple[str, ...] = ()


def parse_input_list(raw: str) -> list[str]:
    """Split a delimited path list into trimmed, non-empty entries.

    Order and duplicates are preserved.
    """
    raw = raw.strip()
    if not raw:
        return []

    parts = [raw]
    for sep in _SEPARATORS:
        parts = [piece for part in parts for piece in part.split(sep)]

    return [p.strip() for p in parts if p.strip()]


def resolve_app_paths(app_path: str, *, apk_path: str | None = None) -> AppSelection:
    """Classify the app inputs, preferring App Bundles over APKs.

    Unknown extensions are reported and dropped. When both kinds are given,
    every .aab is kept and every .apk is discarded.
    """
    warnings: list[str] = []
    raw = app_path
    if apk_path and apk_path.strip():
        warnings.append(APK_PATH_DEPRECATION)
        raw = apk_path

    apks: list[AppArtifact] = []
    aabs: list[AppArtifact] = []
    for pth in parse_input_list(raw):
        kind = AppKind.from_path(pth)
        if kind is AppKind.AAB:
            aabs.append(AppArtifact(path=pth, kind=kind))
        elif kind is AppKind.APK:
            apks.append(AppArtifact(path=pth, kind=kind))
        else:
            warnings.append(
                f"unknown app path extension in path: {pth}, supported extensions: .apk, .aab"
            )

    if aabs and apks:
        joined = ",".join(a.path for a in aabs)
        warnings.append(f"Both .aab and .apk files provided, using the .aab file(s): {joined}")

    apps = aabs if aabs else apks
    return AppSelection(apps=tuple(apps), warnings=tuple(warnings))


def parse_expansion_entry(entry: str) -> Result[ExpansionFile, PublishError]:
    """Parse one ``main:<path>`` or ``patch:<path>`` entry."""
    clean = entry.strip()
    slot_name, sep, pth = clean.partition(":")
    try:
        slot = ExpansionSlot(slot_name.strip())
    except ValueError:
        slot = None

    if slot is None or not sep or not pth.strip():
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"invalid expansion file config: {entry}",
                hint="Use main:<path> or patch:<path>, e.g. main:/path/to/main.obb",
            )
        )
    return Ok(ExpansionFile(slot=slot, path=pth.strip()))


def parse_expansion_files(
    apps: Sequence[AppArtifact], raw: str
) -> Result[tuple[ExpansionFile | None, ...], PublishError]:
    """Match the pipe-separated expansion file config to the apps by position.

    An empty position means the app at that index has no expansion file.
    """
    if not raw.strip():
        return Ok(tuple(None for _ in apps))

    entries = raw.split("|")
    if len(entries) != len(apps):
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"mismatching number of APKs({len(apps)}) and Expansionfiles({len(entries)})",
            )
        )

    parsed: list[ExpansionFile | None] = []
    for app, entry in zip(apps, entries):
        if not entry.strip():
            parsed.append(None)
            continue

        if app.kind is not AppKind.APK:
            return Err(
                PublishError(
                    kind="invalid_input",
                    message=f"expansion files can only be uploaded for APKs, got: {app.path}",
                )
            )

        result = parse_expansion_entry(entry)
        if isinstance(result, Err):
            return result
        parsed.append(result.value)

    return Ok(tuple(parsed))


def parse_positional_files(
    apps: Sequence[AppArtifact], raw: str, *, label: str
) -> Result[tuple[str | None, ...], PublishError]:
    """Match a path list (mapping files, native symbols) to the apps.

    A single path applies to every app; otherwise the counts must match.
    """
    paths = parse_input_list(raw)
    if not paths:
        return Ok(tuple(None for _ in apps))
    if len(paths) == 1:
        return Ok(tuple(paths[0] for _ in apps))
    if len(paths) != len(apps):
        return Err(
            PublishError(
                kind="invalid_input",
                message=f"mismatching number of apps({len(apps)}) and {label}s({len(paths)})",
            )
        )
    return Ok(tuple(paths))


def build_artifacts(
    apps: Sequence[AppArtifact],
    *,
    expansion_files: str = "",
    mapping_files: str = "",
    native_symbols_files: str = "",
) -> Result[tuple[ArtifactInput, ...], PublishError]:
    expansions = parse_expansion_files(apps, expansion_files)
    if isinstance(expansions, Err):
        return expansions

    mappings = parse_positional_files(apps, mapping_files, label="mapping file")
    if isinstance(mappings, Err):
        return mappings

    symbols = parse_positional_files(apps, native_symbols_files, label="native symbols file")
    if isinstance(symbols, Err):
        return symbols

    return Ok(
        tuple(
            ArtifactInput(
                app=app,
                expansion_file=exp,
                mapping_file=mapping,
                native_symbols_file=native,
            )
            for app, exp, mapping, native in zip(
                apps, expansions.value, mappings.value, symbols.value
            )
        )
    )
