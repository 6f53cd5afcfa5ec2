from __future__ import annotations

import pytest

from gplay.services.publish.model import (
    AppKind,
    ExpansionFile,
    ExpansionSlot,
    LocalizedText,
    Release,
    Track,
)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("app.apk", AppKind.APK),
        ("/builds/App-Release.AAB", AppKind.AAB),
        ("mapping.txt", None),
        ("apk", None),
    ],
)
def test_app_kind_from_path(path: str, expected: AppKind | None) -> None:
    assert AppKind.from_path(path) is expected


def test_expansion_file_str() -> None:
    assert str(ExpansionFile(ExpansionSlot.PATCH, "/obb/patch.obb")) == "patch:/obb/patch.obb"


def test_release_from_api_parses_string_version_codes() -> None:
    release = Release.from_api(
        {
            "name": "1.2.0",
            "status": "inProgress",
            "versionCodes": ["12", "13", "bogus"],
            "userFraction": 0.1,
            "releaseNotes": [{"language": "en-US", "text": "Fixes"}],
            "inAppUpdatePriority": 2,
            "countryTargeting": {"countries": ["FR"]},
        }
    )

    assert release.name == "1.2.0"
    assert release.status == "inProgress"
    assert release.version_codes == [12, 13]
    assert release.user_fraction == 0.1
    assert release.release_notes == [LocalizedText("en-US", "Fixes")]
    assert release.in_app_update_priority == 2
    assert release.extra == {"countryTargeting": {"countries": ["FR"]}}


def test_release_to_api_keeps_unknown_fields_and_omits_empty() -> None:
    release = Release(status="completed", version_codes=[12], extra={"countryTargeting": {}})

    assert release.to_api() == {
        "countryTargeting": {},
        "status": "completed",
        "versionCodes": ["12"],
    }


def test_track_to_api_shape() -> None:
    track = Track(
        name="beta",
        releases=[
            Release(
                status="inProgress",
                version_codes=[3, 4],
                name="r1",
                user_fraction=0.5,
                release_notes=[LocalizedText("en-US", "Hi")],
                in_app_update_priority=0,
            )
        ],
    )

    assert track.to_api() == {
        "track": "beta",
        "releases": [
            {
                "status": "inProgress",
                "versionCodes": ["3", "4"],
                "name": "r1",
                "userFraction": 0.5,
                "releaseNotes": [{"language": "en-US", "text": "Hi"}],
                "inAppUpdatePriority": 0,
            }
        ],
    }


def test_track_from_api_and_describe() -> None:
    track = Track.from_api(
        {
            "track": "production",
            "releases": [{"name": "1.0", "status": "completed", "versionCodes": ["1"]}],
        }
    )

    assert track.name == "production"
    assert track.releases[0].version_codes == [1]
    assert track.describe() == (
        "production track:\n- '1.0' release versionCodes: [1], status: 'completed'"
    )
