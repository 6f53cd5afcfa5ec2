from __future__ import annotations

import re
from pathlib import Path

from gplay.core.result import Err, Ok, Result
from gplay.services.publish.errors import PublishError
from gplay.services.publish.model import LocalizedText

# whatsnew-<BCP-47 tag>, e.g. whatsnew-en-US, whatsnew-ca, whatsnew-sr-Latn-RS
_WHATSNEW_RE = re.compile(r"whatsnew-(?P<locale>[0-9A-Za-z]+(?:-[0-9A-Za-z]+)*)")


def read_localized_notes(directory: Path) -> Result[dict[str, str], PublishError]:
    """Read ``whatsnew-<locale>`` files into a locale -> text map.

    A missing directory yields an empty map.
    """
    if not directory.is_dir():
        return Ok({})

    notes: dict[str, str] = {}
    for path in sorted(directory.glob("whatsnew-*")):
        m = _WHATSNEW_RE.fullmatch(path.name)
        if m is None or not path.is_file():
            continue
        try:
            notes[m.group("locale")] = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return Err(
                PublishError(
                    kind="io_failed",
                    message=f"failed to read whatsnew file: {e}",
                    hint=str(path),
                )
            )
    return Ok(notes)


def localized_texts(notes: dict[str, str]) -> list[LocalizedText]:
    return [LocalizedText(language=lang, text=notes[lang]) for lang in sorted(notes)]
