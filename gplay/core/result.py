"""Result type for explicit error handling.

Services return ``Ok(value)`` or ``Err(error)`` instead of raising, so the
publish pipeline can stop at the first failed step and still report what
went wrong. Callers narrow with ``isinstance`` or ``match``:

    match upload_artifacts(...):
        case Ok(version_codes):
            ...
        case Err(error):
            print(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    error: E


type Result[T, E] = Ok[T] | Err[E]
