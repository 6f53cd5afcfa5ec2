"""Helpers for reading untyped JSON returned by the Publisher API.

Use these at the boundary where ``googleapiclient`` hands back plain dicts.
They validate at runtime and narrow types for the checker.
"""

from __future__ import annotations

from typing import Mapping, TypeGuard, cast

StrDict = dict[str, object]
ObjList = list[object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    """Return True if obj is a dict with string keys."""
    if not isinstance(obj, dict):
        return False
    d = cast(dict[object, object], obj)
    return all(isinstance(k, str) for k in d.keys())


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def as_obj_list(obj: object) -> ObjList | None:
    if isinstance(obj, list):
        return cast(ObjList, obj)
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a string value, stripped.

    Returns None if missing, not a str, or empty after stripping.
    """
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_float(table: Mapping[str, object], key: str) -> float | None:
    value = table.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def get_int(table: Mapping[str, object], key: str) -> int | None:
    """Get an integer value.

    The API encodes int64 fields (version codes) as JSON strings, so numeric
    strings are accepted too.
    """
    value = table.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return None


def get_list(table: Mapping[str, object], key: str) -> ObjList:
    """Get a list from a mapping, empty when missing or not a list."""
    return as_obj_list(table.get(key)) or []


def get_dicts(table: Mapping[str, object], key: str) -> list[StrDict]:
    """Get the dict items of a list field, skipping anything else."""
    out: list[StrDict] = []
    for item in get_list(table, key):
        d = as_str_dict(item)
        if d is not None:
            out.append(d)
    return out


def as_int(obj: object) -> int | None:
    """Coerce a JSON scalar (int or numeric string) to int."""
    return get_int({"v": obj}, "v")
