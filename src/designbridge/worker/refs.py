"""``$ref`` placeholder resolution between batch steps.

A string that is exactly ``"$ref:<id>.<field>.<field>..."`` is replaced by
the value found by walking the dotted path through the result stored under
``<id>``. Anything missing along the way resolves to None.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from typing import Any

REF_PATTERN = re.compile(r"^\$ref:([^.]+)(?:\.(.+))?$")


def parse_ref(value: str) -> tuple[str, list[str]] | None:
    """Split a reference token into (result id, path segments)."""
    match = REF_PATTERN.match(value)
    if match is None:
        return None
    result_id, path = match.groups()
    return result_id, path.split(".") if path else []


def follow_path(value: Any, path: list[str]) -> Any:
    for segment in path:
        if isinstance(value, Mapping):
            value = value.get(segment)
        elif isinstance(value, list) and segment.isdigit():
            index = int(segment)
            value = value[index] if index < len(value) else None
        else:
            return None
        if value is None:
            return None
    return value


def resolve_refs(value: Any, results: Mapping[str, Any]) -> Any:
    """Return ``value`` with every reference token replaced.

    Lists and dicts are rebuilt element by element; other values pass
    through unchanged. Resolved values are copies, so later edits to params
    never reach a stored result.
    """
    if isinstance(value, str):
        ref = parse_ref(value)
        if ref is None:
            return value
        result_id, path = ref
        return copy.deepcopy(follow_path(results.get(result_id), path))
    if isinstance(value, list):
        return [resolve_refs(item, results) for item in value]
    if isinstance(value, dict):
        return {key: resolve_refs(item, results) for key, item in value.items()}
    return value
