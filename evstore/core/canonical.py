"""
Canonical JSON serialization.

Page tokens and CLI JSON output go through these functions so that the
same value always serializes to the same string.
"""

import json
from typing import Any, Optional


def canonicalize(obj: Any) -> Any:
    """
    Convert nested dict/list/tuple values to canonical form.

    Rules:
    - dict keys sorted alphabetically
    - tuples converted to lists
    - objects exposing to_dict() (events) are expanded
    """
    if hasattr(obj, "to_dict"):
        return canonicalize(obj.to_dict())
    if isinstance(obj, dict):
        return {k: canonicalize(obj[k]) for k in sorted(obj.keys())}
    if isinstance(obj, (list, tuple)):
        return [canonicalize(x) for x in obj]
    return obj


def canonical_json_str(obj: Any, indent: Optional[int] = None) -> str:
    """
    Deterministic JSON string.

    Compact separators unless indent is given; ensure_ascii=False keeps
    UTF-8 aggregate ids readable.
    """
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        canonicalize(obj),
        sort_keys=True,
        separators=separators,
        indent=indent,
        ensure_ascii=False,
    )
