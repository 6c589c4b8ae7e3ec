# formdoc/normalizer.py
from __future__ import annotations
import json
from typing import Any, Dict, Optional

# containers nested deeper than this are returned as they are
MAX_DEPTH = 200

def _looks_like_json_container(s: str) -> bool:
    t = s.strip()
    return (t.startswith("{") and t.endswith("}")) or (t.startswith("[") and t.endswith("]"))

def _try_parse_json(s: str) -> Any:
    try:
        return json.loads(s)
    except (ValueError, RecursionError):
        return None

def normalize(value: Any, seen: Optional[Dict[int, Any]] = None, depth: int = 0) -> Any:
    """
    Rehydrate JSON-encoded strings ('{...}' / '[...]') into dicts/lists, recursively.

    `seen` maps id(container) -> its normalized copy for the current call, so
    a container reached twice (shared or self-referencing) is not descended
    again; the copy already built for it is reused instead.
    Never raises: strings that do not parse stay as they are, and anything
    below MAX_DEPTH levels of nesting is kept without being walked.
    """
    if seen is None:
        seen = {}
    if depth > MAX_DEPTH:
        return value
    if isinstance(value, str):
        if _looks_like_json_container(value):
            parsed = _try_parse_json(value)
            if isinstance(parsed, (dict, list)):
                return normalize(parsed, seen, depth)
        return value
    if isinstance(value, (list, tuple)):
        if id(value) in seen:
            return seen[id(value)]
        out_list: list = []
        seen[id(value)] = out_list
        out_list.extend(normalize(v, seen, depth + 1) for v in value)
        return out_list
    if isinstance(value, dict):
        if id(value) in seen:
            return seen[id(value)]
        out: Dict[Any, Any] = {}
        seen[id(value)] = out
        for k, v in value.items():
            out[k] = normalize(v, seen, depth + 1)
        return out
    return value
