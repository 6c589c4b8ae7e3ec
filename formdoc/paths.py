# formdoc/paths.py
from __future__ import annotations
import json
from typing import Any, Optional

def get_path(data: Any, path: Optional[str]) -> Any:
    """Resolve 'a.b.c' against nested dicts (numeric segments index lists). Missing -> None."""
    if not path:
        return None
    acc = data
    for key in path.split("."):
        if acc is None:
            return None
        if isinstance(acc, dict):
            acc = acc.get(key)
        elif isinstance(acc, (list, tuple)) and key.isdigit():
            idx = int(key)
            acc = acc[idx] if idx < len(acc) else None
        else:
            return None
    return acc

def _compact_json(v: Any) -> str:
    try:
        return json.dumps(v, separators=(",", ":"), ensure_ascii=False, default=str)
    except ValueError:  # circular reference
        return str(v)
    except RecursionError:
        return "{...}" if isinstance(v, dict) else "[...]"

def _scalar(v: Any) -> str:
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)

def display(v: Any) -> str:
    """Text form of a resolved value: lists join with ', ', objects become compact JSON."""
    if isinstance(v, (list, tuple)):
        return ", ".join(_compact_json(x) if isinstance(x, (dict, list, tuple)) else _scalar(x) for x in v)
    if isinstance(v, dict):
        return _compact_json(v)
    return _scalar(v)
