# formdoc/inputs.py
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional
from .normalizer import normalize
from .paths import display
from .schema import JSONSchemaNode

def _number(v: Any, integer: bool = False):
    if isinstance(v, bool):
        return int(v)
    try:
        n = float(v)
    except (TypeError, ValueError):
        return 0
    if n != n or n in (float("inf"), float("-inf")):
        return 0
    if integer or n.is_integer():
        return int(n)
    return n

def _coerce(prop: JSONSchemaNode, v: Any) -> Any:
    t = prop.type
    if t == "string":
        return v if isinstance(v, str) else display(v)
    if t in ("number", "integer"):
        return _number(v, integer=t == "integer")
    if t == "boolean":
        if isinstance(v, str):
            return v.strip().lower() in ("true", "1", "yes", "on")
        return bool(v)
    if t == "array":
        v = normalize(v)
        if isinstance(v, list):
            return v
        return [v] if v not in (None, "", False) else []
    if t == "object":
        return normalize(v)
    return v

def coerce_inputs(schema: Optional[JSONSchemaNode], inputs: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shape raw form values to their declared field types; undeclared keys are dropped."""
    inputs = dict(inputs or {})
    props = schema.properties if schema is not None else None
    if not props:
        return normalize(inputs)
    out: Dict[str, Any] = {}
    for key, value in inputs.items():
        if key in props:
            out[key] = _coerce(props[key], value)
    return out

def missing_required(schema: Optional[JSONSchemaNode], data: Optional[Mapping[str, Any]]) -> List[str]:
    if schema is None:
        return []
    data = data or {}
    return [k for k in schema.required if data.get(k) is None or data.get(k) == ""]
