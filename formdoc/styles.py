# formdoc/styles.py
from __future__ import annotations
import re
from typing import Dict, Mapping, Optional
from .schema import CSSStyle

CANONICAL_KEYS = (
    "document", "heading", "paragraph", "line", "list", "listItem",
    "table", "th", "td", "divider", "signature",
    "kvList", "kvRow", "kvLabel", "kvValue",
)

# alias -> canonical key; a canonical key wins over its alias when both are given
STYLE_ALIASES = {
    "page": "document",
    "p": "paragraph",
}

HEADING_LEVEL_KEYS = {level: f"h{level}" for level in range(1, 7)}

def resolve_styles(styles: Optional[Mapping[str, CSSStyle]]) -> Dict[str, CSSStyle]:
    """Canonicalize a template's style table; heading levels stay under 'h1'..'h6'."""
    s = dict(styles or {})
    out: Dict[str, CSSStyle] = {}
    for alias, canon in STYLE_ALIASES.items():
        if s.get(alias):
            out[canon] = s[alias]
    for key in CANONICAL_KEYS:
        if s.get(key):
            out[key] = s[key]
    for key in HEADING_LEVEL_KEYS.values():
        if s.get(key):
            out[key] = s[key]
    return out

def heading_style(styles: Mapping[str, CSSStyle], level: int, own: Optional[CSSStyle] = None) -> Optional[CSSStyle]:
    return own or styles.get(HEADING_LEVEL_KEYS.get(level, "")) or styles.get("heading")

def _kebab(name: str) -> str:
    return re.sub(r"[A-Z]", lambda m: "-" + m.group(0).lower(), name)

def _css_value(v) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)

def css_to_string(style: Optional[CSSStyle]) -> str:
    """{'fontSize': '12pt', 'color': '#111'} -> 'font-size:12pt;color:#111'"""
    if not style:
        return ""
    return ";".join(
        f"{_kebab(k)}:{_css_value(v)}" for k, v in style.items()
        if v is not None and v != ""
    )
