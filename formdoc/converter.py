# formdoc/converter.py
from __future__ import annotations
import base64
import binascii
import html as htmllib
import re
from functools import lru_cache, partial
from typing import List, NamedTuple, Optional, Tuple
from .logger import get_logger
from .nodes import (
    CellNode, Conversion, HeadingNode, ImageNode, ListItemNode, ParagraphNode, TableNode,
)

LOGGER = get_logger(__name__)

DEFAULT_MAX_ITERATIONS = 10000

_FLAGS = re.I | re.S

# removed before scanning; their text must never reach the output
_INVISIBLE = re.compile(r"<!--.*?-->|<(style|script|head)\b[^>]*>.*?</\1\s*>", _FLAGS)

_TABLE_OPEN = re.compile(r"<table\b[^>]*>", re.I)
_HEADING_OPEN = re.compile(r"<h([1-6])\b[^>]*>", re.I)
_LIST_OPEN = re.compile(r"<(ul|ol)\b[^>]*>", re.I)
_IMG = re.compile(r"<img\b[^>]*>", re.I)

_FRONT_BR = re.compile(r"<br\b[^>]*>", re.I)
_FRONT_BLOCK = re.compile(r"<(p|div)\b([^>]*)>", re.I)
_BLOCK_START = re.compile(r"<(?:p|div|br)\b", re.I)
_NESTED_BLOCK = re.compile(r"<(?:p|div)\b", re.I)

_ROW = re.compile(r"<tr\b[^>]*>(.*?)</tr\s*>", _FLAGS)
_CELL = re.compile(r"<(td|th)\b[^>]*>(.*?)</\1\s*>", _FLAGS)
_LI = re.compile(r"<li\b[^>]*>(.*?)</li\s*>", _FLAGS)
_LI_OPEN = re.compile(r"<li\b[^>]*>", re.I)
_SRC = re.compile(r"""\bsrc\s*=\s*(["'])(.*?)\1""", _FLAGS)
_DATA_URI = re.compile(r"^data:(image/[\w.+-]+);base64,(.*)$", re.S)
_BOLD_WRAP = re.compile(r"\s*<(b|strong)\b[^>]*>(.*)</\1\s*>\s*", _FLAGS)
_BOLD_STYLE = re.compile(r"font-weight\s*:\s*(bold|[6-9]00)", re.I)

_BREAKS = re.compile(r"<br\b[^>]*>|</(?:p|div|h[1-6]|li|tr|table|ul|ol)\s*>", re.I)
_TAG = re.compile(r"<[^>]+>")
_SPACE = re.compile(r"\s*")


class _Match(NamedTuple):
    start: int
    end: int
    kind: str
    open_tag: str
    inner: str
    name: str


# ---- text helpers ----

def strip_tags(fragment: str) -> str:
    """Drop markup; block closers and <br> become newlines, entities are decoded."""
    text = _BREAKS.sub("\n", fragment)
    return htmllib.unescape(_TAG.sub("", text))

def _inline_text(fragment: str) -> str:
    return " ".join(strip_tags(fragment).split())

def _paragraph_texts(fragment: str) -> List[str]:
    out = []
    for chunk in re.split(r"\n\s*\n", strip_tags(fragment)):
        lines = [" ".join(l.split()) for l in chunk.splitlines()]
        text = "\n".join(l for l in lines if l)
        if text:
            out.append(text)
    return out

def _text_paragraphs(fragment: str) -> List[ParagraphNode]:
    return [ParagraphNode(text=t) for t in _paragraph_texts(fragment)]

def plain_text(html: str) -> str:
    """Whole-document text, blank-line separated paragraphs."""
    return "\n\n".join(_paragraph_texts(_INVISIBLE.sub("", html or "")))

def plain_text_nodes(html: str) -> List[ParagraphNode]:
    return _text_paragraphs(_INVISIBLE.sub("", html or ""))


# ---- tag extraction ----

# (match or None, last position the result is valid for)
_Found = Tuple[Optional[_Match], int]

@lru_cache(maxsize=None)
def _closer(tag: str) -> re.Pattern:
    return re.compile(rf"</{tag}\s*>", re.I)

def _paired(html: str, pos: int, opener: re.Pattern, kind: str) -> _Found:
    """First opening tag at or after `pos` and the first closing tag after it (no nesting awareness)."""
    m = opener.search(html, pos)
    if not m:
        return None, len(html)
    name = m.group(1).lower() if opener.groups else kind
    tag = f"h{name}" if kind == "heading" else name
    close = _closer(tag).search(html, m.end())
    if not close:
        return None, m.start()
    return _Match(m.start(), close.end(), kind, m.group(0), html[m.end():close.start()], name), m.start()

def _image(html: str, pos: int) -> _Found:
    m = _IMG.search(html, pos)
    if not m:
        return None, len(html)
    return _Match(m.start(), m.end(), "image", m.group(0), "", "img"), m.start()

# in precedence order
_FINDERS = (
    partial(_paired, opener=_TABLE_OPEN, kind="table"),
    partial(_paired, opener=_HEADING_OPEN, kind="heading"),
    partial(_paired, opener=_LIST_OPEN, kind="list"),
    _image,
)


class _Candidates:
    """Next table, heading, list and image from a moving position; each result is reused until passed."""

    def __init__(self, html: str):
        self.html = html
        self._found: List[Optional[_Found]] = [None] * len(_FINDERS)

    def first(self, pos: int) -> Optional[_Match]:
        matches = []
        for i, finder in enumerate(_FINDERS):
            found = self._found[i]
            if found is None or pos > found[1]:
                found = self._found[i] = finder(self.html, pos)
            if found[0] is not None:
                matches.append(found[0])
        if not matches:
            return None
        # precedence order breaks ties; otherwise the earliest tag in the text wins
        return min(matches, key=lambda f: f.start)


# ---- node builders ----

def _table_node(inner: str) -> TableNode:
    rows = []
    for row_html in _ROW.findall(inner):
        cells = [CellNode(text=_inline_text(body), header=tag.lower() == "th") for tag, body in _CELL.findall(row_html)]
        if cells:
            rows.append(cells)
    return TableNode(rows=rows)

def _list_nodes(inner: str, ordered: bool) -> List[ListItemNode]:
    bodies = _LI.findall(inner)
    if not bodies:
        # <li> without closing tags
        bodies = _LI_OPEN.split(inner)[1:]
    texts = [_inline_text(b) for b in bodies]
    return [ListItemNode(text=t, ordered=ordered, index=i) for i, t in enumerate(texts, start=1)]

def _image_node(tag: str):
    src = _SRC.search(tag)
    uri = htmllib.unescape(src.group(2)).strip() if src else ""
    m = _DATA_URI.match(uri)
    if m:
        try:
            return ImageNode(data=base64.b64decode("".join(m.group(2).split())), mime_type=m.group(1).lower())
        except (binascii.Error, ValueError):
            LOGGER.debug("Undecodable image data URI; using placeholder")
    return ParagraphNode(text="[Image]")

def _convert_match(match: _Match) -> list:
    if match.kind == "table":
        return [_table_node(match.inner)]
    if match.kind == "heading":
        return [HeadingNode(text=_inline_text(match.inner), level=int(match.name))]
    if match.kind == "list":
        return list(_list_nodes(match.inner, ordered=match.name == "ol"))
    return [_image_node(match.open_tag)]

def _front_block(html: str, pos: int, limit: int) -> Optional[Tuple[list, int]]:
    """Unwrap a <p>, <div> or <br> sitting at `pos`. Returns (nodes, new position)."""
    br = _FRONT_BR.match(html, pos)
    if br:
        return [ParagraphNode(text="")], br.end()
    opening = _FRONT_BLOCK.match(html, pos)
    if not opening:
        return None
    close = _closer(opening.group(1).lower()).search(html, opening.end(), limit)
    if close is None or _NESTED_BLOCK.search(html, opening.end(), close.start()):
        # unterminated, wraps a table/heading/list/image, or holds nested blocks:
        # drop just the opening tag
        return [], opening.end()
    inner = html[opening.end():close.start()]
    bold = bool(_BOLD_STYLE.search(opening.group(2)) or _BOLD_WRAP.fullmatch(inner))
    text = "\n".join(_paragraph_texts(inner))
    return [ParagraphNode(text=text, bold=bold)], close.end()


def _scan(html: str, max_iterations: int) -> list:
    nodes: list = []
    text = _INVISIBLE.sub("", html).strip()
    candidates = _Candidates(text)
    end = len(text)
    pos = 0
    iterations = 0
    while pos < end:
        iterations += 1
        if iterations > max_iterations:
            LOGGER.debug("Converter iteration cap (%d) hit; rest kept as text", max_iterations)
            nodes.extend(_text_paragraphs(text[pos:]))
            break
        start = pos
        match = candidates.first(pos)
        limit = match.start if match else end

        front = _front_block(text, pos, limit)
        if front is not None:
            found, pos = front
            nodes.extend(found)
        elif match is not None and match.start == pos:
            nodes.extend(_convert_match(match))
            pos = match.end
        else:
            nxt = _BLOCK_START.search(text, pos + 1, limit)
            stop = nxt.start() if nxt else limit
            nodes.extend(_text_paragraphs(text[pos:stop]))
            pos = stop

        pos = _SPACE.match(text, pos).end()
        if pos <= start:
            LOGGER.debug("Converter made no progress; dropping one character")
            pos = start + 1
    return nodes


def convert_html(html: Optional[str], max_iterations: int = DEFAULT_MAX_ITERATIONS) -> Conversion:
    """
    Rebuild word-processor nodes from HTML by greedy tag extraction.

    Tables, headings (h1-h6), lists (ul/ol) and images are pulled out in document
    order; text between them becomes paragraphs. If anything goes wrong the
    whole input is reduced to plain-text paragraphs and `fallback` is set.
    """
    if not html:
        return Conversion()
    try:
        return Conversion(nodes=_scan(html, max_iterations))
    except Exception:
        LOGGER.warning("HTML conversion failed; falling back to plain text", exc_info=True)
        return Conversion(nodes=plain_text_nodes(html), fallback=True)


def html_to_nodes(html: Optional[str], max_iterations: int = DEFAULT_MAX_ITERATIONS) -> list:
    return convert_html(html, max_iterations).nodes
