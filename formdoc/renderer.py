# formdoc/renderer.py
from __future__ import annotations
import html as htmllib
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from .logger import get_logger
from .normalizer import normalize
from .paths import display, get_path
from .schema import (
    BindRef, CSSStyle, DividerBlock, HeadingBlock, KeyValueListBlock, KeyValueTableBlock,
    LineBlock, ListBlock, ParagraphBlock, SignatureBlock, SpacerBlock, TableBlock, TemplateConfig,
)
from .styles import css_to_string, heading_style, resolve_styles

LOGGER = get_logger(__name__)

MUSTACHE = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


def escape_html(v: Any) -> str:
    return htmllib.escape("" if v is None else (v if isinstance(v, str) else display(v)), quote=True)

def replace_mustache(text: str, data: Mapping[str, Any]) -> str:
    """Escape `text` and substitute each {{path}} with the escaped display value."""
    out: List[str] = []
    pos = 0
    for m in MUSTACHE.finditer(text):
        out.append(escape_html(text[pos:m.start()]))
        out.append(escape_html(display(get_path(data, m.group(1)))))
        pos = m.end()
    out.append(escape_html(text[pos:]))
    return "".join(out)

def _attr(style: Optional[CSSStyle]) -> str:
    s = css_to_string(style)
    return f' style="{escape_html(s)}"' if s else ""

def _bound_text(ref: Union[str, BindRef, None], data: Mapping[str, Any]) -> str:
    if isinstance(ref, BindRef):
        return escape_html(display(get_path(data, ref.bound_path())))
    return escape_html(display(ref))


# ---- one function per block type: (block, data, styles) -> html ----

def _heading(b: HeadingBlock, data, styles) -> str:
    level = b.level
    return f"<h{level}{_attr(heading_style(styles, level, b.style))}>{replace_mustache(b.text, data)}</h{level}>"

def _paragraph(b: ParagraphBlock, data, styles) -> str:
    if b.text is not None:
        text = replace_mustache(b.text, data)
    else:
        text = escape_html(display(get_path(data, b.bound_path())))
    return f"<p{_attr(b.style or styles.get('paragraph'))}>{text}</p>"

def _line(b: LineBlock, data, styles) -> str:
    texts = []
    for part in b.parts:
        pth = part.bound_path()
        val = get_path(data, pth) if pth else (part.text or "")
        texts.append(escape_html(display(val)))
    return f"<div{_attr(b.style or styles.get('line'))}>{' '.join(texts)}</div>"

def _list(b: ListBlock, data, styles) -> str:
    items: List[str] = []
    source = b.array_path()
    if source:
        arr = get_path(data, source)
        if isinstance(arr, list):
            items = [escape_html(display(v)) for v in arr]
    else:
        for it in b.items:
            if isinstance(it, str):
                items.append(replace_mustache(it, data))
                continue
            pth = it.bound_path()
            val = get_path(data, pth) if pth else (it.text or "")
            if isinstance(val, list):
                items.extend(escape_html(display(v)) for v in val)
            else:
                items.append(escape_html(display(val)))
    li_attr = _attr(styles.get("listItem"))
    tag = "ol" if b.ordered else "ul"
    lis = "".join(f"<li{li_attr}>{t}</li>" for t in items)
    return f"<{tag}{_attr(b.style or styles.get('list'))}>{lis}</{tag}>"

def _table(b: TableBlock, data, styles) -> str:
    source = b.array_path()
    rows_src = get_path(data, source) if source else [data]
    rows = rows_src if isinstance(rows_src, list) else []
    th_attr = _attr(b.header_style or styles.get("th"))
    td_attr = _attr(b.cell_style or styles.get("td"))
    head = "".join(f"<th{th_attr}>{escape_html(c.header)}</th>" for c in b.columns)
    body = "".join(
        "<tr>" + "".join(
            f"<td{td_attr}>{escape_html(display(get_path(row, c.path)))}</td>" for c in b.columns
        ) + "</tr>"
        for row in rows
    )
    return f"<table{_attr(b.style or styles.get('table'))}><thead><tr>{head}</tr></thead><tbody>{body}</tbody></table>"

def _key_value_table(b: KeyValueTableBlock, data, styles) -> str:
    th_attr, td_attr = _attr(styles.get("th")), _attr(styles.get("td"))
    body = "".join(
        f"<tr><th{th_attr}>{escape_html(r.label)}</th>"
        f"<td{td_attr}>{escape_html(display(get_path(data, r.bound_path())))}</td></tr>"
        for r in b.rows
    )
    return f"<table{_attr(b.style or styles.get('table'))}><tbody>{body}</tbody></table>"

def _key_value_list(b: KeyValueListBlock, data, styles) -> str:
    row_attr = _attr(styles.get("kvRow"))
    label_attr = _attr(styles.get("kvLabel"))
    value_attr = _attr(styles.get("kvValue"))
    rows = "".join(
        f'<div class="kv-row"{row_attr}>'
        f'<div class="kv-label"{label_attr}>{escape_html(r.label)}</div>'
        f'<div class="kv-value"{value_attr}>{escape_html(display(get_path(data, r.bound_path())))}</div>'
        "</div>"
        for r in b.rows
    )
    return f'<div class="kv-list"{_attr(b.style or styles.get("kvList"))}>{rows}</div>'

def _divider(b: DividerBlock, data, styles) -> str:
    return f"<hr{_attr(b.style or styles.get('divider'))}/>"

def _spacer(b: SpacerBlock, data, styles) -> str:
    size = int(b.size) if float(b.size).is_integer() else b.size
    return f'<div style="height:{size}px"></div>'

def _signature(b: SignatureBlock, data, styles) -> str:
    name = _bound_text(b.name, data)
    title = _bound_text(b.title, data)
    greeting = "<div>Regards,</div>" if b.show_regards else ""
    title_html = f"<div>{title}</div>" if title else ""
    return (
        f"<div{_attr(b.style or styles.get('signature'))}>{greeting}"
        f'<div style="margin-top:12px;font-weight:600;">{name}</div>{title_html}</div>'
    )

BLOCK_RENDERERS: Dict[str, Callable[..., str]] = {
    "heading": _heading,
    "paragraph": _paragraph,
    "line": _line,
    "list": _list,
    "table": _table,
    "keyValueTable": _key_value_table,
    "keyValueList": _key_value_list,
    "divider": _divider,
    "spacer": _spacer,
    "signature": _signature,
}


def _as_config(config: Union[TemplateConfig, Dict[str, Any]]) -> TemplateConfig:
    return config if isinstance(config, TemplateConfig) else TemplateConfig.model_validate(config)

def render_blocks(config: Union[TemplateConfig, Dict[str, Any]], data: Optional[Mapping[str, Any]]) -> str:
    """Bind `data` into each block in order and return the joined HTML fragments."""
    config = _as_config(config)
    styles = resolve_styles(config.styles)
    normalized = normalize(dict(data or {}))
    parts: List[str] = []
    for block in config.blocks:
        fn = BLOCK_RENDERERS.get(getattr(block, "type", None))
        if fn is None:
            LOGGER.warning("No renderer for block type %r; skipped", getattr(block, "type", None))
            continue
        parts.append(fn(block, normalized, styles))
    return "\n".join(parts)


PRINT_STYLESHEET = """
      @page { margin: 1in; }
      :root { --text-color: #111827; --muted-color: #6b7280; --border-color:#e5e7eb; --bg-muted:#f9fafb; }
      html,body{padding:0;margin:0}
      body{font-family: system-ui, -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, 'Noto Sans', sans-serif; font-size: 12pt; line-height: 1.5; color: var(--text-color); }
      .container{max-width: 7in; margin: 0 auto;}
      h1,h2,h3,h4,h5,h6{margin: 0 0 12pt 0; line-height: 1.25; font-weight: 700;}
      h1{font-size: 20pt; margin-top: 0;}
      h2{font-size: 16pt; margin-top: 16pt;}
      h3{font-size: 14pt; margin-top: 14pt;}
      p{margin: 0 0 10pt 0;}
      ul,ol{margin: 0 0 10pt 1.25rem; padding: 0;}
      li{margin: 4pt 0;}
      table{border-collapse: collapse; width: 100%; margin: 10pt 0;}
      th,td{border: 1px solid var(--border-color); padding: 6pt 8pt; text-align: left; vertical-align: top;}
      thead th{background: var(--bg-muted); font-weight: 600;}
      tbody tr:nth-child(even){background: #fafafa;}
      img{max-width:100%; height:auto;}
      hr{border:0; border-top: 1px solid var(--border-color); margin: 12pt 0;}
      .kv-list{display: grid; grid-template-columns: 1.75in 1fr; gap: 6pt 12pt;}
      .kv-label{font-weight: 600; color: var(--muted-color);}
      .kv-row{display: contents;}
      @media print {
        body{-webkit-print-color-adjust: exact; print-color-adjust: exact;}
        table, tr, td, th { page-break-inside: avoid; }
        h1,h2,h3{ page-break-after: avoid; }
      }
"""

def render_document(
    config: Union[TemplateConfig, Dict[str, Any]],
    data: Optional[Mapping[str, Any]],
    title: Optional[str] = None,
    default_title: str = "Document",
) -> str:
    """Full printable HTML page: blocks wrapped in the print stylesheet and container."""
    config = _as_config(config)
    styles = resolve_styles(config.styles)
    body = render_blocks(config, data)
    doc_title = title or config.title or default_title
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{escape_html(doc_title)}</title>
    <style>{PRINT_STYLESHEET}    </style>
  </head>
  <body>
    <div class="container"{_attr(styles.get('document'))}>
      {body}
    </div>
  </body>
</html>"""
