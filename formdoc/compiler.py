# formdoc/compiler.py
from __future__ import annotations
import re
from typing import Any, Dict, List, Union
from .schema import (
    HeadingBlock, JSONSchemaNode, KeyValueListBlock, KeyValueRow, ListBlock,
    TableBlock, TableColumn, TemplateConfig, parse_schema,
)


def title_case(key: str) -> str:
    """'unit_price' -> 'Unit Price', 'due-date' -> 'Due Date'."""
    spaced = re.sub(r"[_-]", " ", key)
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), spaced)

def _label(key: str, node: JSONSchemaNode) -> str:
    return node.title or title_case(key)

def _compile_properties(node: JSONSchemaNode, prefix: str = "", depth: int = 0) -> List[Any]:
    blocks: List[Any] = []
    rows: List[KeyValueRow] = []

    def flush():
        if rows:
            blocks.append(KeyValueListBlock(rows=list(rows)))
            rows.clear()

    for key, prop in (node.properties or {}).items():
        path = f"{prefix}.{key}" if prefix else key
        if prop.type == "array":
            flush()
            items = prop.items
            if items is not None and items.type == "object":
                columns = [
                    TableColumn(header=_label(k, p), path=k)
                    for k, p in (items.properties or {}).items()
                ]
                blocks.append(TableBlock(columns=columns, data_path=path))
            else:
                blocks.append(ListBlock(data_path=path))
        elif prop.type == "object" and prop.properties:
            flush()
            blocks.append(HeadingBlock(text=_label(key, prop), level=min(depth + 2, 6)))
            blocks.extend(_compile_properties(prop, path, depth + 1))
        else:
            # primitives, plus objects without declared properties (shown as JSON)
            rows.append(KeyValueRow(label=_label(key, prop), path=path))
    flush()
    return blocks

def compile_schema(schema: Union[JSONSchemaNode, Dict[str, Any], None]) -> TemplateConfig:
    """Derive a block template from a form schema, in property declaration order.

    Properties that do not validate are skipped (see `parse_schema`); an
    unreadable schema compiles to an empty template.
    """
    if schema is None:
        return TemplateConfig()
    node = parse_schema(schema)
    if node is None:
        return TemplateConfig()
    return TemplateConfig(title=node.title, blocks=_compile_properties(node))
