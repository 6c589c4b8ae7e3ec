# formdoc/schema.py
from __future__ import annotations
import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from .logger import get_logger

LOGGER = get_logger(__name__)

CSSPrimitive = Union[str, int, float]
CSSStyle = Dict[str, Optional[CSSPrimitive]]


class _Model(BaseModel):
    # authored templates use camelCase keys (dataPath, showRegards, ...)
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Bind(_Model):
    path: Optional[str] = None


class BindRef(_Model):
    """Either `{"bind": {"path": "a.b"}}` or a bare `path` points into the data."""
    bind: Optional[Bind] = None
    path: Optional[str] = None

    def bound_path(self) -> Optional[str]:
        if self.bind and self.bind.path:
            return self.bind.path
        return self.path or None


class LinePart(BindRef):
    text: Optional[str] = None


class TableColumn(_Model):
    header: str = ""
    path: str = ""


class KeyValueRow(BindRef):
    label: str = ""


# ---- blocks ----

class HeadingBlock(_Model):
    type: Literal["heading"] = "heading"
    text: str = ""
    level: int = 2
    style: Optional[CSSStyle] = None

    @field_validator("level", mode="before")
    @classmethod
    def _clamp_level(cls, v):
        try:
            level = int(v or 2)
        except (TypeError, ValueError):
            level = 2
        return min(max(level, 1), 6)


class ParagraphBlock(BindRef):
    type: Literal["paragraph"] = "paragraph"
    text: Optional[str] = None
    style: Optional[CSSStyle] = None


class LineBlock(_Model):
    type: Literal["line"] = "line"
    parts: List[LinePart] = Field(default_factory=list)
    style: Optional[CSSStyle] = None


class ListBlock(BindRef):
    type: Literal["list"] = "list"
    items: List[Union[str, LinePart]] = Field(default_factory=list)
    ordered: bool = False
    data_path: Optional[str] = Field(default=None, alias="dataPath")
    source_path: Optional[str] = Field(default=None, alias="sourcePath")  # older seed templates
    style: Optional[CSSStyle] = None

    def array_path(self) -> Optional[str]:
        return self.data_path or self.source_path or self.bound_path()


class TableBlock(BindRef):
    type: Literal["table"] = "table"
    columns: List[TableColumn] = Field(default_factory=list)
    data_path: Optional[str] = Field(default=None, alias="dataPath")
    source_path: Optional[str] = Field(default=None, alias="sourcePath")
    style: Optional[CSSStyle] = None
    header_style: Optional[CSSStyle] = Field(default=None, alias="headerStyle")
    cell_style: Optional[CSSStyle] = Field(default=None, alias="cellStyle")

    def array_path(self) -> Optional[str]:
        return self.data_path or self.source_path or self.bound_path()


class KeyValueTableBlock(_Model):
    type: Literal["keyValueTable"] = "keyValueTable"
    rows: List[KeyValueRow] = Field(default_factory=list)
    style: Optional[CSSStyle] = None


class KeyValueListBlock(_Model):
    type: Literal["keyValueList"] = "keyValueList"
    rows: List[KeyValueRow] = Field(default_factory=list)
    style: Optional[CSSStyle] = None


class DividerBlock(_Model):
    type: Literal["divider"] = "divider"
    style: Optional[CSSStyle] = None


class SpacerBlock(_Model):
    type: Literal["spacer"] = "spacer"
    size: Union[int, float] = 12


class SignatureBlock(_Model):
    type: Literal["signature"] = "signature"
    name: Optional[Union[str, BindRef]] = None
    title: Optional[Union[str, BindRef]] = None
    show_regards: bool = Field(default=False, alias="showRegards")
    style: Optional[CSSStyle] = None


TemplateBlock = Annotated[
    Union[
        HeadingBlock, ParagraphBlock, LineBlock, ListBlock, TableBlock,
        KeyValueTableBlock, KeyValueListBlock, DividerBlock, SpacerBlock, SignatureBlock,
    ],
    Field(discriminator="type"),
]

BLOCK_TYPES = (
    "heading", "paragraph", "line", "list", "table",
    "keyValueTable", "keyValueList", "divider", "spacer", "signature",
)


class TemplateConfig(_Model):
    title: Optional[str] = None
    styles: Dict[str, CSSStyle] = Field(default_factory=dict)
    blocks: List[TemplateBlock] = Field(default_factory=list)

    @field_validator("styles", mode="before")
    @classmethod
    def _none_styles(cls, v):
        return v or {}

    @model_validator(mode="before")
    @classmethod
    def _drop_unknown_blocks(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        blocks = data.get("blocks")
        if not isinstance(blocks, list):
            return {**data, "blocks": []} if blocks is None else data
        kept = []
        for i, block in enumerate(blocks):
            kind = block.get("type") if isinstance(block, dict) else getattr(block, "type", None)
            if kind not in BLOCK_TYPES:
                LOGGER.warning("Skipping block %d with unknown type %r", i, kind)
                continue
            kept.append(block)
        return {**data, "blocks": kept}

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---- form schema ----

class JSONSchemaNode(_Model):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    type: Optional[str] = None
    title: Optional[str] = None
    format: Optional[str] = None
    enum: Optional[List[Any]] = None
    items: Optional[JSONSchemaNode] = None
    properties: Optional[Dict[str, JSONSchemaNode]] = None
    required: List[str] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _nullable_type(cls, v):
        # ["string", "null"] -> "string"
        if isinstance(v, list):
            return next((t for t in v if t != "null"), None)
        return v

    @field_validator("required", mode="before")
    @classmethod
    def _none_required(cls, v):
        return v if isinstance(v, list) else []


JSONSchemaNode.model_rebuild()


def parse_schema(raw: Any, where: str = "schema") -> Optional[JSONSchemaNode]:
    """
    Lenient JSONSchemaNode construction.

    A property or `items` entry that does not validate is skipped with a
    warning and its siblings are kept. Returns None when `raw` itself is unusable.
    """
    if isinstance(raw, JSONSchemaNode):
        return raw
    if not isinstance(raw, dict):
        LOGGER.warning("Skipping %s: expected an object, got %s", where, type(raw).__name__)
        return None
    fields = dict(raw)
    props = fields.get("properties")
    if isinstance(props, dict):
        kept = {}
        for key, sub in props.items():
            node = parse_schema(sub, f"{where}.properties.{key}")
            if node is not None:
                kept[key] = node
        fields["properties"] = kept
    elif props is not None:
        LOGGER.warning("Ignoring %s.properties: expected an object, got %s", where, type(props).__name__)
        fields.pop("properties")
    if fields.get("items") is not None:
        items = parse_schema(fields["items"], f"{where}.items")
        if items is None:
            fields.pop("items")
        else:
            fields["items"] = items
    try:
        return JSONSchemaNode.model_validate(fields)
    except ValidationError as e:
        LOGGER.warning("Skipping %s: %s", where, e)
        return None


class TemplateRecord(_Model):
    """A stored template: display name, the form schema, and optional authored layout."""
    id: Optional[str] = None
    name: str = "Document"
    json_schema: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("json_schema", mode="before")
    @classmethod
    def _decode_schema(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v.strip() else None
        return v

    @field_validator("metadata", mode="before")
    @classmethod
    def _decode_metadata(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v.strip() else {}
        return v or {}

    def schema_node(self) -> Optional[JSONSchemaNode]:
        if not self.json_schema:
            return None
        return parse_schema(self.json_schema)
