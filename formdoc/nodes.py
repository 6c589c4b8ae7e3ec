# formdoc/nodes.py
from __future__ import annotations
from typing import Annotated, List, Literal, Union
from pydantic import BaseModel, ConfigDict, Field


class ParagraphNode(BaseModel):
    kind: Literal["paragraph"] = "paragraph"
    text: str = ""
    bold: bool = False


class HeadingNode(BaseModel):
    kind: Literal["heading"] = "heading"
    text: str = ""
    level: int = 1


class ListItemNode(BaseModel):
    kind: Literal["listItem"] = "listItem"
    text: str = ""
    ordered: bool = False
    index: int = 1  # 1-based position inside its list


class CellNode(BaseModel):
    text: str = ""
    header: bool = False


class TableNode(BaseModel):
    kind: Literal["table"] = "table"
    rows: List[List[CellNode]] = Field(default_factory=list)

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)


class ImageNode(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64")

    kind: Literal["image"] = "image"
    data: bytes = b""
    mime_type: str = "image/png"


DocumentNode = Annotated[
    Union[ParagraphNode, HeadingNode, ListItemNode, TableNode, ImageNode],
    Field(discriminator="kind"),
]


class Conversion(BaseModel):
    """Converter output; `fallback` is set when markup could not be parsed and only plain text was kept."""
    nodes: List[DocumentNode] = Field(default_factory=list)
    fallback: bool = False
