# formdoc/generator.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union
from pydantic import BaseModel, ValidationError
from .compiler import compile_schema
from .config import Settings
from .errors import InvalidTemplateError, MissingFieldsError, UnsupportedFormatError
from .exporter import DOCX_MIME, PDF_MIME, PrintHtml, html_to_docx, to_pdf
from .inputs import coerce_inputs, missing_required
from .logger import get_logger
from .normalizer import normalize
from .renderer import render_document
from .schema import TemplateConfig, TemplateRecord

LOGGER = get_logger(__name__)

MIME_TYPES = {"pdf": PDF_MIME, "docx": DOCX_MIME}


class GeneratedDocument(BaseModel):
    content: bytes
    mime_type: str
    extension: str
    html: str


def _as_record(template: Union[TemplateRecord, Dict[str, Any]]) -> TemplateRecord:
    return template if isinstance(template, TemplateRecord) else TemplateRecord.model_validate(template)

def resolve_template(template: Union[TemplateRecord, Dict[str, Any]]) -> TemplateConfig:
    """Authored `metadata.templateConfig` if the record has one, else a layout compiled from its schema."""
    record = _as_record(template)
    authored = record.metadata.get("templateConfig")
    if authored:
        config = authored if isinstance(authored, TemplateConfig) else TemplateConfig.model_validate(normalize(authored))
    else:
        config = compile_schema(record.json_schema)
    if not config.title:
        config = config.model_copy(update={"title": record.name})
    return config

def generate_document(
    template: Union[TemplateRecord, Dict[str, Any]],
    inputs: Optional[Mapping[str, Any]],
    file_type: str,
    settings: Optional[Settings] = None,
    print_html: Optional[PrintHtml] = None,
    generated_at: Optional[datetime] = None,
) -> GeneratedDocument:
    settings = settings or Settings()
    kind = (file_type or "").strip().lower()
    if kind not in MIME_TYPES:
        raise UnsupportedFormatError(file_type)

    try:
        record = _as_record(template)
        config = resolve_template(record)
    except ValidationError as e:
        raise InvalidTemplateError(f"Invalid template: {e}") from e

    schema = record.schema_node()
    raw = normalize(dict(inputs or {}))
    missing = missing_required(schema, raw)
    if missing:
        raise MissingFieldsError(missing)

    data = coerce_inputs(schema, raw)
    data["_template_name"] = record.name
    data["_generated_at"] = (generated_at or datetime.now()).isoformat(timespec="seconds")

    LOGGER.info("Generating %s for template %r (%d blocks)", kind.upper(), record.name, len(config.blocks))
    html = render_document(config, data, default_title=settings.default_title)

    if kind == "pdf":
        content = to_pdf(html, print_html=print_html, settings=settings)
    else:
        content = html_to_docx(html, settings=settings, title=config.title)
    LOGGER.info("Generated %s (%d bytes)", kind.upper(), len(content))
    return GeneratedDocument(content=content, mime_type=MIME_TYPES[kind], extension=kind, html=html)
