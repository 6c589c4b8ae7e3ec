# formdoc/exporter.py
from __future__ import annotations
import io
from typing import Callable, List, Optional, Sequence
from xml.sax.saxutils import escape as xml_escape

from docx import Document
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Inches, Pt
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .config import Settings
from .converter import DEFAULT_MAX_ITERATIONS, convert_html, html_to_nodes, plain_text
from .logger import get_logger
from .nodes import HeadingNode, ImageNode, ListItemNode, ParagraphNode, TableNode

LOGGER = get_logger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

MAX_IMAGE_WIDTH_IN = 6
FALLBACK_FONT = "Helvetica"
FALLBACK_FONT_SIZE = 12
FALLBACK_LEADING = 14
FALLBACK_MARGIN = 50

PrintHtml = Callable[[str], bytes]


# ---- PDF ----

def _pdf_markup(text: str) -> str:
    return xml_escape(text).replace("\n", "<br/>")

def _pdf_image(node: ImageNode, max_width: float):
    reader = ImageReader(io.BytesIO(node.data))
    w, h = reader.getSize()
    scale = min(1.0, max_width / float(w)) if w else 1.0
    return Image(io.BytesIO(node.data), width=w * scale, height=h * scale)

def _pdf_table(node: TableNode, styles) -> Optional[Table]:
    cols = node.column_count
    if not cols:
        return None
    body = styles["BodyText"]
    data = [
        [Paragraph(_pdf_markup(c.text), body) for c in row] + [""] * (cols - len(row))
        for row in node.rows
    ]
    header_rows = 1 if all(c.header for c in node.rows[0]) else 0
    table = Table(data, repeatRows=header_rows)
    commands = [
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#e5e7eb")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]
    if header_rows:
        commands.append(("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#f9fafb")))
    table.setStyle(TableStyle(commands))
    return table

def _pdf_story(nodes: Sequence, frame_width: float) -> List:
    styles = getSampleStyleSheet()
    list_style = ParagraphStyle(name="FormdocListItem", parent=styles["Normal"], leftIndent=18, bulletIndent=6)
    story: List = []
    for node in nodes:
        if isinstance(node, HeadingNode):
            story.append(Paragraph(_pdf_markup(node.text), styles[f"Heading{node.level}"]))
        elif isinstance(node, ParagraphNode):
            text = _pdf_markup(node.text)
            story.append(Paragraph(f"<b>{text}</b>" if node.bold and text else text, styles["Normal"]))
            story.append(Spacer(1, 6))
        elif isinstance(node, ListItemNode):
            bullet = f"{node.index}." if node.ordered else "•"
            story.append(Paragraph(_pdf_markup(node.text), list_style, bulletText=bullet))
        elif isinstance(node, TableNode):
            table = _pdf_table(node, styles)
            if table is not None:
                story.extend([table, Spacer(1, 10)])
        elif isinstance(node, ImageNode):
            try:
                story.append(_pdf_image(node, frame_width))
            except (OSError, ValueError):
                LOGGER.warning("Unreadable %s image replaced by placeholder", node.mime_type)
                story.append(Paragraph("[Image]", styles["Normal"]))
    return story or [Spacer(1, 1)]

def print_with_reportlab(html: str, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> bytes:
    """Lay the converted document out on letter pages with 1in margins."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=letter,
        leftMargin=inch, rightMargin=inch, topMargin=inch, bottomMargin=inch,
    )
    doc.build(_pdf_story(html_to_nodes(html, max_iterations), doc.width))
    return buffer.getvalue()

def fallback_pdf(text: str) -> bytes:
    """Plain text drawn line by line in Helvetica 12pt; new pages as needed."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    width, height = letter
    pdf.setFont(FALLBACK_FONT, FALLBACK_FONT_SIZE)
    y = height - FALLBACK_MARGIN
    for raw in text.splitlines() or [""]:
        for line in simpleSplit(raw, FALLBACK_FONT, FALLBACK_FONT_SIZE, width - 2 * FALLBACK_MARGIN) or [""]:
            if y < FALLBACK_MARGIN:
                pdf.showPage()
                pdf.setFont(FALLBACK_FONT, FALLBACK_FONT_SIZE)
                y = height - FALLBACK_MARGIN
            pdf.drawString(FALLBACK_MARGIN, y, line)
            y -= FALLBACK_LEADING
    pdf.save()
    return buffer.getvalue()

def to_pdf(html: str, print_html: Optional[PrintHtml] = None, settings: Optional[Settings] = None) -> bytes:
    """HTML -> PDF bytes. Any failure of the print path degrades to `fallback_pdf`."""
    settings = settings or Settings()
    try:
        if print_html is not None:
            data = print_html(html)
        else:
            data = print_with_reportlab(html, settings.max_convert_iterations)
        if not data:
            raise ValueError("print engine returned no data")
        return data
    except Exception:
        LOGGER.warning("PDF print failed, using plain-text fallback", exc_info=True)
        return fallback_pdf(plain_text(html))


# ---- DOCX ----

def _docx_table(doc, node: TableNode):
    cols = node.column_count
    if not cols:
        return
    table = doc.add_table(rows=len(node.rows), cols=cols)
    table.style = "Table Grid"
    for r, row in enumerate(node.rows):
        for c, cell in enumerate(row):
            run = table.cell(r, c).paragraphs[0].add_run(cell.text)
            if cell.header:
                run.bold = True

def _docx_image(doc, node: ImageNode):
    try:
        shape = doc.add_picture(io.BytesIO(node.data))
    except UnrecognizedImageError:
        LOGGER.warning("Unsupported %s image replaced by placeholder", node.mime_type)
        doc.add_paragraph("[Image]")
        return
    max_width = Inches(MAX_IMAGE_WIDTH_IN)
    if shape.width > max_width:
        shape.height = int(shape.height * max_width / shape.width)
        shape.width = max_width

def _new_numbering(doc) -> Optional[int]:
    """Register a fresh instance of the `List Number` numbering that restarts at 1."""
    ppr = doc.styles["List Number"].element.pPr
    num_pr = ppr.numPr if ppr is not None else None
    if num_pr is None or num_pr.numId is None:
        return None
    numbering = doc.part.numbering_part.element
    base = numbering.num_having_numId(num_pr.numId.val)
    num = numbering.add_num(base.abstractNumId.val)
    num.add_lvlOverride(ilvl=0).add_startOverride(1)
    return num.numId

def _number_paragraph(paragraph, num_id: int):
    num_pr = paragraph._p.get_or_add_pPr().get_or_add_numPr()
    num_pr.get_or_add_ilvl().val = 0
    num_pr.get_or_add_numId().val = num_id

def to_docx(nodes: Sequence, settings: Optional[Settings] = None, title: Optional[str] = None) -> bytes:
    """Package nodes into a single-section Word document with 1in margins."""
    settings = settings or Settings()
    doc = Document()
    section = doc.sections[0]
    section.left_margin = section.right_margin = Inches(1)
    section.top_margin = section.bottom_margin = Inches(1)

    normal = doc.styles["Normal"]
    normal.font.name = settings.font_name
    normal.font.size = Pt(settings.font_size)
    normal.paragraph_format.space_after = Pt(6)
    if title:
        doc.core_properties.title = title

    num_id = None
    for node in nodes:
        if isinstance(node, HeadingNode):
            doc.add_heading(node.text, level=node.level)
        elif isinstance(node, ParagraphNode):
            run = doc.add_paragraph().add_run(node.text)
            if node.bold:
                run.bold = True
        elif isinstance(node, ListItemNode):
            paragraph = doc.add_paragraph(node.text, style="List Number" if node.ordered else "List Bullet")
            if node.ordered:
                # each list starting at 1 gets its own numbering instance
                if node.index == 1 or num_id is None:
                    num_id = _new_numbering(doc)
                if num_id is not None:
                    _number_paragraph(paragraph, num_id)
        elif isinstance(node, TableNode):
            _docx_table(doc, node)
        elif isinstance(node, ImageNode):
            _docx_image(doc, node)

    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()

def html_to_docx(html: str, settings: Optional[Settings] = None, title: Optional[str] = None) -> bytes:
    """Convert HTML to nodes and package them; a failed conversion yields one plain-text paragraph."""
    settings = settings or Settings()
    conversion = convert_html(html, settings.max_convert_iterations)
    nodes = conversion.nodes
    if conversion.fallback:
        nodes = [ParagraphNode(text=plain_text(html))]
    return to_docx(nodes, settings, title)
