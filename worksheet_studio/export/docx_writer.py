"""Serialization of document blocks to .docx with python-docx."""

import re
from io import BytesIO
from typing import Iterable

from docx import Document
from docx.document import Document as DocxDocument
from docx.enum.text import WD_ALIGN_PARAGRAPH, WD_TAB_ALIGNMENT
from docx.shared import Emu, Inches, Pt, RGBColor

from worksheet_studio.export.blocks import (
    BODY_FONT_NAME,
    BODY_FONT_SIZE,
    Alignment,
    DocumentBlock,
)
from worksheet_studio.export.errors import SerializationError

PAGE_MARGIN = Inches(1)
HANGING_INDENT = Inches(0.25)
EMU_PER_PIXEL = 9525  # 96 dpi
MAX_CORE_PROPERTY_LENGTH = 255

# Vertical tab and form feed are soft breaks in text pasted from Word
_SOFT_BREAKS = str.maketrans({"\x0b": "\n", "\x0c": "\n"})
# Anything else outside the XML 1.0 character set
_NON_XML_CHARS = re.compile("[\x00-\x08\x0e-\x1f\ufffe\uffff\ud800-\udfff]")


def xml_safe(text: str) -> str:
    """Soft breaks become newlines; other characters lxml rejects are dropped."""
    return _NON_XML_CHARS.sub("", text.translate(_SOFT_BREAKS))


def _apply_defaults(document: DocxDocument) -> None:
    normal = document.styles["Normal"]
    normal.font.name = BODY_FONT_NAME
    normal.font.size = Pt(BODY_FONT_SIZE)

    for section in document.sections:
        section.top_margin = PAGE_MARGIN
        section.right_margin = PAGE_MARGIN
        section.bottom_margin = PAGE_MARGIN
        section.left_margin = PAGE_MARGIN


def _text_width(document: DocxDocument) -> int:
    section = document.sections[0]
    return section.page_width - section.left_margin - section.right_margin


def _write_block(document: DocxDocument, block: DocumentBlock) -> None:
    paragraph = document.add_paragraph()
    fmt = paragraph.paragraph_format
    fmt.space_before = Pt(block.space_before)
    fmt.space_after = Pt(block.space_after)

    if block.alignment is Alignment.CENTER:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    if block.hanging_indent:
        fmt.left_indent = HANGING_INDENT
        fmt.first_line_indent = -HANGING_INDENT
    if block.right_tab:
        fmt.tab_stops.add_tab_stop(Emu(_text_width(document)), WD_TAB_ALIGNMENT.RIGHT)

    if block.image is not None:
        paragraph.add_run().add_picture(
            BytesIO(block.image),
            width=Emu(block.image_width_px * EMU_PER_PIXEL),
            height=Emu(block.image_height_px * EMU_PER_PIXEL),
        )

    for spec in block.runs:
        run = paragraph.add_run(xml_safe(spec.text))
        run.font.size = Pt(spec.size)
        if spec.bold:
            run.bold = True
        if spec.italic:
            run.italic = True
        if spec.underline:
            run.underline = True
        if spec.color:
            run.font.color.rgb = RGBColor.from_string(spec.color)


def write_docx(blocks: Iterable[DocumentBlock], title: str = "") -> bytes:
    """Serialize ``blocks`` in order into a .docx file and return its bytes.

    Raises:
        SerializationError: if python-docx rejects any block.
    """
    try:
        document = Document()
        _apply_defaults(document)
        document.core_properties.title = xml_safe(title)[:MAX_CORE_PROPERTY_LENGTH]

        for block in blocks:
            _write_block(document, block)

        buffer = BytesIO()
        document.save(buffer)
    except Exception as e:
        raise SerializationError(f"Could not serialize worksheet document: {e}") from e

    return buffer.getvalue()
