"""Assembling a complete exam paper from a worksheet and export options."""

import asyncio
import logging

from worksheet_studio.export.blocks import (
    HEADING_FONT_SIZE,
    LARGE_SPACING,
    SMALL_SPACING,
    Alignment,
    BlockKind,
    DocumentBlock,
    TextRun,
)
from worksheet_studio.export.docx_writer import write_docx
from worksheet_studio.export.errors import InvalidExportInputError
from worksheet_studio.export.images import ImageFetcher
from worksheet_studio.export.renderer import render_section
from worksheet_studio.models.nosql.worksheet import WorksheetContent
from worksheet_studio.schemas.export import ExportOptions

logger = logging.getLogger(__name__)

GENERAL_INSTRUCTIONS_HEADING = "General Instructions:"

_REQUIRED_TEXT_OPTIONS = (
    ("school_name", "school name"),
    ("subject", "subject"),
    ("class_name", "class"),
    ("time", "time"),
)


def validate_export_input(
    worksheet: WorksheetContent | None, options: ExportOptions | None
) -> None:
    """Reject unusable input before any image is fetched.

    Raises:
        InvalidExportInputError: listing every problem found.
    """
    problems = []

    if worksheet is None or worksheet.sections is None:
        problems.append("worksheet has no section list")

    if options is None:
        problems.append("export options are missing")
    else:
        for field, label in _REQUIRED_TEXT_OPTIONS:
            if not (getattr(options, field) or "").strip():
                problems.append(f"{label} is required")
        max_marks = options.max_marks
        if isinstance(max_marks, bool) or not isinstance(max_marks, int) or max_marks <= 0:
            problems.append("maximum marks must be a positive integer")

    if problems:
        raise InvalidExportInputError(problems)


def _heading(text: str, space_after: float = SMALL_SPACING) -> DocumentBlock:
    return DocumentBlock(
        kind=BlockKind.HEADER,
        runs=(TextRun(text, bold=True, size=HEADING_FONT_SIZE),),
        alignment=Alignment.CENTER,
        space_after=space_after,
    )


def header_blocks(options: ExportOptions) -> list[DocumentBlock]:
    """Exam title, school, class, the time/marks line and the subject line."""
    return [
        _heading(options.exam_title),
        _heading(options.school_name.upper()),
        _heading(options.class_name.upper(), space_after=LARGE_SPACING),
        DocumentBlock(
            kind=BlockKind.META,
            runs=(
                TextRun("Time: "),
                TextRun(options.time.upper()),
                TextRun("\t"),
                TextRun("M.M.: "),
                TextRun(str(options.max_marks)),
            ),
            right_tab=True,
        ),
        DocumentBlock(
            kind=BlockKind.SUBJECT,
            runs=(TextRun("SUBJECT: "), TextRun(options.subject.upper())),
            alignment=Alignment.CENTER,
            space_before=SMALL_SPACING,
            space_after=LARGE_SPACING,
        ),
    ]


def general_instruction_blocks(instructions: list[str]) -> list[DocumentBlock]:
    """The underlined heading followed by one numbered block per instruction."""
    blocks = [
        DocumentBlock(
            kind=BlockKind.INSTRUCTIONS_HEADING,
            runs=(TextRun(GENERAL_INSTRUCTIONS_HEADING, bold=True, underline=True),),
        )
    ]
    for number, instruction in enumerate(instructions, start=1):
        blocks.append(
            DocumentBlock(
                kind=BlockKind.INSTRUCTION,
                runs=(TextRun(f"{number}. ", bold=True), TextRun(instruction or "")),
                hanging_indent=True,
            )
        )
    return blocks


async def build_document_blocks(
    worksheet: WorksheetContent,
    options: ExportOptions,
    fetcher: ImageFetcher,
) -> list[DocumentBlock]:
    """Validate input and produce the full, ordered block sequence."""
    validate_export_input(worksheet, options)

    blocks = header_blocks(options)
    blocks.extend(general_instruction_blocks(worksheet.general_instructions or []))

    # Sections are rendered one after another, never concurrently.
    for index, section in enumerate(worksheet.sections):
        blocks.extend(await render_section(section, index, fetcher))

    return blocks


async def assemble_document(
    worksheet: WorksheetContent,
    options: ExportOptions,
    fetcher: ImageFetcher,
) -> bytes:
    """Build and serialize the exam paper for ``worksheet``.

    Raises:
        InvalidExportInputError: before any network activity.
        SerializationError: if the .docx cannot be written.
    """
    blocks = await build_document_blocks(worksheet, options, fetcher)
    logger.info(
        f"Serializing worksheet '{worksheet.title}' "
        f"({len(worksheet.sections)} sections, {len(blocks)} blocks)"
    )
    return await asyncio.to_thread(write_docx, blocks, worksheet.title)
