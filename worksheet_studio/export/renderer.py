"""Rendering one worksheet section into document blocks."""

import logging

from worksheet_studio.export.blocks import (
    LARGE_SPACING,
    PLACEHOLDER_COLOR,
    PLACEHOLDER_FONT_SIZE,
    SMALL_SPACING,
    Alignment,
    BlockKind,
    DocumentBlock,
    TextRun,
)
from worksheet_studio.export.errors import ImageFetchError
from worksheet_studio.export.images import ImageFetcher
from worksheet_studio.models.nosql.worksheet import Question, WorksheetSection

logger = logging.getLogger(__name__)

IMAGE_PLACEHOLDER_TEXT = "[Image could not be loaded]"


def section_letter(section_index: int) -> str:
    """Map a 0-based position to A, B, ..., Z, AA, AB, ..."""
    if section_index < 0:
        raise ValueError("section_index must not be negative")
    letters = ""
    n = section_index + 1
    while n:
        n, rem = divmod(n - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def section_label(section_index: int) -> str:
    return f"SECTION-{section_letter(section_index)}"


def marks_phrase(marks: int, capitalized: bool = False) -> str:
    """``1 mark``, ``2 marks``; ``Mark(s)`` when capitalized."""
    word = "Mark" if capitalized else "mark"
    return f"{marks} {word}{'s' if marks > 1 else ''}"


def section_instructions_text(section: WorksheetSection) -> str:
    return (
        f"{section.type} type questions. "
        f"Each question carries {marks_phrase(section.marks_per_question)}."
    )


def _title_block(section_index: int) -> DocumentBlock:
    return DocumentBlock(
        kind=BlockKind.SECTION_TITLE,
        runs=(TextRun(section_label(section_index), bold=True, underline=True),),
        alignment=Alignment.CENTER,
        space_before=LARGE_SPACING,
        space_after=SMALL_SPACING,
    )


def _instructions_block(section: WorksheetSection) -> DocumentBlock:
    return DocumentBlock(
        kind=BlockKind.SECTION_INSTRUCTIONS,
        runs=(TextRun(section_instructions_text(section)),),
        space_before=SMALL_SPACING,
        space_after=SMALL_SPACING,
    )


def _question_block(question: Question, number: int, marks: int) -> DocumentBlock:
    return DocumentBlock(
        kind=BlockKind.QUESTION,
        runs=(
            TextRun(f"{number}. ", bold=True),
            TextRun(question.text or ""),
            TextRun(f" [{marks_phrase(marks, capitalized=True)}]", bold=True),
        ),
        space_before=SMALL_SPACING,
        space_after=SMALL_SPACING if question.image_url else LARGE_SPACING,
        hanging_indent=True,
    )


def _placeholder_block() -> DocumentBlock:
    return DocumentBlock(
        kind=BlockKind.IMAGE_PLACEHOLDER,
        runs=(
            TextRun(
                IMAGE_PLACEHOLDER_TEXT,
                italic=True,
                size=PLACEHOLDER_FONT_SIZE,
                color=PLACEHOLDER_COLOR,
            ),
        ),
        space_before=SMALL_SPACING,
        space_after=LARGE_SPACING,
    )


async def _image_block(url: str, number: int, fetcher: ImageFetcher) -> DocumentBlock:
    try:
        data = await fetcher.fetch_image(url)
    except ImageFetchError as e:
        logger.warning(f"Using placeholder for question {number}: {e}")
        return _placeholder_block()

    return DocumentBlock(
        kind=BlockKind.IMAGE,
        image=data,
        space_before=SMALL_SPACING,
        space_after=LARGE_SPACING,
    )


async def render_section(
    section: WorksheetSection,
    section_index: int,
    fetcher: ImageFetcher,
) -> list[DocumentBlock]:
    """Render a section as: title, instructions, then (question, [image]) pairs.

    Each image is awaited before the next question is rendered so the
    block order always follows the question order.
    """
    blocks = [_title_block(section_index), _instructions_block(section)]

    for number, question in enumerate(section.questions, start=1):
        blocks.append(_question_block(question, number, section.marks_per_question))
        if question.image_url:
            blocks.append(await _image_block(question.image_url, number, fetcher))

    return blocks
