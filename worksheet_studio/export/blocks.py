"""Format-neutral document blocks produced by the renderer and assembler.

Sizes are in points. The docx writer is the only place that knows about
python-docx units.
"""

from dataclasses import dataclass
from enum import Enum

BODY_FONT_NAME = "Times New Roman"
BODY_FONT_SIZE = 12.0
HEADING_FONT_SIZE = 14.0
PLACEHOLDER_FONT_SIZE = 10.0

SMALL_SPACING = 6.0
LARGE_SPACING = 12.0

IMAGE_WIDTH_PX = 400
IMAGE_HEIGHT_PX = 300

PLACEHOLDER_COLOR = "FF0000"


class BlockKind(str, Enum):
    """Role of a block within the exported paper."""

    HEADER = "header"
    META = "meta"
    SUBJECT = "subject"
    INSTRUCTIONS_HEADING = "instructions_heading"
    INSTRUCTION = "instruction"
    SECTION_TITLE = "section_title"
    SECTION_INSTRUCTIONS = "section_instructions"
    QUESTION = "question"
    IMAGE = "image"
    IMAGE_PLACEHOLDER = "image_placeholder"


class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"


@dataclass(frozen=True)
class TextRun:
    """A span of uniformly styled text."""

    text: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    size: float = BODY_FONT_SIZE
    color: str | None = None


@dataclass(frozen=True)
class DocumentBlock:
    """One paragraph of the output: styled text runs or a single inline image."""

    kind: BlockKind
    runs: tuple[TextRun, ...] = ()
    image: bytes | None = None
    image_width_px: int = IMAGE_WIDTH_PX
    image_height_px: int = IMAGE_HEIGHT_PX
    alignment: Alignment = Alignment.LEFT
    space_before: float = 0.0
    space_after: float = SMALL_SPACING
    hanging_indent: bool = False
    right_tab: bool = False

    @property
    def text(self) -> str:
        """Plain text of the block, runs concatenated."""
        return "".join(run.text for run in self.runs)
