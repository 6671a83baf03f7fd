"""Export request schemas."""

from pydantic import BaseModel, ConfigDict

from worksheet_studio.models.nosql.worksheet import WorksheetContent

DEFAULT_EXAM_TITLE = "PRE-BOARD EXAMINATION (2024-25)"


class ExportOptions(BaseModel):
    """Per-export header details. Never stored with the worksheet.

    Required fields are checked by the assembler rather than here, so a
    blank school name is reported as an export error and not as a schema
    error.
    """

    exam_title: str = DEFAULT_EXAM_TITLE
    school_name: str = ""
    subject: str = ""
    class_name: str = ""
    time: str = ""
    max_marks: int = 0

    model_config = ConfigDict(frozen=True)


class ExportRequest(BaseModel):
    """Export of unsaved editor state."""

    worksheet: WorksheetContent
    options: ExportOptions
