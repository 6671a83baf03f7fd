"""MongoDB models package."""

from worksheet_studio.models.nosql.worksheet import (
    DEFAULT_GENERAL_INSTRUCTIONS,
    Question,
    WorksheetContent,
    WorksheetDocument,
    WorksheetSection,
    default_worksheet_content,
)

__all__ = [
    "DEFAULT_GENERAL_INSTRUCTIONS",
    "Question",
    "WorksheetContent",
    "WorksheetDocument",
    "WorksheetSection",
    "default_worksheet_content",
]
