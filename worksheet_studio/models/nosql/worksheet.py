"""Worksheet models for MongoDB."""

from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Untitled Paper"
DEFAULT_SECTION_TYPE = "MCQ based-question"

DEFAULT_GENERAL_INSTRUCTIONS = [
    "All questions would be compulsory. However, an internal choice of approximately 33% "
    "would be provided. 50% marks are to be allotted to competency-based questions.",
    "Section A would have 16 simple/complex MCQs and 04 Assertion-Reasoning type questions "
    "carrying 1 mark each.",
    "Section B would have 6 Short Answer (SA) type questions carrying 02 marks each.",
    "Section C would have 7 Short Answer (SA) type questions carrying 03 marks each.",
    "Section D would have 3 Long Answer (LA) type questions carrying 05 marks each.",
    "Section E would have 3 source based/case based/passage based/integrated units of "
    "assessment (04 marks each) with sub-parts of the values of 1/2/3 marks.",
]


def _new_section_id() -> str:
    return uuid4().hex


class Question(BaseModel):
    """A single question: text plus an optional image reference."""

    text: str = ""
    image_url: str | None = None

    @field_validator("text", mode="before")
    @classmethod
    def none_text_is_empty(cls, v: Any) -> Any:
        """Treat a missing question text as an empty string."""
        return "" if v is None else v


class WorksheetSection(BaseModel):
    """A titled, typed group of questions sharing a marks-per-question value."""

    id: str = Field(default_factory=_new_section_id)
    title: str = ""
    type: str = DEFAULT_SECTION_TYPE
    marks_per_question: int = Field(1, ge=1)
    questions: list[Question] = Field(default_factory=list)


class WorksheetContent(BaseModel):
    """Editable content of a worksheet, independent of who owns it."""

    title: str = ""
    description: str = ""
    general_instructions: list[str] = Field(default_factory=list)
    sections: list[WorksheetSection] | None = Field(default_factory=list)


def default_sections() -> list[WorksheetSection]:
    """The single starter section a new worksheet opens with."""
    return [
        WorksheetSection(
            title="Section A",
            type=DEFAULT_SECTION_TYPE,
            marks_per_question=1,
            questions=[Question(text="")],
        )
    ]


def default_worksheet_content() -> WorksheetContent:
    """Content of a freshly created worksheet."""
    return WorksheetContent(
        title=DEFAULT_TITLE,
        description="",
        general_instructions=list(DEFAULT_GENERAL_INSTRUCTIONS),
        sections=default_sections(),
    )


def normalize_stored_section(section: dict[str, Any]) -> dict[str, Any]:
    """Upgrade a stored section whose questions were saved as bare strings."""
    section = dict(section)
    section["questions"] = [
        {"text": q} if isinstance(q, str) else q
        for q in section.get("questions") or []
    ]
    return section


class WorksheetDocument(WorksheetContent):
    """Worksheet model for MongoDB storage."""

    id: str = Field(..., alias="_id")
    user_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = ConfigDict(populate_by_name=True)

    def to_mongo(self) -> dict[str, Any]:
        """Convert to MongoDB document format."""
        return self.model_dump(by_alias=True)

    def content(self) -> WorksheetContent:
        """Snapshot of the editable content, detached from ownership metadata."""
        return WorksheetContent(
            title=self.title,
            description=self.description,
            general_instructions=list(self.general_instructions),
            sections=[s.model_copy(deep=True) for s in self.sections]
            if self.sections is not None
            else None,
        )

    @classmethod
    def from_mongo(cls, data: dict[str, Any]) -> "WorksheetDocument":
        """Create from MongoDB document, normalizing records from older clients."""
        data = dict(data)
        data["_id"] = str(data["_id"])
        if data.get("general_instructions") is None:
            data["general_instructions"] = list(DEFAULT_GENERAL_INSTRUCTIONS)
        if data.get("description") is None:
            data["description"] = ""
        if data.get("sections"):
            data["sections"] = [normalize_stored_section(s) for s in data["sections"]]
        return cls(**data)
