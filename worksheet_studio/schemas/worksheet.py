"""Worksheet schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from worksheet_studio.models.nosql.worksheet import WorksheetDocument, WorksheetSection


class WorksheetCreate(BaseModel):
    """Schema for creating a worksheet. Omitted fields take the editor defaults."""

    title: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=2000)
    general_instructions: list[str] | None = None
    sections: list[WorksheetSection] | None = None


class WorksheetUpdate(BaseModel):
    """Schema for a partial worksheet update, including a plain rename."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    general_instructions: list[str] | None = None
    sections: list[WorksheetSection] | None = None


class WorksheetResponse(BaseModel):
    """Schema for a full worksheet."""

    id: str
    user_id: str
    title: str
    description: str
    general_instructions: list[str]
    sections: list[WorksheetSection] | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: WorksheetDocument) -> "WorksheetResponse":
        return cls(**doc.model_dump())


class WorksheetSummary(BaseModel):
    """Dashboard row."""

    id: str
    title: str
    description: str
    section_count: int
    question_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_document(cls, doc: WorksheetDocument) -> "WorksheetSummary":
        sections = doc.sections or []
        return cls(
            id=doc.id,
            title=doc.title,
            description=doc.description,
            section_count=len(sections),
            question_count=sum(len(s.questions) for s in sections),
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )


class WorksheetListResponse(BaseModel):
    """Schema for paginated worksheet list."""

    items: list[WorksheetSummary]
    total: int
    page: int
    page_size: int
    pages: int
