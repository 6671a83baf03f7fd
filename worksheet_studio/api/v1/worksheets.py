"""Worksheet endpoints."""

import logging
import re
from datetime import UTC, datetime
from math import ceil
from typing import Any, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, status

from worksheet_studio.api.deps import get_current_user, get_owned_worksheet
from worksheet_studio.db.mongodb import get_worksheets_collection
from worksheet_studio.models.nosql.worksheet import (
    DEFAULT_GENERAL_INSTRUCTIONS,
    DEFAULT_TITLE,
    WorksheetContent,
    WorksheetDocument,
    default_sections,
    default_worksheet_content,
)
from worksheet_studio.models.sql.user import User
from worksheet_studio.schemas.worksheet import (
    WorksheetCreate,
    WorksheetListResponse,
    WorksheetResponse,
    WorksheetSummary,
    WorksheetUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=WorksheetListResponse,
    summary="List user's worksheets",
)
async def list_worksheets(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = None,
    current_user: User = Depends(get_current_user),
) -> WorksheetListResponse:
    """List the caller's worksheets, most recently edited first."""
    collection = get_worksheets_collection()

    query: dict[str, Any] = {"user_id": str(current_user.id)}
    if search:
        query["title"] = {"$regex": re.escape(search), "$options": "i"}

    total = await collection.count_documents(query)

    cursor = collection.find(query).sort("updated_at", -1)
    cursor = cursor.skip((page - 1) * page_size).limit(page_size)

    items = []
    async for doc in cursor:
        items.append(WorksheetSummary.from_document(WorksheetDocument.from_mongo(doc)))

    return WorksheetListResponse(
        items=items,
        total=total,
        page=page,
        page_size=page_size,
        pages=ceil(total / page_size) if total > 0 else 1,
    )


@router.post(
    "",
    response_model=WorksheetResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new worksheet",
)
async def create_worksheet(
    worksheet_data: WorksheetCreate,
    current_user: User = Depends(get_current_user),
) -> WorksheetResponse:
    """Create a worksheet, filling omitted fields with the editor defaults."""
    worksheet = WorksheetDocument(
        id=str(uuid4()),
        user_id=str(current_user.id),
        title=worksheet_data.title if worksheet_data.title is not None else DEFAULT_TITLE,
        description=worksheet_data.description or "",
        general_instructions=(
            worksheet_data.general_instructions
            if worksheet_data.general_instructions is not None
            else list(DEFAULT_GENERAL_INSTRUCTIONS)
        ),
        sections=(
            worksheet_data.sections
            if worksheet_data.sections is not None
            else default_sections()
        ),
    )

    await get_worksheets_collection().insert_one(worksheet.to_mongo())
    logger.info(f"Worksheet {worksheet.id} created by user {current_user.id}")

    return WorksheetResponse.from_document(worksheet)


@router.get(
    "/defaults",
    response_model=WorksheetContent,
    summary="Get the content of a blank worksheet",
)
async def get_worksheet_defaults(
    current_user: User = Depends(get_current_user),
) -> WorksheetContent:
    """Starter content the editor opens with."""
    return default_worksheet_content()


@router.get(
    "/{worksheet_id}",
    response_model=WorksheetResponse,
    summary="Get a worksheet",
)
async def get_worksheet(
    worksheet: WorksheetDocument = Depends(get_owned_worksheet),
) -> WorksheetResponse:
    """Get a worksheet with all of its sections and questions."""
    return WorksheetResponse.from_document(worksheet)


@router.patch(
    "/{worksheet_id}",
    response_model=WorksheetResponse,
    summary="Update a worksheet",
)
async def update_worksheet(
    update_data: WorksheetUpdate,
    worksheet: WorksheetDocument = Depends(get_owned_worksheet),
) -> WorksheetResponse:
    """Update title, description, instructions or sections."""
    changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
    changes["updated_at"] = datetime.now(UTC)

    collection = get_worksheets_collection()
    await collection.update_one({"_id": worksheet.id}, {"$set": changes})

    doc = await collection.find_one({"_id": worksheet.id})
    return WorksheetResponse.from_document(WorksheetDocument.from_mongo(doc))


@router.delete(
    "/{worksheet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a worksheet",
)
async def delete_worksheet(
    worksheet: WorksheetDocument = Depends(get_owned_worksheet),
) -> None:
    """Delete a worksheet (owner only)."""
    await get_worksheets_collection().delete_one({"_id": worksheet.id})
    logger.info(f"Worksheet {worksheet.id} deleted")
