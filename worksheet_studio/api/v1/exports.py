"""Worksheet export endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from worksheet_studio.api.deps import get_current_user, get_image_fetcher, get_owned_worksheet
from worksheet_studio.export import (
    DeliveryError,
    ImageFetcher,
    InvalidExportInputError,
    SerializationError,
    assemble_document,
    deliver,
    export_filename,
)
from worksheet_studio.models.nosql.worksheet import WorksheetContent, WorksheetDocument
from worksheet_studio.models.sql.user import User
from worksheet_studio.schemas.export import ExportOptions, ExportRequest

logger = logging.getLogger(__name__)

router = APIRouter()

_DOCX_RESPONSE = {
    200: {
        "content": {
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document": {}
        },
        "description": "The exported worksheet",
    }
}


async def _export(
    worksheet: WorksheetContent,
    options: ExportOptions,
    fetcher: ImageFetcher,
) -> Response:
    """Run the export pipeline and map its failures to HTTP errors."""
    try:
        blob = await assemble_document(worksheet, options, fetcher)
        response = deliver(blob, export_filename(worksheet.title))
    except InvalidExportInputError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        )
    except SerializationError as e:
        logger.error(f"Export of '{worksheet.title}' failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to export worksheet",
        )
    except DeliveryError as e:
        logger.error(f"Delivery of '{worksheet.title}' failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to deliver exported worksheet",
        )

    logger.info(f"Exported worksheet '{worksheet.title}' ({len(blob)} bytes)")
    return response


@router.post(
    "/export",
    response_class=Response,
    responses=_DOCX_RESPONSE,
    summary="Export unsaved worksheet content",
)
async def export_worksheet_content(
    request: ExportRequest,
    current_user: User = Depends(get_current_user),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> Response:
    """Export the editor's current state without saving it first."""
    return await _export(request.worksheet, request.options, fetcher)


@router.post(
    "/{worksheet_id}/export",
    response_class=Response,
    responses=_DOCX_RESPONSE,
    summary="Export a saved worksheet",
)
async def export_worksheet(
    options: ExportOptions,
    worksheet: WorksheetDocument = Depends(get_owned_worksheet),
    fetcher: ImageFetcher = Depends(get_image_fetcher),
) -> Response:
    """Export a stored worksheet as a .docx download."""
    return await _export(worksheet.content(), options, fetcher)
