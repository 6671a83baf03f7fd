"""Question image endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status

from worksheet_studio.api.deps import get_current_user, get_image_store
from worksheet_studio.config import settings
from worksheet_studio.models.sql.user import User
from worksheet_studio.schemas.image import ImageUploadResponse
from worksheet_studio.services.image_store import (
    ImageNotFoundError,
    ImageStore,
    build_image_path,
    image_owner,
    path_from_reference,
    public_image_url,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a question image",
)
async def upload_image(
    file: UploadFile = File(...),
    replaces: Optional[str] = Form(None),
    current_user: User = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
) -> ImageUploadResponse:
    """Store an image and return the URL to put on the question.

    When ``replaces`` names one of the caller's earlier images, that image
    is deleted once the new one is stored.
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Only image uploads are accepted",
        )

    data = await file.read()
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )
    if len(data) > settings.MAX_IMAGE_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.MAX_IMAGE_UPLOAD_BYTES} bytes",
        )

    user_id = str(current_user.id)
    path = build_image_path(user_id, file.filename)
    await store.save(path, data, content_type)
    logger.info(f"Stored image {path} ({len(data)} bytes)")

    if replaces:
        old_path = path_from_reference(replaces)
        if image_owner(old_path) == user_id:
            try:
                await store.delete(old_path)
            except ImageNotFoundError:
                logger.info(f"Replaced image {old_path} was already gone")

    return ImageUploadResponse(
        path=path,
        url=public_image_url(path),
        content_type=content_type,
        size=len(data),
    )


@router.get(
    "/{image_path:path}",
    summary="Fetch a question image",
    response_class=Response,
)
async def get_image(
    image_path: str,
    store: ImageStore = Depends(get_image_store),
) -> Response:
    """Serve image bytes. Paths are unguessable, so no token is required."""
    try:
        image = await store.load(image_path)
    except ImageNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )

    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={"Cache-Control": "private, max-age=3600"},
    )


@router.delete(
    "/{image_path:path}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a question image",
)
async def delete_image(
    image_path: str,
    current_user: User = Depends(get_current_user),
    store: ImageStore = Depends(get_image_store),
) -> None:
    """Delete one of the caller's images."""
    if image_owner(image_path) != str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this image",
        )

    try:
        await store.delete(image_path)
    except ImageNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Image not found",
        )
