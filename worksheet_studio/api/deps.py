"""API dependencies for dependency injection."""

from typing import AsyncGenerator
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from worksheet_studio.core.security import verify_access_token
from worksheet_studio.db.mongodb import get_image_bucket, get_worksheets_collection
from worksheet_studio.db.postgres import get_db
from worksheet_studio.export.images import ImageFetcher, open_image_fetcher
from worksheet_studio.models.nosql.worksheet import WorksheetDocument
from worksheet_studio.models.sql.user import User
from worksheet_studio.services.image_store import ImageStore

# Security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get the current authenticated user."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_access_token(credentials.credentials)
        user_id = UUID(payload["sub"])
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    return user


async def get_owned_worksheet(
    worksheet_id: str,
    current_user: User = Depends(get_current_user),
) -> WorksheetDocument:
    """Load a worksheet and make sure the caller owns it."""
    doc = await get_worksheets_collection().find_one({"_id": worksheet_id})

    if doc is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Worksheet not found",
        )

    worksheet = WorksheetDocument.from_mongo(doc)

    if worksheet.user_id != str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have access to this worksheet",
        )

    return worksheet


def get_image_store() -> ImageStore:
    """Image store backed by the configured GridFS bucket."""
    return ImageStore(get_image_bucket())


async def get_image_fetcher() -> AsyncGenerator[ImageFetcher, None]:
    """A fetcher whose HTTP client lives for one request."""
    async with open_image_fetcher() as fetcher:
        yield fetcher
