"""API v1 router aggregation."""

from fastapi import APIRouter

from worksheet_studio.api.v1.auth import router as auth_router
from worksheet_studio.api.v1.exports import router as exports_router
from worksheet_studio.api.v1.images import router as images_router
from worksheet_studio.api.v1.worksheets import router as worksheets_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
# Export routes first so POST /worksheets/export is never read as an id
api_router.include_router(exports_router, prefix="/worksheets", tags=["Export"])
api_router.include_router(worksheets_router, prefix="/worksheets", tags=["Worksheets"])
api_router.include_router(images_router, prefix="/images", tags=["Images"])
