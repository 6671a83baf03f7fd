"""Image upload schemas."""

from pydantic import BaseModel


class ImageUploadResponse(BaseModel):
    """Where an uploaded question image can be fetched from."""

    path: str
    url: str
    content_type: str
    size: int
