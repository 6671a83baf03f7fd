"""Question image storage on top of a GridFS bucket."""

import re
import time
from dataclasses import dataclass
from urllib.parse import unquote, urlparse
from uuid import uuid4

from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorGridFSBucket

from worksheet_studio.config import settings

IMAGE_PATH_PREFIX = "questions"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class ImageNotFoundError(Exception):
    """No stored image exists at the requested path."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Image not found: {path}")


@dataclass(frozen=True)
class StoredImage:
    path: str
    content_type: str
    data: bytes


def build_image_path(user_id: str, filename: str | None) -> str:
    """``questions/<user_id>/<millis>_<token>_<sanitized filename>``."""
    safe_name = _UNSAFE_NAME_CHARS.sub("_", filename or "")[-100:] or "image"
    return f"{IMAGE_PATH_PREFIX}/{user_id}/{int(time.time() * 1000)}_{uuid4().hex[:8]}_{safe_name}"


def image_owner(path: str) -> str | None:
    """User id embedded in an image path, or None for foreign paths."""
    parts = path.split("/")
    if len(parts) != 3 or parts[0] != IMAGE_PATH_PREFIX or not parts[1] or not parts[2]:
        return None
    return parts[1]


def public_image_url(path: str) -> str:
    base = settings.PUBLIC_BASE_URL.rstrip("/")
    return f"{base}{settings.API_V1_PREFIX}/images/{path}"


def path_from_reference(reference: str) -> str:
    """Accept either a bare image path or a URL produced by ``public_image_url``."""
    marker = f"{settings.API_V1_PREFIX}/images/"
    if "://" in reference:
        url_path = unquote(urlparse(reference).path)
        if marker in url_path:
            return url_path.split(marker, 1)[1]
        return url_path.lstrip("/")
    return reference.lstrip("/")


class ImageStore:
    """Upload, read and delete question images by path."""

    def __init__(self, bucket: AsyncIOMotorGridFSBucket):
        self._bucket = bucket

    async def save(self, path: str, data: bytes, content_type: str) -> None:
        await self._bucket.upload_from_stream(
            path, data, metadata={"content_type": content_type}
        )

    async def load(self, path: str) -> StoredImage:
        try:
            grid_out = await self._bucket.open_download_stream_by_name(path)
        except NoFile as e:
            raise ImageNotFoundError(path) from e

        data = await grid_out.read()
        metadata = grid_out.metadata or {}
        return StoredImage(
            path=path,
            content_type=metadata.get("content_type", "application/octet-stream"),
            data=data,
        )

    async def delete(self, path: str) -> None:
        """Delete every revision stored under ``path``."""
        found = False
        async for grid_out in self._bucket.find({"filename": path}):
            await self._bucket.delete(grid_out._id)
            found = True
        if not found:
            raise ImageNotFoundError(path)
