"""Fetching question images for export."""

import ipaddress
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from docx.image.image import Image as DocxImage

from worksheet_studio.config import settings
from worksheet_studio.export.errors import ImageFetchError

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")


class ImageURLNotAllowed(ValueError):
    """The URL points somewhere the server must not fetch from."""

    pass


class ImageTooLarge(ValueError):
    """The response body exceeds the configured byte limit."""

    pass


def _is_internal_host(host: str) -> bool:
    if host == "localhost" or host.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return False
    return not address.is_global


def check_image_url(url: httpx.URL) -> None:
    """Refuse non-HTTP schemes and internal hosts.

    The host of ``PUBLIC_BASE_URL`` is always allowed, since uploaded images
    are served from there. When ``IMAGE_FETCH_ALLOWED_HOSTS`` is set, every
    other host must appear in it.

    Raises:
        ImageURLNotAllowed: if the URL must not be fetched.
    """
    if url.scheme not in ALLOWED_SCHEMES:
        raise ImageURLNotAllowed(f"scheme '{url.scheme}' is not allowed")

    host = url.host.lower()
    if not host:
        raise ImageURLNotAllowed("URL has no host")
    if host == httpx.URL(settings.PUBLIC_BASE_URL).host.lower():
        return

    allowed_hosts = {h.lower() for h in settings.IMAGE_FETCH_ALLOWED_HOSTS}
    if allowed_hosts and host not in allowed_hosts:
        raise ImageURLNotAllowed(f"host '{host}' is not in the allowed list")
    if _is_internal_host(host):
        raise ImageURLNotAllowed(f"host '{host}' is internal")


class ImageFetcher:
    """Retrieves image bytes over HTTP, one attempt per call.

    No caching and no retry: a failed attempt is final for that image.
    Redirects are followed by hand so every hop passes ``check_image_url``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        max_bytes: int | None = None,
        max_redirects: int | None = None,
    ):
        self._client = client
        self._max_bytes = settings.IMAGE_FETCH_MAX_BYTES if max_bytes is None else max_bytes
        self._max_redirects = (
            settings.IMAGE_FETCH_MAX_REDIRECTS if max_redirects is None else max_redirects
        )

    async def _download(self, url: httpx.URL) -> bytes:
        for _ in range(self._max_redirects + 1):
            check_image_url(url)
            async with self._client.stream("GET", url, follow_redirects=False) as response:
                if response.is_redirect:
                    url = response.url.join(response.headers["location"])
                    continue
                response.raise_for_status()
                return await self._read_limited(response)

        raise httpx.TooManyRedirects("Exceeded maximum allowed redirects", request=response.request)

    async def _read_limited(self, response: httpx.Response) -> bytes:
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self._max_bytes:
            raise ImageTooLarge(f"declared size {declared} exceeds {self._max_bytes} bytes")

        body = bytearray()
        async for chunk in response.aiter_bytes():
            body.extend(chunk)
            if len(body) > self._max_bytes:
                raise ImageTooLarge(f"body exceeds {self._max_bytes} bytes")
        return bytes(body)

    async def fetch_image(self, url: str) -> bytes:
        """Return the raw bytes behind ``url``.

        Raises:
            ImageFetchError: on a disallowed URL, transport errors, non-2xx
                responses, oversized bodies, or content python-docx cannot
                recognise as an image.
        """
        try:
            content = await self._download(httpx.URL(url))
        except (httpx.HTTPError, httpx.InvalidURL, ImageURLNotAllowed, ImageTooLarge) as e:
            raise ImageFetchError(url, e) from e

        try:
            DocxImage.from_blob(content)
        except Exception as e:
            raise ImageFetchError(url, e) from e

        logger.debug(f"Fetched image {url} ({len(content)} bytes)")
        return content


@asynccontextmanager
async def open_image_fetcher(
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[ImageFetcher]:
    """Yield a fetcher backed by a client that is closed on exit."""
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.IMAGE_FETCH_TIMEOUT),
        transport=transport,
    ) as client:
        yield ImageFetcher(client)
