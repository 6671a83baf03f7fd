"""Handing an exported document to the client as a download."""

import re
from urllib.parse import quote

from fastapi import Response

from worksheet_studio.export.errors import DeliveryError

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOCX_EXTENSION = ".docx"
DEFAULT_FILE_STEM = "Worksheet"

# Characters that break file systems or the Content-Disposition header
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')


def export_filename(title: str | None) -> str:
    """``<title>.docx``, or ``Worksheet.docx`` when the title is blank."""
    stem = _UNSAFE_FILENAME_CHARS.sub("_", (title or "").strip())
    return f"{stem or DEFAULT_FILE_STEM}{DOCX_EXTENSION}"


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    stem = filename[: -len(DOCX_EXTENSION)] if filename.endswith(DOCX_EXTENSION) else filename
    ascii_stem = stem.encode("ascii", "ignore").decode("ascii").strip()
    fallback = f"{ascii_stem or DEFAULT_FILE_STEM}{DOCX_EXTENSION}"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def deliver(blob: bytes, suggested_file_name: str) -> Response:
    """Wrap ``blob`` in a download response.

    Raises:
        DeliveryError: if there is nothing to send or the response cannot be built.
    """
    if not blob:
        raise DeliveryError("Refusing to deliver an empty document")

    try:
        return Response(
            content=blob,
            media_type=DOCX_MEDIA_TYPE,
            headers={"Content-Disposition": content_disposition(suggested_file_name)},
        )
    except (UnicodeError, ValueError) as e:
        raise DeliveryError(f"Could not prepare download '{suggested_file_name}': {e}") from e
