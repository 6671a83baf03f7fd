"""Worksheet export to .docx."""

from worksheet_studio.export.assembler import assemble_document, build_document_blocks
from worksheet_studio.export.delivery import deliver, export_filename
from worksheet_studio.export.errors import (
    DeliveryError,
    ExportError,
    ImageFetchError,
    InvalidExportInputError,
    SerializationError,
)
from worksheet_studio.export.images import ImageFetcher, open_image_fetcher
from worksheet_studio.export.renderer import render_section

__all__ = [
    "DeliveryError",
    "ExportError",
    "ImageFetchError",
    "ImageFetcher",
    "InvalidExportInputError",
    "SerializationError",
    "assemble_document",
    "build_document_blocks",
    "deliver",
    "export_filename",
    "open_image_fetcher",
    "render_section",
]
