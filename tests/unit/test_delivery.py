"""Unit tests for download naming and delivery."""

import pytest

from worksheet_studio.export.delivery import (
    DOCX_MEDIA_TYPE,
    content_disposition,
    deliver,
    export_filename,
)
from worksheet_studio.export.errors import DeliveryError


class TestExportFilename:
    """Tests for export_filename."""

    def test_title_becomes_filename(self):
        assert export_filename("Science Pre-Board") == "Science Pre-Board.docx"

    def test_blank_title_falls_back(self):
        assert export_filename("") == "Worksheet.docx"
        assert export_filename(None) == "Worksheet.docx"

    def test_whitespace_title_falls_back(self):
        assert export_filename("   ") == "Worksheet.docx"

    def test_unsafe_characters_replaced(self):
        assert export_filename('Unit 3/4: "Forces"') == "Unit 3_4_ _Forces_.docx"


class TestContentDisposition:
    """Tests for the attachment header."""

    def test_ascii_name(self):
        header = content_disposition("Quiz.docx")

        assert header == "attachment; filename=\"Quiz.docx\"; filename*=UTF-8''Quiz.docx"

    def test_non_ascii_name_has_fallback(self):
        header = content_disposition("Física.docx")

        assert 'filename="Fsica.docx"' in header
        assert "filename*=UTF-8''F%C3%ADsica.docx" in header

    def test_fully_non_ascii_name_uses_default_fallback(self):
        header = content_disposition("数学.docx")

        assert 'filename="Worksheet.docx"' in header


class TestDeliver:
    """Tests for deliver."""

    def test_builds_download_response(self):
        response = deliver(b"PK\x03\x04data", "Quiz.docx")

        assert response.body == b"PK\x03\x04data"
        assert response.media_type == DOCX_MEDIA_TYPE
        assert response.headers["content-disposition"].startswith("attachment;")

    def test_empty_blob_rejected(self):
        with pytest.raises(DeliveryError):
            deliver(b"", "Quiz.docx")
