"""Unit tests for document content type detection."""

import pytest

from answer_eval.utils.file_detection import (
    detect_mime_from_bytes,
    extension_for,
    is_supported_mime,
    normalize_mime,
    resolve_mime,
)


class TestDetectMime:
    """Tests for magic byte sniffing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            (b"%PDF-1.7", "application/pdf"),
            (b"\xff\xd8\xff\xe0", "image/jpeg"),
            (b"\x89PNG\r\n\x1a\n", "image/png"),
            (b"GIF89a", "image/gif"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"II*\x00", "image/tiff"),
        ],
    )
    def test_known_signatures(self, header, expected):
        assert detect_mime_from_bytes(header) == expected

    def test_unknown_signature(self):
        assert detect_mime_from_bytes(b"<html>") is None


class TestResolveMime:
    """Tests for combining sniffed and declared types."""

    def test_magic_bytes_win_over_declared(self):
        assert resolve_mime(b"\x89PNG\r\n\x1a\n", "application/octet-stream") == "image/png"

    def test_declared_used_when_unrecognized(self):
        assert resolve_mime(b"????", "image/JPG; q=1") == "image/jpeg"

    def test_normalize_empty(self):
        assert normalize_mime(None) is None
        assert normalize_mime("") is None


class TestSupport:
    def test_supported(self):
        assert is_supported_mime("image/webp") is True
        assert is_supported_mime("text/html") is False
        assert is_supported_mime(None) is False

    def test_extension_defaults_to_jpg(self):
        assert extension_for("application/pdf") == "pdf"
        assert extension_for(None) == "jpg"
