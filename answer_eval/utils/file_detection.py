"""
Content type detection for submitted answer documents.

Magic bytes win over a declared content type: upload clients and object
stores regularly label images as ``application/octet-stream``.

Magic bytes reference:
- PDF:  %PDF
- JPEG: 0xFFD8FF
- PNG:  0x89504E47 (89 P N G)
- GIF:  GIF87a / GIF89a
- WEBP: RIFF....WEBP
- TIFF: 0x49492A00 (little-endian) or 0x4D4D002A (big-endian)
"""

from typing import Final, Optional

MAGIC_BYTES_MAP: Final[dict[bytes, tuple[str, str]]] = {
    b"%PDF": ("pdf", "application/pdf"),
    b"\xff\xd8\xff": ("jpg", "image/jpeg"),
    b"\x89PNG": ("png", "image/png"),
    b"GIF87a": ("gif", "image/gif"),
    b"GIF89a": ("gif", "image/gif"),
    b"\x49\x49\x2a\x00": ("tiff", "image/tiff"),
    b"\x4d\x4d\x00\x2a": ("tiff", "image/tiff"),
}

SUPPORTED_MIME_TYPES: Final[frozenset[str]] = frozenset(
    {
        "application/pdf",
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "image/tiff",
    }
)

_EXTENSIONS: Final[dict[str, str]] = {
    "application/pdf": "pdf",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/tiff": "tiff",
}


def detect_mime_from_bytes(header: bytes) -> Optional[str]:
    """
    Detect mime type from magic bytes header.

    Example:
        >>> detect_mime_from_bytes(b'\\x89PNG\\r\\n\\x1a\\n')
        'image/png'
    """
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "image/webp"
    for signature, (_, mime) in MAGIC_BYTES_MAP.items():
        if header.startswith(signature):
            return mime
    return None


def normalize_mime(content_type: Optional[str]) -> Optional[str]:
    """Strip parameters (``; charset=...``) and lower-case a content type."""
    if not content_type:
        return None
    mime = content_type.split(";", 1)[0].strip().lower()
    if mime == "image/jpg":
        return "image/jpeg"
    return mime or None


def resolve_mime(data: bytes, declared: Optional[str]) -> Optional[str]:
    """Sniffed mime type when recognizable, else the normalized declared one."""
    return detect_mime_from_bytes(data[:16]) or normalize_mime(declared)


def is_supported_mime(mime: Optional[str]) -> bool:
    return mime in SUPPORTED_MIME_TYPES


def extension_for(mime: Optional[str]) -> str:
    return _EXTENSIONS.get(mime or "", "jpg")
