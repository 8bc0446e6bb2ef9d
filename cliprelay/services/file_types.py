"""
File classification: extension tables, MIME content types and
binary signature sniffing for common image formats.

Nothing here performs I/O and nothing here raises; unknown input
always falls through to `Category.OTHERS` or a generic content type.
"""

import os
from typing import Optional
from cliprelay.schemas.enums import Category

CATEGORY_TO_EXTENSIONS = {
    Category.IMAGES: {"jpg", "jpeg", "png", "gif", "webp", "bmp", "tif", "tiff", "heic", "heif", "svg", "avif"},
    Category.VIDEOS: {"mp4", "mov", "m4v", "avi", "mkv", "webm", "wmv", "flv", "mpeg", "mpg"},
    Category.DOCUMENTS: {"pdf", "txt", "md", "rtf", "doc", "docx", "xls", "xlsx", "csv", "ppt", "pptx", "json", "xml"},
    Category.ARCHIVES: {"zip", "rar", "7z", "tar", "gz", "tgz", "bz2", "xz"},
    Category.AUDIOS: {"mp3", "wav", "aac", "m4a", "flac", "ogg", "opus", "aiff"},
}

EXTENSION_ALIASES = {
    "tif": "tiff",
}

DEFAULT_CONTENT_TYPE = "application/octet-stream"

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "bmp": "image/bmp",
    "tiff": "image/tiff",
    "heic": "image/heic",
    "heif": "image/heif",
    "svg": "image/svg+xml",
    "avif": "image/avif",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "m4v": "video/x-m4v",
    "avi": "video/x-msvideo",
    "mkv": "video/x-matroska",
    "webm": "video/webm",
    "wmv": "video/x-ms-wmv",
    "flv": "video/x-flv",
    "mpeg": "video/mpeg",
    "mpg": "video/mpeg",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "md": "text/markdown",
    "rtf": "application/rtf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "csv": "text/csv",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "json": "application/json",
    "xml": "application/xml",
    "zip": "application/zip",
    "rar": "application/vnd.rar",
    "7z": "application/x-7z-compressed",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "tgz": "application/gzip",
    "bz2": "application/x-bzip2",
    "xz": "application/x-xz",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "aac": "audio/aac",
    "m4a": "audio/mp4",
    "flac": "audio/flac",
    "ogg": "audio/ogg",
    "opus": "audio/opus",
    "aiff": "audio/aiff",
}

# MIME types accepted from inline data URIs, mapped to a canonical extension
IMAGE_MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/pjpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/heic": "heic",
    "image/heif": "heic",
    "image/bmp": "bmp",
    "image/x-ms-bmp": "bmp",
    "image/tiff": "tiff",
    "image/x-tiff": "tiff",
    "image/avif": "avif",
    "image/svg+xml": "svg",
}

HEIF_BRANDS = {b"heic", b"heix", b"hevc", b"hevx", b"heif", b"mif1", b"msf1"}


def get_file_name(file_path: str) -> str:
    return os.path.basename(file_path)


def normalize_extension(extension: Optional[str]) -> Optional[str]:
    """Lowercase, strip leading dots and apply cosmetic aliases."""
    if not extension:
        return None
    normalized = extension.strip().lstrip(".").lower()
    if not normalized:
        return None
    return EXTENSION_ALIASES.get(normalized, normalized)


def get_normalized_extension(file_path: str) -> Optional[str]:
    return normalize_extension(os.path.splitext(file_path)[1])


def get_category_from_extension(extension: Optional[str]) -> Category:
    normalized = normalize_extension(extension)
    if not normalized:
        return Category.OTHERS

    for category, extensions in CATEGORY_TO_EXTENSIONS.items():
        if normalized in extensions:
            return category

    return Category.OTHERS


def get_content_type(extension: Optional[str]) -> str:
    normalized = normalize_extension(extension)
    if not normalized:
        return DEFAULT_CONTENT_TYPE
    return CONTENT_TYPES.get(normalized, DEFAULT_CONTENT_TYPE)


def get_extension_from_mime_type(mime_type: str) -> Optional[str]:
    return IMAGE_MIME_EXTENSIONS.get(mime_type.strip().lower())


def _bytes_at(buffer: bytes, offset: int, signature: bytes) -> bool:
    return buffer[offset:offset + len(signature)] == signature


def detect_image_extension(buffer: bytes) -> Optional[str]:
    """
    Sniff an image format from its magic number.

    Args:
        buffer: Raw file bytes (only the first dozen bytes are inspected)

    Returns:
        Canonical extension, or None when no known image signature matches
    """
    if not buffer:
        return None

    if _bytes_at(buffer, 0, b"\x89PNG\r\n\x1a\n"):
        return "png"

    if _bytes_at(buffer, 0, b"\xff\xd8\xff"):
        return "jpg"

    if _bytes_at(buffer, 0, b"GIF87a") or _bytes_at(buffer, 0, b"GIF89a"):
        return "gif"

    if _bytes_at(buffer, 0, b"RIFF") and _bytes_at(buffer, 8, b"WEBP"):
        return "webp"

    if _bytes_at(buffer, 0, b"BM"):
        return "bmp"

    if _bytes_at(buffer, 0, b"II*\x00") or _bytes_at(buffer, 0, b"MM\x00*"):
        return "tiff"

    # ISO-BMFF container: box size, then "ftyp" and the major brand
    if len(buffer) >= 12 and _bytes_at(buffer, 4, b"ftyp"):
        major_brand = buffer[8:12]
        if major_brand in HEIF_BRANDS:
            return "heic"
        if major_brand == b"avif":
            return "avif"

    return None


def classify(extension: Optional[str] = None, buffer: Optional[bytes] = None) -> Category:
    """Return exactly one category for an extension and/or a byte buffer."""
    category = get_category_from_extension(extension)
    if category is not Category.OTHERS or buffer is None:
        return category

    sniffed = detect_image_extension(buffer)
    if sniffed:
        return get_category_from_extension(sniffed)
    return Category.OTHERS
