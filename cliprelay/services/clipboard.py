"""Host clipboard access via pyperclip."""

import os
from typing import Optional
from urllib.parse import urlparse
from urllib.request import url2pathname
import pyperclip
from cliprelay.exceptions import ClipboardError
from cliprelay.schemas.upload import ClipboardSnapshot
import structlog

logger = structlog.get_logger()

FILE_URI_PREFIX = "file://"


def normalize_clipboard_file_path(value: str) -> str:
    """Turn a file:// URI into a filesystem path; plain paths are only trimmed."""
    trimmed = value.strip()
    if not trimmed.lower().startswith(FILE_URI_PREFIX):
        return trimmed

    parsed = urlparse(trimmed)
    if parsed.netloc not in ("", "localhost"):
        return trimmed
    return url2pathname(parsed.path)


def _as_file_reference(text: str) -> Optional[str]:
    candidate = text.strip()
    if not candidate or "\n" in candidate:
        return None
    if candidate.lower().startswith(FILE_URI_PREFIX):
        return candidate
    if os.path.isabs(candidate) and os.path.isfile(candidate):
        return candidate
    return None


class SystemClipboard:
    """
    Read and write the desktop clipboard.

    pyperclip only exposes plain text, so a copied file shows up as a
    file:// URI or an absolute path; either is reported as `file`.
    """

    def read(self) -> ClipboardSnapshot:
        try:
            text = pyperclip.paste()
        except pyperclip.PyperclipException as e:
            logger.error("Failed to read clipboard", error=str(e))
            raise ClipboardError("Cannot read clipboard", str(e), original_error=e)

        if not text:
            return ClipboardSnapshot()

        return ClipboardSnapshot(file=_as_file_reference(text), text=text)

    def write(self, value: str) -> bool:
        """Copy a string; returns False when the clipboard is unavailable."""
        try:
            pyperclip.copy(value)
        except pyperclip.PyperclipException as e:
            logger.warning("Failed to write clipboard", error=str(e))
            return False
        return True


def get_clipboard() -> SystemClipboard:
    return SystemClipboard()


class ProvidedClipboard:
    """A snapshot handed in by the caller; writes still go to the host clipboard."""

    def __init__(self, snapshot: ClipboardSnapshot, writer: SystemClipboard):
        self.snapshot = snapshot
        self.writer = writer

    def read(self) -> ClipboardSnapshot:
        return self.snapshot

    def write(self, value: str) -> bool:
        return self.writer.write(value)
