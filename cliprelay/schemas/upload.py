from pydantic import BaseModel
from typing import List, Optional
from cliprelay.schemas.history import NoticeResponse, UploadRecord


class ClipboardSnapshot(BaseModel):
    """What the host clipboard holds at the moment of the upload command."""

    file: Optional[str] = None  # filesystem path or file:// URI
    html: Optional[str] = None
    text: Optional[str] = None


class UploadResponse(BaseModel):
    title: str
    message: str
    url: str
    record: UploadRecord
    notices: List[NoticeResponse] = []


class UploadErrorDetail(BaseModel):
    kind: str
    title: str
    message: str
    openPreferences: bool = False
