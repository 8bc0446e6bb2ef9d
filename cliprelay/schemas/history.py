import math
from pydantic import BaseModel, StrictInt, StrictFloat, StrictStr, field_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union
from cliprelay.schemas.enums import Category, CloudProvider, ViewMode


class UploadRecord(BaseModel):
    """One completed upload. Immutable once created; `key` and `url` are derived together."""

    id: StrictStr
    provider: CloudProvider
    category: Category
    file_name: StrictStr
    file_extension: StrictStr  # lowercase, no leading dot, may be empty
    file_size_bytes: Union[StrictInt, StrictFloat]
    key: StrictStr
    url: StrictStr
    created_at: StrictStr  # ISO-8601

    @field_validator("file_size_bytes")
    @classmethod
    def size_must_be_finite_and_non_negative(cls, value):
        if not math.isfinite(value) or value < 0:
            raise ValueError("fileSizeBytes must be a finite non-negative number")
        return value

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True


class NoticeResponse(BaseModel):
    title: str
    message: str


class HistoryResponse(BaseModel):
    items: List[UploadRecord]
    total: int
    category: Optional[Category] = None
    viewMode: ViewMode
    configurationError: Optional[str] = None
    notices: List[NoticeResponse] = []


class ViewModeRequest(BaseModel):
    mode: ViewMode


class ViewModeResponse(BaseModel):
    viewMode: ViewMode
