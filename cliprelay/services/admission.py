from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union
from cliprelay.config import Preferences
from cliprelay.schemas.enums import Category, CloudProvider

MAX_UPLOAD_SIZE_MB_DEFAULT = 25
HISTORY_LIMIT_DEFAULT = 200
HISTORY_LIMIT_OPTIONS = {"50": 50, "100": 100, "200": 200, "500": 500, "unlimited": None}

CATEGORY_PREFERENCES = (
    (Category.IMAGES, "allow_images"),
    (Category.VIDEOS, "allow_videos"),
    (Category.DOCUMENTS, "allow_documents"),
    (Category.ARCHIVES, "allow_archives"),
    (Category.AUDIOS, "allow_audios"),
    (Category.OTHERS, "allow_others"),
)


@dataclass(frozen=True)
class AdmissionPolicy:
    allowed_categories: FrozenSet[Category] = field(default_factory=frozenset)
    max_upload_size_mb: int = MAX_UPLOAD_SIZE_MB_DEFAULT

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def allows(self, category: Category) -> bool:
        return category in self.allowed_categories


def is_checked(value: Union[bool, str, None]) -> bool:
    """
    Interpret a category toggle.

    An absent or non-boolean value counts as allowed so preference files
    written before the toggle existed keep uploading everything; only an
    explicit false (bool or string) disallows.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return True


def get_allowed_categories(preferences: Preferences) -> FrozenSet[Category]:
    return frozenset(
        category
        for category, name in CATEGORY_PREFERENCES
        if is_checked(getattr(preferences, name, None))
    )


def parse_max_upload_size_mb(raw_value: Optional[str]) -> Optional[int]:
    """Return the limit in MB, or None when the value is not a positive whole number."""
    source = raw_value.strip() if isinstance(raw_value, str) and raw_value.strip() else str(MAX_UPLOAD_SIZE_MB_DEFAULT)
    try:
        value = float(source)
    except ValueError:
        return None
    if not value.is_integer() or value <= 0:
        return None
    return int(value)


def parse_history_limit(option: Optional[str]) -> Optional[int]:
    """Map a history-limit tag to a record count; None means unbounded."""
    normalized = (option or "").strip().lower() or str(HISTORY_LIMIT_DEFAULT)
    return HISTORY_LIMIT_OPTIONS.get(normalized, HISTORY_LIMIT_DEFAULT)


def get_cloud_provider(raw: Optional[str]) -> CloudProvider:
    try:
        return CloudProvider((raw or "").strip())
    except ValueError:
        return CloudProvider.CLOUDFLARE_R2
