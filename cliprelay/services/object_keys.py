import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote
from cliprelay.schemas.enums import Category

RANDOM_BYTES = 4
DEFAULT_EXTENSION = "bin"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return (moment - EPOCH) // timedelta(milliseconds=1)


def get_month_year_path(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"{now.month:02d}-{now.year:04d}"


def sanitize_extension(extension: Optional[str]) -> str:
    normalized = (extension or "").strip().lstrip(".").strip().lower()
    return normalized or DEFAULT_EXTENSION


def generate_object_key(
    category: Category,
    extension: Optional[str] = None,
    now: Optional[datetime] = None
) -> str:
    """
    Build a time-partitioned storage key.

    Format: <category>/<mm>-<yyyy>/<epoch-millis>-<8-hex>.<extension>

    Args:
        category: Upload category, used as the top-level prefix
        extension: File extension, with or without leading dots
        now: Upload time; defaults to the current UTC time

    Returns:
        Object key unique per call with overwhelming probability
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    random_part = secrets.token_hex(RANDOM_BYTES)
    file_name = f"{epoch_millis(now)}-{random_part}.{sanitize_extension(extension)}"

    return f"{Category(category).value}/{get_month_year_path(now)}/{file_name}"


def build_public_url(base_url: str, object_key: str) -> str:
    """Join a public base URL and an object key, escaping each key segment."""
    normalized_base = base_url.strip().rstrip("/")
    encoded_key = "/".join(quote(segment, safe="") for segment in object_key.split("/"))
    return f"{normalized_base}/{encoded_key}"
