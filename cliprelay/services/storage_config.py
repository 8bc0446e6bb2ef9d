import re
from dataclasses import dataclass
from typing import Any, List, Mapping
from pydantic import HttpUrl, TypeAdapter, ValidationError

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_http_url = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class StorageConfiguration:
    endpoint: str = ""
    bucket: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: str = ""


def _raw_value(raw: Any, name: str) -> str:
    if isinstance(raw, Mapping):
        value = raw.get(name)
    else:
        value = getattr(raw, name, None)
    return value.strip() if isinstance(value, str) else ""


def normalize_endpoint(endpoint: str) -> str:
    trimmed = (endpoint or "").strip()
    if not trimmed:
        return ""
    if not _SCHEME_PATTERN.match(trimmed):
        trimmed = f"https://{trimmed}"
    return trimmed.rstrip("/")


def is_valid_http_url(value: str) -> bool:
    try:
        url = _http_url.validate_python(value)
    except ValidationError:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


def normalize_configuration(raw: Any) -> StorageConfiguration:
    """
    Trim every field, default the endpoint scheme to https:// and strip
    trailing slashes from both URL fields. Accepts a mapping or any object
    exposing the fields as attributes; never raises.
    """
    return StorageConfiguration(
        endpoint=normalize_endpoint(_raw_value(raw, "endpoint")),
        bucket=_raw_value(raw, "bucket"),
        access_key_id=_raw_value(raw, "access_key_id"),
        secret_access_key=_raw_value(raw, "secret_access_key"),
        public_base_url=_raw_value(raw, "public_base_url").rstrip("/"),
    )


def validate_configuration(configuration: StorageConfiguration) -> List[str]:
    """Return error messages in a fixed order; empty means usable."""
    errors = []

    if not configuration.endpoint.strip():
        errors.append("Endpoint is required")
    elif not is_valid_http_url(normalize_endpoint(configuration.endpoint)):
        errors.append("Endpoint must be a valid URL")

    if not configuration.bucket.strip():
        errors.append("Bucket is required")

    if not configuration.access_key_id.strip():
        errors.append("Access Key ID is required")

    if not configuration.secret_access_key.strip():
        errors.append("Secret Access Key is required")

    if not configuration.public_base_url.strip():
        errors.append("Public Base URL is required")
    elif not is_valid_http_url(configuration.public_base_url.strip()):
        errors.append("Public Base URL must be a valid URL")

    return errors


def mask_secret(secret: str) -> str:
    if len(secret) <= 4:
        return "*" * len(secret)
    return "*" * (len(secret) - 4) + secret[-4:]
