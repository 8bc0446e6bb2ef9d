import re
from datetime import datetime, timezone
from urllib.parse import unquote
from cliprelay.schemas.enums import Category
from cliprelay.services.object_keys import build_public_url, generate_object_key, sanitize_extension

KEY_PATTERN = re.compile(r"^[a-z]+/\d{2}-\d{4}/\d+-[0-9a-f]{8}\.[a-z0-9]+$")


def test_generated_key_matches_partition_pattern():
    key = generate_object_key(Category.IMAGES, "png")
    assert KEY_PATTERN.match(key)
    assert key.startswith("images/")
    assert key.endswith(".png")


def test_key_uses_explicit_time():
    now = datetime(2024, 3, 5, 12, 0, 0, tzinfo=timezone.utc)
    key = generate_object_key(Category.DOCUMENTS, "txt", now)
    millis = int(now.timestamp() * 1000)
    assert key.startswith(f"documents/03-2024/{millis}-")


def test_same_millisecond_keys_differ():
    now = datetime(2024, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    keys = {generate_object_key(Category.OTHERS, "bin", now) for _ in range(50)}
    assert len(keys) == 50


def test_extension_is_sanitized():
    assert sanitize_extension("..PNG") == "png"
    assert sanitize_extension("") == "bin"
    assert sanitize_extension(None) == "bin"
    assert generate_object_key(Category.OTHERS).endswith(".bin")


def test_public_url_trims_trailing_slashes():
    url = build_public_url("https://files.example.com///", "images/01-2025/1-abcdef01.png")
    assert url == "https://files.example.com/images/01-2025/1-abcdef01.png"


def test_public_url_escapes_each_segment():
    key = "documents/01-2025/my file#1?.txt"
    url = build_public_url("https://cdn.example.com", key)
    assert url == "https://cdn.example.com/documents/01-2025/my%20file%231%3F.txt"

    path = url[len("https://cdn.example.com/"):]
    assert "/".join(unquote(segment) for segment in path.split("/")) == key
