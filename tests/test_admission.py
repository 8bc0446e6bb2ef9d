import pytest
from cliprelay.schemas.enums import Category, CloudProvider
from cliprelay.services.admission import (
    AdmissionPolicy,
    get_allowed_categories,
    get_cloud_provider,
    is_checked,
    parse_history_limit,
    parse_max_upload_size_mb,
)


@pytest.mark.parametrize("value,expected", [
    (True, True),
    (False, False),
    ("true", True),
    ("TRUE", True),
    ("false", False),
    ("no", False),
    (None, True),
])
def test_is_checked(value, expected):
    assert is_checked(value) is expected


def test_absent_toggles_allow_every_category(make_prefs):
    assert get_allowed_categories(make_prefs()) == frozenset(Category)


def test_explicit_false_disallows(make_prefs):
    allowed = get_allowed_categories(make_prefs(allow_videos=False, allow_audios="false"))
    assert Category.VIDEOS not in allowed
    assert Category.AUDIOS not in allowed
    assert Category.IMAGES in allowed


@pytest.mark.parametrize("raw,expected", [
    (None, 25),
    ("", 25),
    ("   ", 25),
    ("10", 10),
    (" 100 ", 100),
    ("25.0", 25),
    ("0", None),
    ("-5", None),
    ("2.5", None),
    ("abc", None),
    ("nan", None),
    ("inf", None),
])
def test_parse_max_upload_size_mb(raw, expected):
    assert parse_max_upload_size_mb(raw) == expected


@pytest.mark.parametrize("option,expected", [
    (None, 200),
    ("50", 50),
    ("100", 100),
    ("500", 500),
    ("unlimited", None),
    ("37", 200),
    ("lots", 200),
])
def test_parse_history_limit(option, expected):
    assert parse_history_limit(option) == expected


def test_policy_size_in_bytes():
    policy = AdmissionPolicy(allowed_categories=frozenset({Category.IMAGES}), max_upload_size_mb=10)
    assert policy.max_upload_size_bytes == 10 * 1024 * 1024
    assert policy.allows(Category.IMAGES)
    assert not policy.allows(Category.ARCHIVES)


def test_unknown_provider_defaults_to_r2():
    assert get_cloud_provider(None) == CloudProvider.CLOUDFLARE_R2
    assert get_cloud_provider("cloudflare-r2") == CloudProvider.CLOUDFLARE_R2
    assert get_cloud_provider("dropbox") == CloudProvider.CLOUDFLARE_R2
