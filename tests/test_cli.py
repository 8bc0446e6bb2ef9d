from unittest.mock import patch
from cliprelay.cli import build_parser, format_bytes, run_history, run_view_mode
from cliprelay.schemas.enums import Category, CloudProvider
from cliprelay.schemas.history import UploadRecord
from cliprelay.services.history_store import VIEW_MODE_STORAGE_KEY, HistoryStore, ViewModeStore


def store_record(storage, record_id, category):
    HistoryStore(storage).prepend(UploadRecord(
        id=record_id,
        provider=CloudProvider.CLOUDFLARE_R2,
        category=category,
        file_name=f"{record_id}.bin",
        file_extension="bin",
        file_size_bytes=2048,
        key=f"{category.value}/01-2025/1-00000000.bin",
        url=f"https://files.example.com/{category.value}/01-2025/1-00000000.bin",
        created_at="2025-01-01T00:00:00.000Z"
    ))


def test_format_bytes():
    assert format_bytes(512) == "512 B"
    assert format_bytes(1536) == "1.5 KB"
    assert format_bytes(20 * 1024 * 1024) == "20 MB"


def test_history_lists_filtered_records(memory_storage, make_prefs, capsys):
    store_record(memory_storage, "doc-1", Category.DOCUMENTS)
    store_record(memory_storage, "img-1", Category.IMAGES)
    args = build_parser().parse_args(["history", "--category", "images"])

    with patch('cliprelay.cli.get_preferences', return_value=make_prefs()):
        assert run_history(args, memory_storage) == 0

    output = capsys.readouterr().out
    assert "img-1" in output
    assert "doc-1" not in output


def test_history_remove_unknown_record(memory_storage, make_prefs):
    args = build_parser().parse_args(["history", "remove", "missing"])

    with patch('cliprelay.cli.get_preferences', return_value=make_prefs()):
        assert run_history(args, memory_storage) == 1


def test_history_clear(memory_storage, make_prefs):
    store_record(memory_storage, "doc-1", Category.DOCUMENTS)
    args = build_parser().parse_args(["history", "clear"])

    with patch('cliprelay.cli.get_preferences', return_value=make_prefs()):
        assert run_history(args, memory_storage) == 0

    assert HistoryStore(memory_storage).read().records == []


def test_view_mode_toggle(memory_storage):
    args = build_parser().parse_args(["view-mode", "toggle"])

    assert run_view_mode(args, memory_storage) == 0
    assert ViewModeStore(memory_storage).read().mode.value == "grid"


def test_history_reports_reset_view_mode(memory_storage, make_prefs, capsys):
    memory_storage.set(VIEW_MODE_STORAGE_KEY, "carousel")
    args = build_parser().parse_args(["history"])

    with patch('cliprelay.cli.get_preferences', return_value=make_prefs()):
        assert run_history(args, memory_storage) == 0

    assert "Recovered invalid local data" in capsys.readouterr().err
    assert memory_storage.get(VIEW_MODE_STORAGE_KEY) == "list"
