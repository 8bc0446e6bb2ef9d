"""
Command line entry point.

    cliprelay upload
    cliprelay history [--category images]
    cliprelay history copy|open|remove <id>
    cliprelay history clear
    cliprelay view-mode [grid|list|toggle]
    cliprelay serve
"""

import argparse
import sys
import webbrowser
from cliprelay.config import get_preferences
from cliprelay.database import Base, SessionLocal, engine
from cliprelay.log_config import configure_logging
from cliprelay.models import kv_entry  # noqa: F401
from cliprelay.schemas.enums import Category, ViewMode
from cliprelay.services.admission import parse_history_limit
from cliprelay.services.clipboard import SystemClipboard
from cliprelay.services.history_store import DEFAULT_VIEW_MODE, HistoryStore, ViewModeStore
from cliprelay.services.local_storage import LocalStorage
from cliprelay.services.storage_config import normalize_configuration, validate_configuration
from cliprelay.services.upload_service import UploadOrchestrator
import structlog

logger = structlog.get_logger()


def format_bytes(size) -> str:
    if size < 1024:
        return f"{int(size)} B"

    units = ["KB", "MB", "GB", "TB"]
    value = size / 1024
    unit_index = 0
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1

    return f"{value:.0f} {units[unit_index]}" if value >= 10 else f"{value:.1f} {units[unit_index]}"


def run_upload(args, storage: LocalStorage) -> int:
    orchestrator = UploadOrchestrator(
        preferences=get_preferences(),
        clipboard=SystemClipboard(),
        history_store=HistoryStore(storage)
    )
    outcome = orchestrator.run()

    if not outcome.success:
        print(f"{outcome.title}: {outcome.message}", file=sys.stderr)
        if outcome.open_preferences:
            print("Update your preferences (CLIPRELAY_* settings) and try again.", file=sys.stderr)
        return 1

    print(f"{outcome.title}: {outcome.message}")
    print(outcome.url)
    for notice in outcome.notices:
        print(f"{notice.title}: {notice.message}", file=sys.stderr)
    return 0


def _find_record(store: HistoryStore, record_id: str):
    for record in store.read().records:
        if record.id == record_id:
            return record
    return None


def run_history(args, storage: LocalStorage) -> int:
    preferences = get_preferences()
    store = HistoryStore(storage)
    limit = parse_history_limit(preferences.history_limit)

    if args.action == "clear":
        store.clear()
        print("File library history cleared")
        return 0

    if args.action in ("copy", "open", "remove"):
        if not args.record_id:
            print(f"history {args.action} needs a record id", file=sys.stderr)
            return 1

        if args.action == "remove":
            if not store.remove(args.record_id, limit):
                print(f"History record {args.record_id} not found", file=sys.stderr)
                return 1
            print("Removed from history")
            return 0

        record = _find_record(store, args.record_id)
        if record is None:
            print(f"History record {args.record_id} not found", file=sys.stderr)
            return 1
        if args.action == "copy":
            SystemClipboard().write(record.url)
            print(f"Copied {record.url}")
        else:
            webbrowser.open(record.url)
        return 0

    configuration_errors = validate_configuration(normalize_configuration(preferences))
    if configuration_errors:
        print(f"Configure preferences first: {configuration_errors[0]}", file=sys.stderr)

    result = store.read_and_repair(limit)
    if result.malformed:
        print("Recovered invalid local history", file=sys.stderr)

    view_store = ViewModeStore(storage)
    view_mode = view_store.read()
    if view_mode.malformed:
        view_store.write(DEFAULT_VIEW_MODE)
        print("Recovered invalid local data: gallery view was reset to list", file=sys.stderr)

    records = [r for r in result.records if args.category in (None, "all") or r.category.value == args.category]
    if not records:
        print("No uploads yet")
        return 0

    for record in records:
        if view_mode.mode == ViewMode.GRID:
            print(f"[{record.category.value}] {record.file_name}  {record.url}")
        else:
            print(
                f"{record.id}  {record.created_at}  {record.category.value:<9}  "
                f"{format_bytes(record.file_size_bytes):>8}  {record.file_name}\n    {record.url}"
            )
    return 0


def run_view_mode(args, storage: LocalStorage) -> int:
    store = ViewModeStore(storage)
    if args.mode == "toggle":
        current = store.read().mode
        mode = ViewMode.LIST if current == ViewMode.GRID else ViewMode.GRID
    elif args.mode:
        mode = ViewMode(args.mode)
    else:
        print(store.read().mode.value)
        return 0

    store.write(mode)
    print(f"View mode set to {mode.value}")
    return 0


def run_serve(args) -> int:
    import uvicorn
    uvicorn.run("cliprelay.main:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cliprelay", description="Upload clipboard content to object storage")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("upload", help="Upload the current clipboard content")

    history_parser = subparsers.add_parser("history", help="Browse past uploads")
    history_parser.add_argument("action", nargs="?", choices=["list", "copy", "open", "remove", "clear"], default="list")
    history_parser.add_argument("record_id", nargs="?")
    history_parser.add_argument("--category", choices=["all"] + [c.value for c in Category])

    view_parser = subparsers.add_parser("view-mode", help="Show or change the library view mode")
    view_parser.add_argument("mode", nargs="?", choices=[m.value for m in ViewMode] + ["toggle"])

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(json_logs=False)

    if args.command == "serve":
        return run_serve(args)

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        storage = LocalStorage(db)
        if args.command == "upload":
            return run_upload(args, storage)
        if args.command == "history":
            return run_history(args, storage)
        return run_view_mode(args, storage)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
