"""
Upload history and gallery view-mode persistence.

Stored bytes are never trusted: every read is schema-checked and an
invalid payload degrades to "whatever survived, plus a malformed flag".
Callers rewrite clean state so the same corruption is not reported on
every read.
"""

import json
from dataclasses import dataclass, field
from typing import List, Optional
from pydantic import ValidationError
from cliprelay.schemas.enums import ViewMode
from cliprelay.schemas.history import UploadRecord
import structlog

logger = structlog.get_logger()

# Schema version lives in the key name; a new version starts empty.
HISTORY_STORAGE_KEY = "history.v2"
VIEW_MODE_STORAGE_KEY = "galleryView.v1"

DEFAULT_VIEW_MODE = ViewMode.LIST


@dataclass
class HistoryResult:
    records: List[UploadRecord] = field(default_factory=list)
    malformed: bool = False


@dataclass
class ViewModeResult:
    mode: ViewMode = DEFAULT_VIEW_MODE
    malformed: bool = False


def parse_history(raw: Optional[str]) -> HistoryResult:
    if not raw:
        return HistoryResult()

    try:
        parsed = json.loads(raw)
    except ValueError:
        return HistoryResult(malformed=True)

    if not isinstance(parsed, list):
        return HistoryResult(malformed=True)

    records = []
    seen_ids = set()
    for element in parsed:
        try:
            record = UploadRecord.model_validate(element)
        except ValidationError:
            continue
        if record.id in seen_ids:
            continue
        seen_ids.add(record.id)
        records.append(record)

    return HistoryResult(records=records, malformed=len(records) != len(parsed))


def trim_to_limit(records: List[UploadRecord], limit: Optional[int]) -> List[UploadRecord]:
    if limit is None:
        return list(records)
    return list(records[:limit])


def serialize_history(records: List[UploadRecord]) -> str:
    return json.dumps([record.model_dump(mode="json", by_alias=True) for record in records])


class HistoryStore:
    """Ordered, bounded, newest-first list of upload records."""

    def __init__(self, storage):
        self.storage = storage

    def read(self) -> HistoryResult:
        result = parse_history(self.storage.get(HISTORY_STORAGE_KEY))
        if result.malformed:
            logger.warning(
                "Stored upload history failed validation",
                surviving_records=len(result.records)
            )
        return result

    def write(self, records: List[UploadRecord], limit: Optional[int] = None) -> None:
        self.storage.set(HISTORY_STORAGE_KEY, serialize_history(trim_to_limit(records, limit)))

    def read_and_repair(self, limit: Optional[int] = None) -> HistoryResult:
        """
        Read history trimmed to `limit`.

        Malformed or over-limit stored state is overwritten with the clean,
        trimmed survivors so it is not reported again on the next read.
        """
        result = self.read()
        records = trim_to_limit(result.records, limit)
        if result.malformed or len(records) != len(result.records):
            self.write(records)
            logger.info("Rewrote upload history with clean state", records=len(records))
        return HistoryResult(records=records, malformed=result.malformed)

    def prepend(self, record: UploadRecord, limit: Optional[int] = None) -> HistoryResult:
        """
        Insert a record at the front of the history.

        Returns:
            The state before insertion, so callers can tell whether this
            same write also repaired malformed history
        """
        current = self.read()
        self.write([record] + current.records, limit)
        return current

    def remove(self, record_id: str, limit: Optional[int] = None) -> bool:
        current = self.read()
        remaining = [record for record in current.records if record.id != record_id]
        self.write(remaining, limit)
        return len(remaining) != len(current.records)

    def clear(self) -> None:
        self.storage.delete(HISTORY_STORAGE_KEY)


class ViewModeStore:
    def __init__(self, storage):
        self.storage = storage

    def read(self) -> ViewModeResult:
        raw = self.storage.get(VIEW_MODE_STORAGE_KEY)
        if not raw:
            return ViewModeResult()

        try:
            return ViewModeResult(mode=ViewMode(raw))
        except ValueError:
            logger.warning("Stored view mode is not recognized", value=raw[:20])
            return ViewModeResult(malformed=True)

    def write(self, mode: ViewMode) -> None:
        self.storage.set(VIEW_MODE_STORAGE_KEY, ViewMode(mode).value)
