"""
Clipboard upload orchestration.

One run reads the clipboard, classifies what it finds, applies the
admission policy, uploads through the provider transport and records
the result in local history. Every failure becomes an `UploadOutcome`
with a title and a one-line message; nothing reaches the network until
configuration, policy and clipboard checks have all passed.
"""

import base64
import binascii
import os
import re
import stat
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from cliprelay.config import Preferences
from cliprelay.exceptions import (
    ClipRelayError,
    ClipboardError,
    ConfigurationError,
    PersistenceRecoveryWarning,
    PolicyError,
    TransportError,
)
from cliprelay.schemas.enums import Category, CloudProvider
from cliprelay.schemas.history import UploadRecord
from cliprelay.schemas.upload import ClipboardSnapshot
from cliprelay.services import file_types
from cliprelay.services.admission import (
    AdmissionPolicy,
    get_allowed_categories,
    get_cloud_provider,
    parse_history_limit,
    parse_max_upload_size_mb,
)
from cliprelay.services.clipboard import normalize_clipboard_file_path
from cliprelay.services.history_store import HistoryStore
from cliprelay.services.object_keys import build_public_url, epoch_millis, generate_object_key
from cliprelay.services.r2_service import build_transport
from cliprelay.services.storage_config import StorageConfiguration, normalize_configuration, validate_configuration
import structlog

logger = structlog.get_logger()

DATA_URI_PATTERN = re.compile(r"data:(image/[a-zA-Z0-9.+-]+);base64,([A-Za-z0-9+/=\n\r]+)", re.IGNORECASE)
SIGNATURE_PROBE_BYTES = 32

HISTORY_RECOVERED_NOTICE = PersistenceRecoveryWarning(
    title="Recovered invalid local history",
    message="New uploads are now stored with a clean history"
)


class UploadState(Enum):
    IDLE = "idle"
    READING_CLIPBOARD = "reading_clipboard"
    CLASSIFYING = "classifying"
    VALIDATING = "validating"
    UPLOADING = "uploading"
    RECORDING_HISTORY = "recording_history"
    DONE = "done"


@dataclass
class UploadCandidate:
    file_name: str
    file_size_bytes: int
    extension: Optional[str]
    category: Category
    content: Optional[bytes] = None
    path: Optional[str] = None  # file candidates are read only once admitted

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        try:
            with open(self.path, "rb") as f:
                return f.read()
        except (OSError, ValueError) as e:
            raise ClipboardError(
                "Cannot access copied file",
                "The copied file path is invalid or unavailable",
                original_error=e
            )


@dataclass
class UploadOutcome:
    success: bool
    title: str
    message: str
    url: Optional[str] = None
    record: Optional[UploadRecord] = None
    error_kind: Optional[str] = None
    open_preferences: bool = False
    notices: List[PersistenceRecoveryWarning] = field(default_factory=list)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_clipboard_text_file_name(now: datetime) -> str:
    stamp = re.sub(r"[:.]", "-", _iso_timestamp(now))
    return f"clipboard-text-{stamp}.txt"


def extract_image_data_uri(raw: str):
    """Find a base64 image data URI anywhere in `raw`; returns (mime_type, base64) or None."""
    match = DATA_URI_PATTERN.search(raw)
    if not match:
        return None
    payload = re.sub(r"\s+", "", match.group(2)).rstrip("=")
    return match.group(1), payload + "=" * (-len(payload) % 4)


def _read_file_candidate(file_reference: str) -> UploadCandidate:
    local_path = normalize_clipboard_file_path(file_reference)
    try:
        file_stats = os.stat(local_path)
    except (OSError, ValueError) as e:
        raise ClipboardError(
            "Cannot access copied file",
            "The copied file path is invalid or unavailable",
            original_error=e
        )

    if not stat.S_ISREG(file_stats.st_mode):
        raise ClipboardError("Clipboard item is not a file", "Copy a file or text and try again")

    extension = file_types.get_normalized_extension(local_path)
    if not extension:
        try:
            with open(local_path, "rb") as f:
                extension = file_types.detect_image_extension(f.read(SIGNATURE_PROBE_BYTES))
        except (OSError, ValueError) as e:
            raise ClipboardError(
                "Cannot access copied file",
                "The copied file path is invalid or unavailable",
                original_error=e
            )

    return UploadCandidate(
        file_name=file_types.get_file_name(local_path),
        file_size_bytes=file_stats.st_size,
        extension=extension,
        category=file_types.get_category_from_extension(extension),
        path=local_path
    )


def _read_data_uri_candidate(snapshot: ClipboardSnapshot, now: datetime) -> Optional[UploadCandidate]:
    for source in (snapshot.html, snapshot.text):
        if not source:
            continue

        extracted = extract_image_data_uri(source)
        if not extracted:
            continue

        mime_type, payload = extracted
        extension = file_types.get_extension_from_mime_type(mime_type)
        if not extension:
            continue

        try:
            decoded = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError):
            logger.debug("Skipping undecodable image data URI", mime_type=mime_type)
            continue
        if not decoded:
            continue

        return UploadCandidate(
            file_name=f"clipboard-image-{epoch_millis(now)}.{extension}",
            file_size_bytes=len(decoded),
            extension=extension,
            category=Category.IMAGES,
            content=decoded
        )

    return None


def resolve_candidate(snapshot: ClipboardSnapshot, now: datetime) -> UploadCandidate:
    """
    Turn a clipboard snapshot into something uploadable.

    Resolution order: copied file, inline image data URI (HTML first,
    then text), plain text as a generated .txt document.

    Raises:
        ClipboardError: When the file is unusable or nothing is supported
    """
    if snapshot.file and snapshot.file.strip():
        return _read_file_candidate(snapshot.file)

    candidate = _read_data_uri_candidate(snapshot, now)
    if candidate:
        return candidate

    if snapshot.text:
        content = snapshot.text.encode("utf-8")
        return UploadCandidate(
            file_name=build_clipboard_text_file_name(now),
            file_size_bytes=len(content),
            extension="txt",
            category=Category.DOCUMENTS,
            content=content
        )

    raise ClipboardError(
        "Clipboard content not supported",
        "Copy a file, image, or plain text and try again"
    )


def load_storage_configuration(preferences: Preferences) -> StorageConfiguration:
    configuration = normalize_configuration(preferences)
    errors = validate_configuration(configuration)
    if errors:
        raise ConfigurationError("Invalid preferences", errors[0])
    return configuration


def load_admission_policy(preferences: Preferences) -> AdmissionPolicy:
    max_upload_size_mb = parse_max_upload_size_mb(preferences.max_upload_size_mb)
    if not max_upload_size_mb:
        raise ConfigurationError(
            "Invalid max upload size",
            "Max Upload Size (MB) must be a positive integer"
        )

    allowed_categories = get_allowed_categories(preferences)
    if not allowed_categories:
        raise PolicyError(
            "No file categories allowed",
            "Enable at least one allowed file type in preferences",
            open_preferences=True
        )

    return AdmissionPolicy(allowed_categories=allowed_categories, max_upload_size_mb=max_upload_size_mb)


def enforce_policy(candidate: UploadCandidate, policy: AdmissionPolicy) -> None:
    if candidate.file_size_bytes > policy.max_upload_size_bytes:
        raise PolicyError("File too large", f"Maximum allowed size is {policy.max_upload_size_mb} MB")

    if not policy.allows(candidate.category):
        raise PolicyError(
            "File type not allowed",
            f"Enable {candidate.category.value} in preferences to upload this file"
        )


class UploadOrchestrator:
    """Runs a single clipboard upload from preferences to history record."""

    def __init__(
        self,
        preferences: Preferences,
        clipboard,
        history_store: HistoryStore,
        transport_factory: Callable = build_transport,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.preferences = preferences
        self.clipboard = clipboard
        self.history_store = history_store
        self.transport_factory = transport_factory
        self.clock = clock
        self.state = UploadState.IDLE

    def _enter(self, state: UploadState):
        self.state = state
        logger.debug("Upload state changed", state=state.value)

    def run(self) -> UploadOutcome:
        try:
            outcome = self._run()
        except ClipRelayError as e:
            log = logger.error if isinstance(e, TransportError) else logger.warning
            log(
                "Clipboard upload failed",
                kind=e.kind,
                title=e.title,
                error=e.message,
                state=self.state.value
            )
            outcome = UploadOutcome(
                success=False,
                title=e.title,
                message=e.message,
                error_kind=e.kind,
                open_preferences=e.open_preferences
            )
        self._enter(UploadState.DONE)
        return outcome

    def _run(self) -> UploadOutcome:
        preferences = self.preferences
        provider = get_cloud_provider(preferences.cloud_provider)
        configuration = load_storage_configuration(preferences)
        policy = load_admission_policy(preferences)

        self._enter(UploadState.READING_CLIPBOARD)
        snapshot = self.clipboard.read()

        self._enter(UploadState.CLASSIFYING)
        now = self.clock()
        candidate = resolve_candidate(snapshot, now)

        self._enter(UploadState.VALIDATING)
        enforce_policy(candidate, policy)
        body = candidate.read_bytes()

        self._enter(UploadState.UPLOADING)
        object_key = generate_object_key(candidate.category, candidate.extension, now)
        content_type = file_types.get_content_type(candidate.extension)
        self._upload(provider, configuration, object_key, body, content_type)

        self._enter(UploadState.RECORDING_HISTORY)
        public_url = build_public_url(configuration.public_base_url, object_key)
        copied = self.clipboard.write(public_url)

        record = UploadRecord(
            id=str(uuid.uuid4()),
            provider=provider,
            category=candidate.category,
            file_name=candidate.file_name,
            file_extension=candidate.extension or "",
            file_size_bytes=candidate.file_size_bytes,
            key=object_key,
            url=public_url,
            created_at=_iso_timestamp(now)
        )
        notices = self._record(record)

        logger.info(
            "Clipboard upload completed",
            category=record.category.value,
            key=object_key,
            size=record.file_size_bytes
        )

        return UploadOutcome(
            success=True,
            title="Uploaded to cloud",
            message="URL copied to clipboard" if copied is not False else "Copy the URL manually",
            url=public_url,
            record=record,
            notices=notices
        )

    def _upload(
        self,
        provider: CloudProvider,
        configuration: StorageConfiguration,
        object_key: str,
        body: bytes,
        content_type: str
    ) -> None:
        try:
            transport = self.transport_factory(provider, configuration)
            transport.put_object(configuration.bucket, object_key, body, content_type)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError("Upload failed", str(e) or "Unknown upload error", original_error=e)

    def _record(self, record: UploadRecord) -> List[PersistenceRecoveryWarning]:
        limit = parse_history_limit(self.preferences.history_limit)
        try:
            previous = self.history_store.prepend(record, limit)
        except SQLAlchemyError as e:
            raise ClipRelayError(
                "Upload not recorded",
                f"Uploaded to {record.url} but local history could not be saved",
                original_error=e
            )

        if previous.malformed:
            return [HISTORY_RECOVERED_NOTICE]
        return []
