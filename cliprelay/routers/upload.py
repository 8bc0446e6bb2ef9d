from fastapi import APIRouter, Depends, HTTPException
from cliprelay.config import Preferences, get_preferences
from cliprelay.dependencies import get_history_store, get_transport_factory
from cliprelay.schemas.history import NoticeResponse
from cliprelay.schemas.upload import ClipboardSnapshot, UploadErrorDetail, UploadResponse
from cliprelay.services.clipboard import ProvidedClipboard, SystemClipboard, get_clipboard
from cliprelay.services.history_store import HistoryStore
from cliprelay.services.upload_service import UploadOrchestrator, UploadOutcome
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/upload", tags=["upload"])

ERROR_STATUS_CODES = {
    "configuration": 400,
    "policy": 400,
    "clipboard": 422,
    "transport": 502,
}


def outcome_to_response(outcome: UploadOutcome) -> UploadResponse:
    """Convert a run outcome into the HTTP response, raising for failures."""
    if not outcome.success:
        detail = UploadErrorDetail(
            kind=outcome.error_kind or "error",
            title=outcome.title,
            message=outcome.message,
            openPreferences=outcome.open_preferences
        )
        raise HTTPException(
            status_code=ERROR_STATUS_CODES.get(outcome.error_kind, 500),
            detail=detail.model_dump()
        )

    return UploadResponse(
        title=outcome.title,
        message=outcome.message,
        url=outcome.url,
        record=outcome.record,
        notices=[NoticeResponse(title=n.title, message=n.message) for n in outcome.notices]
    )


@router.post("", response_model=UploadResponse)
def upload_snapshot(
    snapshot: ClipboardSnapshot,
    preferences: Preferences = Depends(get_preferences),
    clipboard: SystemClipboard = Depends(get_clipboard),
    history_store: HistoryStore = Depends(get_history_store),
    transport_factory=Depends(get_transport_factory)
):
    """
    Upload an explicit clipboard snapshot.

    Args:
        snapshot: File path, HTML and/or text as captured by the caller

    Returns:
        Public URL and the new history record
    """
    orchestrator = UploadOrchestrator(
        preferences=preferences,
        clipboard=ProvidedClipboard(snapshot, clipboard),
        history_store=history_store,
        transport_factory=transport_factory
    )
    outcome = orchestrator.run()

    logger.info("Handled snapshot upload", success=outcome.success, title=outcome.title)
    return outcome_to_response(outcome)


@router.post("/clipboard", response_model=UploadResponse)
def upload_system_clipboard(
    preferences: Preferences = Depends(get_preferences),
    clipboard: SystemClipboard = Depends(get_clipboard),
    history_store: HistoryStore = Depends(get_history_store),
    transport_factory=Depends(get_transport_factory)
):
    """Upload whatever is currently on the host clipboard."""
    orchestrator = UploadOrchestrator(
        preferences=preferences,
        clipboard=clipboard,
        history_store=history_store,
        transport_factory=transport_factory
    )
    outcome = orchestrator.run()

    logger.info("Handled clipboard upload", success=outcome.success, title=outcome.title)
    return outcome_to_response(outcome)
