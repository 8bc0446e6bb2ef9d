from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
from cliprelay.config import Preferences, get_preferences
from cliprelay.dependencies import get_history_store, get_view_mode_store
from cliprelay.schemas.enums import Category, ViewMode
from cliprelay.schemas.history import HistoryResponse, NoticeResponse, ViewModeRequest, ViewModeResponse
from cliprelay.services.admission import parse_history_limit
from cliprelay.services.history_store import DEFAULT_VIEW_MODE, HistoryStore, ViewModeResult, ViewModeStore
from cliprelay.services.storage_config import normalize_configuration, validate_configuration
import structlog

logger = structlog.get_logger()
router = APIRouter(prefix="/history", tags=["history"])

ALL_CATEGORIES = "all"


def load_view_mode(view_mode_store: ViewModeStore) -> ViewModeResult:
    result = view_mode_store.read()
    if result.malformed:
        view_mode_store.write(DEFAULT_VIEW_MODE)
    return result


@router.get("", response_model=HistoryResponse)
async def list_history(
    category: Optional[str] = Query(ALL_CATEGORIES),
    preferences: Preferences = Depends(get_preferences),
    history_store: HistoryStore = Depends(get_history_store),
    view_mode_store: ViewModeStore = Depends(get_view_mode_store)
):
    """
    List upload history, newest first.

    Malformed stored history or view mode is rewritten with clean state
    and reported as a notice rather than an error.
    """
    if category != ALL_CATEGORIES:
        try:
            selected = Category(category)
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Unknown category: {category}")
    else:
        selected = None

    configuration_errors = validate_configuration(normalize_configuration(preferences))
    limit = parse_history_limit(preferences.history_limit)

    result = history_store.read_and_repair(limit)
    view_mode = load_view_mode(view_mode_store)

    notices = []
    if result.malformed:
        notices.append(NoticeResponse(
            title="Recovered invalid local history",
            message="Invalid entries were removed from the file library"
        ))
    if view_mode.malformed:
        notices.append(NoticeResponse(
            title="Recovered invalid local data",
            message="Gallery view was reset to list"
        ))

    items = [record for record in result.records if selected is None or record.category == selected]

    return HistoryResponse(
        items=items,
        total=len(items),
        category=selected,
        viewMode=view_mode.mode,
        configurationError=configuration_errors[0] if configuration_errors else None,
        notices=notices
    )


@router.delete("/{record_id}")
async def remove_history_record(
    record_id: str,
    preferences: Preferences = Depends(get_preferences),
    history_store: HistoryStore = Depends(get_history_store)
):
    """Remove one record from local history. The remote object is left untouched."""
    removed = history_store.remove(record_id, parse_history_limit(preferences.history_limit))
    if not removed:
        raise HTTPException(status_code=404, detail=f"History record {record_id} not found")

    logger.info("Removed history record", record_id=record_id)
    return {"id": record_id, "status": "removed"}


@router.delete("")
async def clear_history(history_store: HistoryStore = Depends(get_history_store)):
    """Forget every locally stored upload URL."""
    history_store.clear()
    logger.info("Cleared upload history")
    return {"status": "cleared"}


@router.put("/view-mode", response_model=ViewModeResponse)
async def set_view_mode(
    request: ViewModeRequest,
    view_mode_store: ViewModeStore = Depends(get_view_mode_store)
):
    view_mode_store.write(request.mode)
    return ViewModeResponse(viewMode=request.mode)


@router.post("/view-mode/toggle", response_model=ViewModeResponse)
async def toggle_view_mode(view_mode_store: ViewModeStore = Depends(get_view_mode_store)):
    current = load_view_mode(view_mode_store).mode
    next_mode = ViewMode.LIST if current == ViewMode.GRID else ViewMode.GRID
    view_mode_store.write(next_mode)
    return ViewModeResponse(viewMode=next_mode)
