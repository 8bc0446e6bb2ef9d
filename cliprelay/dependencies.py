from fastapi import Depends
from sqlalchemy.orm import Session
from cliprelay.database import get_db
from cliprelay.services.history_store import HistoryStore, ViewModeStore
from cliprelay.services.local_storage import LocalStorage
from cliprelay.services.r2_service import build_transport


def get_local_storage(db: Session = Depends(get_db)) -> LocalStorage:
    return LocalStorage(db)


def get_history_store(storage: LocalStorage = Depends(get_local_storage)) -> HistoryStore:
    return HistoryStore(storage)


def get_view_mode_store(storage: LocalStorage = Depends(get_local_storage)) -> ViewModeStore:
    return ViewModeStore(storage)


def get_transport_factory():
    return build_transport
