from sqlalchemy.orm import Session
from typing import Optional
from cliprelay.models.kv_entry import KeyValueEntry
import structlog

logger = structlog.get_logger()


class LocalStorage:
    """Durable string key-value storage backed by the local database."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[str]:
        entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        return entry.value if entry else None

    def set(self, key: str, value: str) -> None:
        entry = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
        if entry:
            entry.value = value
        else:
            self.db.add(KeyValueEntry(key=key, value=value))
        self.db.commit()

    def delete(self, key: str) -> None:
        deleted = self.db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
        self.db.commit()
        logger.debug("Deleted local storage entry", key=key, deleted=deleted)
