from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from cliprelay.database import Base


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"

    key = Column(String, primary_key=True, index=True)  # e.g. "history.v2"
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
