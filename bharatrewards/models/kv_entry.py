"""Key-value store model."""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Integer
from bharatrewards.db.base import Base


class KVEntry(Base):
    """One JSON document per storage key, with an optimistic version counter."""

    __tablename__ = "kv_store"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
