"""JSON key-value store on top of a single SQLAlchemy table.

Each key holds one whole JSON document plus a version counter. Writers that
pass the version they read get compare-and-set semantics: if someone else
wrote in between, the write is refused with `ConcurrentWriteError` instead
of silently overwriting their change.
"""
import json
import logging
from datetime import datetime
from typing import Any, Optional, Tuple
from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bharatrewards.core.exceptions import ConcurrentWriteError
from bharatrewards.models.kv_entry import KVEntry

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Versioned JSON documents addressed by string key."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str, default: Any = None) -> Any:
        value, _ = self.get_versioned(key)
        return default if value is None else value

    def get_versioned(self, key: str) -> Tuple[Optional[Any], int]:
        """Return `(document, version)`; version is 0 when the key is absent."""
        row = self.db.execute(
            select(KVEntry.value, KVEntry.version).where(KVEntry.key == key)
        ).first()
        if row is None:
            return None, 0
        return json.loads(row.value), row.version

    def set(self, key: str, value: Any, expected_version: Optional[int] = None) -> int:
        """Write `value` under `key` and return the new version.

        With `expected_version` the write only succeeds if the stored version
        still matches (0 meaning "must not exist yet").
        """
        payload = json.dumps(value)

        if expected_version is None:
            current = self.db.execute(
                select(KVEntry.version).where(KVEntry.key == key)
            ).scalar()
            expected_version = current or 0

        if expected_version == 0:
            self.db.add(KVEntry(key=key, value=payload, version=1))
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning("Concurrent insert on key %s", key)
                raise ConcurrentWriteError(key, expected_version)
            return 1

        result = self.db.execute(
            update(KVEntry)
            .where(KVEntry.key == key, KVEntry.version == expected_version)
            .values(value=payload, version=expected_version + 1, updated_at=datetime.utcnow())
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning("Stale write on key %s (expected version %s)", key, expected_version)
            raise ConcurrentWriteError(key, expected_version)

        self.db.commit()
        return expected_version + 1

    def delete(self, key: str) -> bool:
        result = self.db.execute(delete(KVEntry).where(KVEntry.key == key))
        self.db.commit()
        return result.rowcount > 0
