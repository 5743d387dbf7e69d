# student_dashboard/services/kv_store.py
"""
Key-value persistence capability.

Services receive a ``KeyValueStore`` instead of reaching for a global; the
SQL implementation stores one JSON document per key, the in-memory one is
used by tests and by the CLI when no database is configured.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Protocol

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from student_dashboard.models import KeyValueEntry, db
from student_dashboard.records.errors import TransportError

logger = logging.getLogger(__name__)


def _log():
    return current_app.logger if has_app_context() else logger


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dictionary-backed store; values round-trip through JSON like the SQL store"""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._blobs: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        blob = self._blobs.get(key)
        if blob is None:
            return default
        return json.loads(blob)

    def set(self, key: str, value: Any) -> None:
        self._blobs[key] = json.dumps(value)

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._blobs


class SqlKeyValueStore:
    """Store backed by the ``key_value_entries`` table"""

    def get(self, key: str, default: Any = None) -> Any:
        try:
            entry = KeyValueEntry.query.filter_by(key=key).first()
        except SQLAlchemyError as e:
            _log().error(f"Database error reading key {key}: {str(e)}")
            raise TransportError(f"Could not read '{key}' from storage.") from e

        if entry is None:
            return default
        try:
            return entry.get_value()
        except json.JSONDecodeError:
            _log().warning(f"Stored value for key {key} is not valid JSON. Using default.")
            return default

    def set(self, key: str, value: Any) -> None:
        try:
            entry = KeyValueEntry.query.filter_by(key=key).first()
            if entry is None:
                entry = KeyValueEntry(key=key)
                db.session.add(entry)
            entry.set_value(value)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            _log().error(f"Database error writing key {key}: {str(e)}")
            raise TransportError(f"Could not write '{key}' to storage.") from e

    def delete(self, key: str) -> None:
        try:
            KeyValueEntry.query.filter_by(key=key).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            _log().error(f"Database error deleting key {key}: {str(e)}")
            raise TransportError(f"Could not delete '{key}' from storage.") from e
