"""
Session Stores - Interchangeable storage tiers.

Every tier implements the same small contract (get/put by identifier)
and stores the same record shape (Session.to_dict()):

- MemorySessionStore: volatile, in-process; lost on restart
- SqliteSessionStore: durable, one JSON document per session

Stores hand out fresh Session objects on every get, so callers never
share mutable state through a store.
"""

from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Any, Collection, Protocol
import json
import logging
import sqlite3
import threading

from ..engine_core.state import Session, SessionStatus, utc_now

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when a storage tier cannot serve a request."""


class SessionStore(Protocol):
    """Contract shared by all storage tiers."""

    name: str

    def is_available(self) -> bool:
        """Whether the tier can currently accept reads and writes."""
        ...

    def get(self, session_id: str) -> Session | None:
        """Load a session, or None if this tier does not hold it."""
        ...

    def put(self, session: Session) -> None:
        """Insert or replace a session."""
        ...


class MemorySessionStore:
    """
    Volatile in-process tier.

    No persistence: records disappear when the process exits.
    """

    name = "volatile"

    def __init__(self):
        self._records: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def is_available(self) -> bool:
        return True

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            record = self._records.get(session_id)
        if record is None:
            return None
        return Session.from_dict(record)

    def put(self, session: Session) -> None:
        record = session.to_dict()
        with self._lock:
            self._records[session.session_id] = record

    def discard(self, session_id: str) -> None:
        """Drop a record if present."""
        with self._lock:
            self._records.pop(session_id, None)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def evict_older_than(
        self,
        max_age_seconds: float,
        now: datetime | None = None,
        keep: Collection[str] = (),
    ) -> list[str]:
        """
        Remove finished rounds that ended more than max_age_seconds ago.

        Active rounds and identifiers in keep are never evicted. Returns
        the removed identifiers.
        """
        current = now or utc_now()
        removed: list[str] = []
        with self._lock:
            for session_id, record in list(self._records.items()):
                if session_id in keep:
                    continue
                if record.get("status") == SessionStatus.ACTIVE.value:
                    continue
                ended_at = record.get("endedAt")
                if not ended_at:
                    continue
                age = (current - datetime.fromisoformat(ended_at)).total_seconds()
                if age > max_age_seconds:
                    del self._records[session_id]
                    removed.append(session_id)
        if removed:
            logger.info("Evicted %d finished session(s) from memory", len(removed))
        return removed


_SCHEMA = """
CREATE TABLE IF NOT EXISTS sessions (
    id TEXT PRIMARY KEY,
    status TEXT NOT NULL,
    data TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class SqliteSessionStore:
    """
    Durable tier backed by a SQLite file.

    Opens a short-lived connection per call, so it is safe to use from
    any thread. Each session is one row holding its JSON record.
    """

    name = "durable"

    def __init__(self, db_path: str | Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.timeout = timeout
        self._ready = False

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path), timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        if not self._ready:
            conn.execute(_SCHEMA)
            conn.commit()
            self._ready = True
        return conn

    def is_available(self) -> bool:
        try:
            conn = self._connect()
            try:
                conn.execute("SELECT 1")
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            logger.warning("Durable store at %s unavailable: %s", self.db_path, exc)
            return False
        return True

    def get(self, session_id: str) -> Session | None:
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT data FROM sessions WHERE id = ?", (session_id,)
                ).fetchone()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"Durable lookup failed for {session_id}: {exc}") from exc

        if row is None:
            return None
        try:
            return Session.from_dict(json.loads(row["data"]))
        except (ValueError, KeyError) as exc:
            raise StoreError(f"Corrupt durable record {session_id}: {exc}") from exc

    def put(self, session: Session) -> None:
        payload = json.dumps(session.to_dict())
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    INSERT INTO sessions (id, status, data, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        status = excluded.status,
                        data = excluded.data,
                        updated_at = excluded.updated_at
                    """,
                    (
                        session.session_id,
                        session.status.value,
                        payload,
                        utc_now().isoformat(),
                    ),
                )
                conn.commit()
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as exc:
            raise StoreError(f"Durable write failed for {session.session_id}: {exc}") from exc
