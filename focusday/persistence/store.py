"""SQLite-backed persistence for the timer snapshot."""

import json
import logging
import sqlite3
from datetime import datetime
from typing import Optional

from focusday.core.errors import SnapshotError, ValidationError
from focusday.core.models import (
    MAX_SESSIONS,
    MIN_SESSIONS,
    PersistedSnapshot,
    is_valid_session_count,
)

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Read/write interface to the local snapshot database.

    Holds a single JSON record under a fixed key.  Writes replace the
    record wholesale (last writer wins); a missing or unreadable record
    loads as ``None`` so callers can cold-start.
    """

    KEY = "timer_state"

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    # ------------------------------------------------------------------
    # Schema initialisation
    # ------------------------------------------------------------------

    def init_db(self) -> None:
        """Create the snapshot table if it doesn't already exist."""
        conn = self._get_conn()
        conn.executescript(
            """\
            CREATE TABLE IF NOT EXISTS snapshots (
                key TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        conn.commit()

    # ------------------------------------------------------------------
    # Snapshot operations
    # ------------------------------------------------------------------

    def save(self, snapshot: PersistedSnapshot) -> None:
        """Persist *snapshot*, replacing the previous one.

        Raises ValidationError if the session count is out of range.
        """
        if not is_valid_session_count(snapshot.sessions_before_long_break):
            raise ValidationError(
                f"sessions_before_long_break must be between {MIN_SESSIONS} and "
                f"{MAX_SESSIONS}, got {snapshot.sessions_before_long_break!r}"
            )
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO snapshots (key, payload, updated_at) VALUES (?, ?, ?)",
            (
                self.KEY,
                json.dumps(snapshot.to_dict()),
                snapshot.last_update.isoformat(),
            ),
        )
        conn.commit()

    def load(self) -> Optional[PersistedSnapshot]:
        """Return the stored snapshot, or ``None`` if absent or corrupt."""
        conn = self._get_conn()
        row = conn.execute(
            "SELECT payload FROM snapshots WHERE key = ?", (self.KEY,)
        ).fetchone()
        if row is None:
            return None
        try:
            return PersistedSnapshot.from_dict(json.loads(row["payload"]))
        except (json.JSONDecodeError, SnapshotError) as exc:
            logger.warning("Ignoring unreadable snapshot: %s", exc)
            return None

    def last_saved_at(self) -> Optional[datetime]:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT updated_at FROM snapshots WHERE key = ?", (self.KEY,)
        ).fetchone()
        if row is None:
            return None
        return datetime.fromisoformat(row["updated_at"])
