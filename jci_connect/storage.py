"""
Meeting persistence.

Two interchangeable stores: a local SQLite file for single-machine use and a
shared PostgreSQL ``meetings`` table for multi-device sync.
"""

import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator, Optional, Sequence

from jci_connect.config import PostgresConfig, StorageBackend, StorageConfig
from jci_connect.models import Meeting

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id",
    "title",
    "description",
    "host",
    "email",
    "date",
    "start_time",
    "duration_minutes",
    "zoom_link",
    "zoom_password",
    "category",
    "zoom_meeting_id",
)

SQLITE_SCHEMA = """
CREATE TABLE IF NOT EXISTS meetings (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT DEFAULT '',
    host TEXT DEFAULT '',
    email TEXT,
    date TEXT NOT NULL,
    start_time TEXT NOT NULL,
    duration_minutes INTEGER NOT NULL DEFAULT 60,
    zoom_link TEXT NOT NULL DEFAULT '',
    zoom_password TEXT,
    category TEXT NOT NULL DEFAULT 'Project',
    zoom_meeting_id TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_meetings_zoom_id ON meetings(zoom_meeting_id);
"""

POSTGRES_SCHEMA = """
CREATE TABLE IF NOT EXISTS meetings (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    description TEXT DEFAULT '',
    host TEXT DEFAULT '',
    email TEXT,
    date TEXT NOT NULL,
    start_time TEXT NOT NULL,
    duration_minutes INTEGER NOT NULL DEFAULT 60,
    zoom_link TEXT NOT NULL DEFAULT '',
    zoom_password TEXT,
    category TEXT NOT NULL DEFAULT 'Project'
        CHECK (category IN ('Board', 'Training', 'Social', 'Project')),
    zoom_meeting_id TEXT,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_meetings_zoom_id ON meetings(zoom_meeting_id);
"""


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_values(meeting: Meeting) -> tuple:
    row = meeting.to_dict()
    return tuple(row[column] for column in _COLUMNS)


class MeetingStore(ABC):
    """Row-level storage of meetings keyed by ``Meeting.id``."""

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def load_meetings(self) -> list[Meeting]: ...

    @abstractmethod
    def get_meeting(self, meeting_id: str) -> Optional[Meeting]: ...

    @abstractmethod
    def save_meeting(self, meeting: Meeting) -> None: ...

    @abstractmethod
    def update_meeting(self, meeting_id: str, meeting: Meeting) -> None: ...

    @abstractmethod
    def delete_meeting(self, meeting_id: str) -> None: ...

    @abstractmethod
    def upsert_meetings(self, meetings: Sequence[Meeting]) -> None: ...

    def close(self) -> None:
        pass


class SqliteMeetingStore(MeetingStore):
    """Meetings kept in a local SQLite file, listed in insertion order."""

    def __init__(self, db_path: str = "config/meetings.db"):
        self.db_path = db_path

    def initialize(self) -> None:
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.executescript("PRAGMA journal_mode=WAL; PRAGMA synchronous=NORMAL;")
            conn.executescript(SQLITE_SCHEMA)
            conn.commit()
        logger.info(f"Meeting store initialized at {self.db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def load_meetings(self) -> list[Meeting]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM meetings ORDER BY rowid").fetchall()
        return [Meeting.from_dict(dict(row)) for row in rows]

    def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT * FROM meetings WHERE id = ?", (meeting_id,)
            ).fetchone()
        return Meeting.from_dict(dict(row)) if row else None

    def _upsert(self, conn: sqlite3.Connection, meeting: Meeting) -> None:
        now = _utcnow_iso()
        placeholders = ", ".join("?" for _ in _COLUMNS)
        updates = ", ".join(
            f"{column} = excluded.{column}" for column in _COLUMNS if column != "id"
        )
        conn.execute(
            f"""
            INSERT INTO meetings ({", ".join(_COLUMNS)}, created_at, updated_at)
            VALUES ({placeholders}, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                {updates},
                updated_at = excluded.updated_at
            """,
            _row_values(meeting) + (now, now),
        )

    def save_meeting(self, meeting: Meeting) -> None:
        with self._get_connection() as conn:
            self._upsert(conn, meeting)
            conn.commit()

    def update_meeting(self, meeting_id: str, meeting: Meeting) -> None:
        assignments = ", ".join(f"{column} = ?" for column in _COLUMNS)
        with self._get_connection() as conn:
            conn.execute(
                f"UPDATE meetings SET {assignments}, updated_at = ? WHERE id = ?",
                _row_values(meeting) + (_utcnow_iso(), meeting_id),
            )
            conn.commit()

    def delete_meeting(self, meeting_id: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM meetings WHERE id = ?", (meeting_id,))
            conn.commit()

    def upsert_meetings(self, meetings: Sequence[Meeting]) -> None:
        if not meetings:
            return
        with self._get_connection() as conn:
            for meeting in meetings:
                self._upsert(conn, meeting)
            conn.commit()


class PostgresMeetingStore(MeetingStore):
    """Meetings in a shared PostgreSQL table, listed by date then start time."""

    def __init__(self, config: PostgresConfig):
        self.config = config
        self._pool: Any = None

    def initialize(self) -> None:
        from psycopg_pool import ConnectionPool

        self._pool = ConnectionPool(
            self.config.connection_string, min_size=1, max_size=5
        )
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(POSTGRES_SCHEMA)
            conn.commit()
        logger.info("Meeting store database pool initialized")

    @contextmanager
    def connection(self) -> Iterator[Any]:
        if not self._pool:
            raise RuntimeError("Meeting store not initialized. Call initialize() first.")
        with self._pool.connection() as conn:
            yield conn

    def close(self) -> None:
        if self._pool:
            self._pool.close()
            self._pool = None

    def load_meetings(self) -> list[Meeting]:
        from psycopg.rows import dict_row

        with self.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT * FROM meetings ORDER BY date, start_time")
                return [Meeting.from_dict(row) for row in cur.fetchall()]

    def get_meeting(self, meeting_id: str) -> Optional[Meeting]:
        from psycopg.rows import dict_row

        with self.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT * FROM meetings WHERE id = %s", (meeting_id,))
                row = cur.fetchone()
        return Meeting.from_dict(row) if row else None

    def _upsert_sql(self) -> str:
        placeholders = ", ".join("%s" for _ in _COLUMNS)
        updates = ", ".join(
            f"{column} = EXCLUDED.{column}" for column in _COLUMNS if column != "id"
        )
        return f"""
            INSERT INTO meetings ({", ".join(_COLUMNS)}, updated_at)
            VALUES ({placeholders}, NOW())
            ON CONFLICT (id) DO UPDATE SET
                {updates},
                updated_at = NOW()
        """

    def save_meeting(self, meeting: Meeting) -> None:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(self._upsert_sql(), _row_values(meeting))
            conn.commit()

    def update_meeting(self, meeting_id: str, meeting: Meeting) -> None:
        assignments = ", ".join(f"{column} = %s" for column in _COLUMNS)
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"UPDATE meetings SET {assignments}, updated_at = NOW() WHERE id = %s",
                    _row_values(meeting) + (meeting_id,),
                )
            conn.commit()

    def delete_meeting(self, meeting_id: str) -> None:
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM meetings WHERE id = %s", (meeting_id,))
            conn.commit()

    def upsert_meetings(self, meetings: Sequence[Meeting]) -> None:
        if not meetings:
            return
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.executemany(
                    self._upsert_sql(), [_row_values(meeting) for meeting in meetings]
                )
            conn.commit()


def create_store(config: StorageConfig) -> MeetingStore:
    if config.backend is StorageBackend.POSTGRES:
        return PostgresMeetingStore(config.postgres)
    return SqliteMeetingStore(config.sqlite_path)


_store: Optional[MeetingStore] = None


def get_store() -> MeetingStore:
    global _store
    if _store is None:
        from jci_connect.config import load_config

        config = load_config()
        _store = create_store(config.storage)
        _store.initialize()
    return _store


def init_store(store: Optional[MeetingStore]) -> None:
    global _store
    _store = store
