"""SQLite-backed implementation of BackpackRepository.

A single connection is shared by the worker threads that run repository
calls; a threading lock serializes access to it. Every write is committed
before ``save`` returns.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

from mcbackpack.domain.exceptions import StorageError, ValidationError
from mcbackpack.domain.model.backpack import BackpackData
from mcbackpack.domain.repository.backpack_repository import BackpackRepository

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS backpacks (
    uuid     TEXT PRIMARY KEY,
    texture  TEXT NOT NULL,
    pwd_hash TEXT,
    size     INTEGER NOT NULL,
    content  TEXT
)
"""

_UPSERT = """
INSERT INTO backpacks (uuid, texture, pwd_hash, size, content)
VALUES (?, ?, ?, ?, ?)
ON CONFLICT(uuid) DO UPDATE SET
    texture = excluded.texture,
    pwd_hash = excluded.pwd_hash,
    size = excluded.size,
    content = excluded.content
"""


class SqliteBackpackRepository(BackpackRepository):

    def __init__(self, db_path: Path, busy_timeout_ms: int = 5000) -> None:
        self._db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = self._connect(busy_timeout_ms)

    # --- BackpackRepository interface -----------------------------------------

    def get_by_id(self, uuid: str) -> BackpackData | None:
        with self._lock:
            try:
                row = self._connection().execute(
                    "SELECT uuid, texture, pwd_hash, size, content FROM backpacks WHERE uuid = ?",
                    (uuid,),
                ).fetchone()
            except sqlite3.Error as exc:
                logger.error("SQLite read failed for backpack %s: %s", uuid, exc)
                raise StorageError(f"Could not read backpack '{uuid}'") from exc
        return None if row is None else self._to_domain(row)

    def save(self, backpack: BackpackData) -> None:
        params = (
            backpack.uuid,
            backpack.texture,
            backpack.pwd_hash,
            backpack.size,
            backpack.content,
        )
        with self._lock:
            conn = self._connection()
            try:
                with conn:
                    conn.execute(_UPSERT, params)
            except sqlite3.Error as exc:
                logger.error("SQLite write failed for backpack %s: %s", backpack.uuid, exc)
                raise StorageError(f"Could not save backpack '{backpack.uuid}'") from exc

    def list_ids(self) -> list[str]:
        with self._lock:
            try:
                rows = self._connection().execute(
                    "SELECT uuid FROM backpacks ORDER BY uuid"
                ).fetchall()
            except sqlite3.Error as exc:
                raise StorageError("Could not list backpacks") from exc
        return [r[0] for r in rows]

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            try:
                self._conn.close()
            except sqlite3.Error as exc:
                raise StorageError(f"Could not close {self._db_path}") from exc
            finally:
                self._conn = None
        logger.debug("SQLite backpack repository at %s closed", self._db_path)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_domain(row: tuple) -> BackpackData:
        uuid, texture, pwd_hash, size, content = row
        try:
            return BackpackData(
                uuid=uuid,
                texture=texture,
                pwd_hash=pwd_hash or "",
                size=size,
                content=content,
            )
        except ValidationError as exc:
            logger.error("Corrupt backpack row %r: %s", uuid, exc)
            raise StorageError(f"Corrupt backpack row: {uuid!r}") from exc

    # --- Connection helpers ---------------------------------------------------

    def _connect(self, busy_timeout_ms: int) -> sqlite3.Connection:
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=FULL;")
            conn.execute(f"PRAGMA busy_timeout={int(busy_timeout_ms)};")
            with conn:
                conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"Could not open SQLite database {self._db_path}") from exc
        return conn

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StorageError(f"SQLite database {self._db_path} is closed")
        return self._conn
