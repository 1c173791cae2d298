# src/edufiles/catalog/db.py
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from edufiles.uploads.models import UploadedFile

log = logging.getLogger(__name__)


def get_connection(db_path: Path) -> sqlite3.Connection:
    # Parent directory is created on first use
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        db_path,
        timeout=30,
        isolation_level=None,    # explicit BEGIN/COMMIT below
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=DELETE;")
    conn.execute("PRAGMA synchronous=FULL;")
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS uploaded_files (
            storage_id TEXT PRIMARY KEY,
            id TEXT NOT NULL,
            original_name TEXT,
            mime_type TEXT,
            size_bytes INTEGER,
            owner_id TEXT,
            uploaded_at TEXT,
            access_url TEXT
        )
    """)


class FileCatalog:
    """Metadata for stored blobs, keyed by storage id."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = get_connection(self.db_path)
        try:
            init_db(conn)
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """BEGIN ... COMMIT, rolled back if the block raises."""
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    def add(self, record: UploadedFile) -> None:
        with self.transaction() as conn:
            conn.execute(
                "INSERT INTO uploaded_files VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.storage_id,
                    record.id,
                    record.original_name,
                    record.mime_type,
                    record.size_bytes,
                    record.owner_id,
                    record.uploaded_at,
                    record.access_url,
                ),
            )

    def get(self, storage_id: str) -> UploadedFile | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM uploaded_files WHERE storage_id = ?",
                (storage_id,),
            ).fetchone()
        if row is None:
            return None
        return UploadedFile(**dict(row))

    def remove(self, storage_id: str, conn: sqlite3.Connection | None = None) -> bool:
        """Delete a row; pass conn to run inside an open transaction."""
        if conn is not None:
            cur = conn.execute(
                "DELETE FROM uploaded_files WHERE storage_id = ?",
                (storage_id,),
            )
            return cur.rowcount > 0

        with self.transaction() as own:
            return self.remove(storage_id, own)
