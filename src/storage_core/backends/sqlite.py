"""SQLite blob table storage backend."""

import re
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from storage_core.address import PathAddress
from storage_core.exceptions import AlreadyExistsError, ConfigError, NotFoundError, StorageIOError
from storage_core.protocols.backend import StoredArtifact, StoredInfo
from storage_core.utils.content_type import guess_content_type

TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteBackend:
    """Storage backend keeping file content in a relational blob table.

    One row per file, keyed by (path, filename). Suitable for development
    and small deployments.
    """

    def __init__(
        self,
        path: str | None = None,
        table: str = "stored_files",
        **kwargs: Any,
    ) -> None:
        """Initialize SQLite backend.

        Args:
            path: Path to SQLite database file. Defaults to ./data/storage.db
                  Use ":memory:" for in-memory database.
            table: Table holding the files
            **kwargs: Ignored (for compatibility with other backends)
        """
        if not TABLE_NAME_RE.match(table):
            raise ConfigError(f"Invalid table name: {table}")
        self.table = table

        if path == ":memory:":
            self.path = ":memory:"
        else:
            db_path = Path(path) if path else Path("./data/storage.db")
            db_path.parent.mkdir(parents=True, exist_ok=True)
            self.path = str(db_path)

        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            self._conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    path TEXT NOT NULL,
                    filename TEXT NOT NULL,
                    content BLOB NOT NULL,
                    content_type TEXT NOT NULL,
                    file_size INTEGER NOT NULL,
                    created_at TEXT NOT NULL,
                    PRIMARY KEY (path, filename)
                )
                """
            )

    def _execute(self, query: str, params: tuple[Any, ...]) -> list[sqlite3.Row]:
        with self._lock:
            try:
                with self._conn:
                    return self._conn.execute(query, params).fetchall()
            except sqlite3.IntegrityError:
                raise
            except sqlite3.Error as e:
                raise StorageIOError(f"SQLite error: {e}") from e

    def write(
        self,
        address: PathAddress,
        content: bytes,
        content_type: str | None = None,
    ) -> None:
        try:
            self._execute(
                f"INSERT INTO {self.table} "
                "(path, filename, content, content_type, file_size, created_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    address.path,
                    address.filename,
                    sqlite3.Binary(content),
                    content_type or guess_content_type(address.filename),
                    len(content),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
        except sqlite3.IntegrityError:
            raise AlreadyExistsError(address.filename, address.path)

    def read(self, address: PathAddress) -> StoredArtifact | None:
        rows = self._execute(
            f"SELECT content, content_type FROM {self.table} WHERE path = ? AND filename = ?",
            (address.path, address.filename),
        )
        if not rows:
            return None
        return StoredArtifact.for_address(address, bytes(rows[0]["content"]), rows[0]["content_type"])

    def stat(self, address: PathAddress) -> StoredInfo | None:
        rows = self._execute(
            f"SELECT file_size, content_type FROM {self.table} WHERE path = ? AND filename = ?",
            (address.path, address.filename),
        )
        if not rows:
            return None
        return StoredInfo.for_address(address, rows[0]["file_size"], rows[0]["content_type"])

    def exists(self, address: PathAddress) -> bool:
        rows = self._execute(
            f"SELECT 1 FROM {self.table} WHERE path = ? AND filename = ?",
            (address.path, address.filename),
        )
        return bool(rows)

    def delete(self, address: PathAddress) -> None:
        with self._lock:
            try:
                with self._conn:
                    cursor = self._conn.execute(
                        f"DELETE FROM {self.table} WHERE path = ? AND filename = ?",
                        (address.path, address.filename),
                    )
            except sqlite3.Error as e:
                raise StorageIOError(f"SQLite error: {e}") from e
        if cursor.rowcount == 0:
            raise NotFoundError(address.filename, address.path)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()
