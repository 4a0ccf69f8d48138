"""Durable record of which time entries have already been invoiced.

The store is a single SQLite table keyed by entry id. Entries are only ever
marked billed by ``commit``, which writes the whole batch in one transaction.
"""

import logging
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

logger = logging.getLogger(__name__)

# Stays below SQLite's default limit on bound parameters
QUERY_CHUNK_SIZE = 500

SCHEMA = """
CREATE TABLE IF NOT EXISTS billed_entries (
    entry_id INTEGER PRIMARY KEY,
    billed INTEGER NOT NULL DEFAULT 0,
    billed_at TEXT
);
"""


class BilledStoreError(Exception):
    """Raised when the store cannot be read or written."""


class BilledEntryStore:
    """
    SQLite-backed ``entry_id -> billed`` store.

    Example:
        >>> store = BilledEntryStore(Path("data/billed.sqlite3"))
        >>> store.is_billed(42)
        False
        >>> store.commit([42, 43])
        2
        >>> store.is_billed(42)
        True
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._schema_ready = False

    def connect(self) -> sqlite3.Connection:
        """Open the store, creating the file and table on first use."""
        needs_schema = not self._schema_ready or not self.path.exists()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(self.path)
        except (OSError, sqlite3.Error) as e:
            raise BilledStoreError(f"Cannot open billed store {self.path}: {e}") from e

        if needs_schema:
            try:
                connection.executescript(SCHEMA)
            except sqlite3.Error as e:
                connection.close()
                raise BilledStoreError(
                    f"Cannot open billed store {self.path}: {e}"
                ) from e
            self._schema_ready = True
        return connection

    def _read(self, sql: str, params: tuple = ()) -> list:
        # Reads never create the file, so a dry run leaves no trace
        if not self.path.exists():
            return []
        with closing(self.connect()) as connection:
            try:
                return connection.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise BilledStoreError(f"Cannot read billed store: {e}") from e

    def is_billed(self, entry_id: int) -> bool:
        """Return True if the entry was committed as billed; unknown ids are unbilled."""
        rows = self._read(
            "SELECT billed FROM billed_entries WHERE entry_id = ?", (int(entry_id),)
        )
        return bool(rows and rows[0][0])

    def billed_among(self, entry_ids: Iterable[int]) -> Set[int]:
        """
        Return the subset of ``entry_ids`` already marked billed.

        Uses a single connection for the whole batch.
        """
        ids = sorted({int(entry_id) for entry_id in entry_ids})
        if not ids or not self.path.exists():
            return set()

        billed: Set[int] = set()
        with closing(self.connect()) as connection:
            try:
                for start in range(0, len(ids), QUERY_CHUNK_SIZE):
                    chunk = ids[start : start + QUERY_CHUNK_SIZE]
                    placeholders = ", ".join("?" * len(chunk))
                    rows = connection.execute(
                        "SELECT entry_id FROM billed_entries "
                        f"WHERE billed = 1 AND entry_id IN ({placeholders})",
                        chunk,
                    ).fetchall()
                    billed.update(row[0] for row in rows)
            except sqlite3.Error as e:
                raise BilledStoreError(f"Cannot read billed store: {e}") from e
        return billed

    def commit(self, entry_ids: Iterable[int]) -> int:
        """
        Mark every given entry as billed, atomically.

        Either all ids are written or none are. Ids are validated before the
        transaction starts, and any database error while writing the batch
        rolls the transaction back.

        Args:
            entry_ids: Ids of the entries included in the confirmed invoice

        Returns:
            Number of ids written

        Raises:
            BilledStoreError: If the batch could not be written
        """
        billed_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
        try:
            rows = [(_as_entry_id(entry_id), billed_at) for entry_id in entry_ids]
        except (ValueError, TypeError) as e:
            raise BilledStoreError(f"Commit refused, no entries marked: {e}") from e

        with closing(self.connect()) as connection:
            try:
                with connection:
                    connection.executemany(
                        "INSERT OR REPLACE INTO billed_entries "
                        "(entry_id, billed, billed_at) VALUES (?, 1, ?)",
                        rows,
                    )
            except sqlite3.Error as e:
                logger.error(f"Billed store commit rolled back: {e}")
                raise BilledStoreError(f"Commit failed, no entries marked: {e}") from e

        logger.info(f"Marked {len(rows)} entries as billed")
        return len(rows)

    def billed_ids(self, limit: Optional[int] = None) -> List[int]:
        """Return entry ids marked billed, ascending; with ``limit``, only the highest ones."""
        if limit is None:
            rows = self._read(
                "SELECT entry_id FROM billed_entries WHERE billed = 1 ORDER BY entry_id"
            )
        else:
            rows = self._read(
                "SELECT entry_id FROM billed_entries WHERE billed = 1 "
                "ORDER BY entry_id DESC LIMIT ?",
                (int(limit),),
            )
            rows.reverse()
        return [row[0] for row in rows]

    def count(self) -> int:
        rows = self._read("SELECT COUNT(*) FROM billed_entries WHERE billed = 1")
        return rows[0][0] if rows else 0


def _as_entry_id(value) -> int:
    if isinstance(value, bool) or int(value) != value:
        raise ValueError(f"Invalid entry id: {value!r}")
    return int(value)
