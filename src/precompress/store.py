# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persistent checksum index backing content-aware staleness checks."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Final, Protocol, runtime_checkable

from .errors import StoreError

_SCHEMA: Final[str] = (
    "CREATE TABLE IF NOT EXISTS checksumstate ("
    " path TEXT PRIMARY KEY,"
    " checksum TEXT NOT NULL,"
    " mtime_ns INTEGER NOT NULL"
    ")"
)
_LOOKUP_SQL: Final[str] = "SELECT checksum, mtime_ns FROM checksumstate WHERE path = ?"
_UPSERT_SQL: Final[str] = (
    "INSERT INTO checksumstate (path, checksum, mtime_ns) VALUES (?, ?, ?) "
    "ON CONFLICT(path) DO UPDATE SET checksum = excluded.checksum, mtime_ns = excluded.mtime_ns"
)


@dataclass(frozen=True, slots=True)
class ChecksumRecord:
    """Last-seen content hash and canonical modification time for a path."""

    path: str
    checksum: str
    mtime_ns: int


@runtime_checkable
class ChecksumStore(Protocol):
    """Key-value index mapping source paths to :class:`ChecksumRecord` entries."""

    @property
    def enabled(self) -> bool:
        """Return ``True`` when lookups can return stored records."""

    def lookup(self, path: Path) -> ChecksumRecord | None:
        """Return the record stored for ``path`` or ``None`` when absent."""

    def upsert(self, path: Path, checksum: str, mtime_ns: int) -> None:
        """Create or replace the record for ``path``."""

    def close(self) -> None:
        """Release any resources held by the store."""


class NullChecksumStore:
    """Store used when no location is configured; every lookup misses."""

    @property
    def enabled(self) -> bool:
        return False

    def lookup(self, path: Path) -> ChecksumRecord | None:
        return None

    def upsert(self, path: Path, checksum: str, mtime_ns: int) -> None:
        return None

    def close(self) -> None:
        return None

    def __enter__(self) -> NullChecksumStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class SqliteChecksumStore:
    """SQLite-backed store surviving process restarts.

    All methods are expected to run on the thread that opened the store; the
    engine only touches it from the walker thread. Every storage failure is
    surfaced as :class:`StoreError`.
    """

    def __init__(self, database: Path) -> None:
        """Open (creating when needed) the database at ``database``.

        Args:
            database: SQLite file holding the ``checksumstate`` table.

        Raises:
            StoreError: If the database cannot be created or opened.
        """

        self._database = database
        try:
            database.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(database)
            with self._conn:
                self._conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as exc:
            raise StoreError(f"Could not open checksum store {str(database)!r}: {exc}") from exc

    @property
    def enabled(self) -> bool:
        return True

    def lookup(self, path: Path) -> ChecksumRecord | None:
        key = str(path)
        try:
            row = self._conn.execute(_LOOKUP_SQL, (key,)).fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not read checksum for {key!r}: {exc}") from exc
        if row is None:
            return None
        checksum, mtime_ns = row
        return ChecksumRecord(path=key, checksum=str(checksum), mtime_ns=int(mtime_ns))

    def upsert(self, path: Path, checksum: str, mtime_ns: int) -> None:
        key = str(path)
        try:
            with self._conn:
                self._conn.execute(_UPSERT_SQL, (key, checksum, mtime_ns))
        except sqlite3.Error as exc:
            raise StoreError(f"Could not write checksum for {key!r}: {exc}") from exc

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error as exc:
            raise StoreError(f"Could not close checksum store {str(self._database)!r}: {exc}") from exc

    def __enter__(self) -> SqliteChecksumStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_store(database: Path | None) -> ChecksumStore:
    """Return a SQLite store for ``database`` or a :class:`NullChecksumStore` when ``None``."""

    if database is None:
        return NullChecksumStore()
    return SqliteChecksumStore(database)


__all__ = [
    "ChecksumRecord",
    "ChecksumStore",
    "NullChecksumStore",
    "SqliteChecksumStore",
    "open_store",
]
