# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the persistent checksum store."""

from pathlib import Path

import pytest

from precompress.errors import StoreError
from precompress.store import ChecksumRecord, ChecksumStore, NullChecksumStore, SqliteChecksumStore, open_store


def test_sqlite_store_roundtrip(tmp_path: Path) -> None:
    source = tmp_path / "index.html"
    with SqliteChecksumStore(tmp_path / "state" / "checksums.sqlite3") as store:
        assert store.enabled
        assert store.lookup(source) is None

        store.upsert(source, "abc123", 42)

        assert store.lookup(source) == ChecksumRecord(path=str(source), checksum="abc123", mtime_ns=42)


def test_sqlite_store_upsert_replaces_existing_record(tmp_path: Path) -> None:
    source = tmp_path / "index.html"
    with SqliteChecksumStore(tmp_path / "db.sqlite3") as store:
        store.upsert(source, "old", 1)
        store.upsert(source, "new", 2)

        record = store.lookup(source)

    assert record is not None
    assert (record.checksum, record.mtime_ns) == ("new", 2)


def test_sqlite_store_survives_reopen(tmp_path: Path) -> None:
    database = tmp_path / "db.sqlite3"
    source = tmp_path / "app.js"
    with SqliteChecksumStore(database) as store:
        store.upsert(source, "feed", 1_600_000_000_123_456_789)

    with SqliteChecksumStore(database) as reopened:
        record = reopened.lookup(source)

    assert record is not None
    assert record.mtime_ns == 1_600_000_000_123_456_789


def test_sqlite_store_reports_unusable_location(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(StoreError):
        SqliteChecksumStore(blocker / "nested" / "db.sqlite3")


def test_open_store_without_location_is_disabled(tmp_path: Path) -> None:
    store = open_store(None)

    assert isinstance(store, NullChecksumStore)
    assert isinstance(store, ChecksumStore)
    assert not store.enabled
    store.upsert(tmp_path / "x.html", "abc", 1)
    assert store.lookup(tmp_path / "x.html") is None


def test_open_store_with_location_creates_database(tmp_path: Path) -> None:
    database = tmp_path / "state" / "db.sqlite3"
    store = open_store(database)
    try:
        assert store.enabled
    finally:
        store.close()
    assert database.is_file()
