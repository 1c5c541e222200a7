# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the concurrent task dispatcher."""

from __future__ import annotations

import gzip
from pathlib import Path
from threading import Event

import pytest

from precompress.codecs import CODECS, CodecDriver, build_drivers
from precompress.constants import CodecName
from precompress.dispatcher import TaskDispatcher
from precompress.errors import CompressionError
from precompress.models import CompressionTask, RunCounters
from precompress.oracle import StalenessOracle
from precompress.store import NullChecksumStore
from tests.helpers.fs import BASE_MTIME_NS, set_mtime

LEVELS = {CodecName.GZIP: 6, CodecName.BROTLI: 4, CodecName.ZSTD: 3}


class _FailingDriver(CodecDriver):
    def compress(self, task: CompressionTask) -> Path:
        raise CompressionError(task.output_path, "Could not write")


class _BlockingDriver(CodecDriver):
    def __init__(self, release: Event, *, timeout: float = 5.0) -> None:
        super().__init__(CODECS[CodecName.GZIP])
        self.release = release
        self.started = Event()
        self.timeout = timeout

    def compress(self, task: CompressionTask) -> Path:
        self.started.set()
        self.release.wait(timeout=self.timeout)
        return super().compress(task)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    set_mtime(path, BASE_MTIME_NS)
    return path


def test_dispatch_launches_one_task_per_stale_codec(tmp_path: Path) -> None:
    source = _write(tmp_path / "index.html", "<p>hello</p>\n")
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)

    with TaskDispatcher(oracle, build_drivers(list(CodecName)), LEVELS, counters, max_workers=2) as dispatcher:
        tasks = dispatcher.dispatch(source)
        dispatcher.wait()

    assert sorted(task.codec for task in tasks) == sorted(CodecName)
    snapshot = counters.snapshot()
    assert snapshot.launched == 3
    assert snapshot.queued == 0
    assert snapshot.rebuilt == 3
    assert gzip.decompress((tmp_path / "index.html.gz").read_bytes()) == b"<p>hello</p>\n"


def test_dispatch_skips_fresh_artifacts(tmp_path: Path) -> None:
    source = _write(tmp_path / "index.html", "<p>hello</p>\n")
    fresh = tmp_path / "index.html.gz"
    fresh.write_bytes(b"kept")
    set_mtime(fresh, BASE_MTIME_NS)
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)

    with TaskDispatcher(oracle, build_drivers([CodecName.GZIP]), LEVELS, counters) as dispatcher:
        tasks = dispatcher.dispatch(source)
        dispatcher.wait()

    assert tasks == []
    assert counters.snapshot().launched == 0
    assert fresh.read_bytes() == b"kept"


def test_failed_task_does_not_cancel_siblings(tmp_path: Path) -> None:
    first = _write(tmp_path / "a.html", "<p>a</p>\n")
    second = _write(tmp_path / "b.html", "<p>b</p>\n")
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)
    drivers = {
        CodecName.GZIP: CodecDriver(CODECS[CodecName.GZIP]),
        CodecName.BROTLI: _FailingDriver(CODECS[CodecName.BROTLI]),
    }

    with TaskDispatcher(oracle, drivers, LEVELS, counters) as dispatcher:
        dispatcher.dispatch(first)
        dispatcher.dispatch(second)
        dispatcher.wait()

    snapshot = counters.snapshot()
    assert snapshot.launched == 4
    assert snapshot.queued == 0
    assert snapshot.rebuilt == 2
    assert snapshot.failed == 2
    assert {failure.codec for failure in counters.failure_list()} == {CodecName.BROTLI}
    assert (tmp_path / "a.html.gz").is_file()
    assert (tmp_path / "b.html.gz").is_file()


def test_unreadable_source_is_recorded_and_skipped(tmp_path: Path) -> None:
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)

    with TaskDispatcher(oracle, build_drivers([CodecName.GZIP]), LEVELS, counters) as dispatcher:
        tasks = dispatcher.dispatch(tmp_path / "missing.html")
        dispatcher.wait()

    assert tasks == []
    failures = counters.failure_list()
    assert len(failures) == 1
    assert failures[0].path == tmp_path / "missing.html"
    assert failures[0].codec is None


def test_tasks_count_as_queued_until_they_finish(tmp_path: Path) -> None:
    source = _write(tmp_path / "index.html", "<p>slow</p>\n")
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)
    release = Event()
    drivers = {CodecName.GZIP: _BlockingDriver(release)}

    with TaskDispatcher(oracle, drivers, LEVELS, counters, max_workers=1) as dispatcher:
        dispatcher.dispatch(source)
        in_flight = counters.snapshot()
        release.set()
        dispatcher.wait()

    assert in_flight.launched == 1
    assert in_flight.queued == 1
    assert in_flight.completed == 0
    done = counters.snapshot()
    assert done.queued == 0
    assert done.completed == 1


def test_abort_cancels_tasks_that_have_not_started(tmp_path: Path) -> None:
    first = _write(tmp_path / "a.html", "<p>a</p>\n")
    second = _write(tmp_path / "b.html", "<p>b</p>\n")
    counters = RunCounters()
    oracle = StalenessOracle(NullChecksumStore(), counters)
    # Nobody sets the event; the running task finishes once the short wait expires.
    driver = _BlockingDriver(Event(), timeout=0.5)

    with pytest.raises(RuntimeError, match="abort"):
        with TaskDispatcher(oracle, {CodecName.GZIP: driver}, LEVELS, counters, max_workers=1) as dispatcher:
            dispatcher.dispatch(first)
            dispatcher.dispatch(second)
            assert driver.started.wait(timeout=5)
            raise RuntimeError("abort")

    snapshot = counters.snapshot()
    assert snapshot.launched == 2
    assert snapshot.queued == 0
    assert snapshot.rebuilt == 1
    assert (tmp_path / "a.html.gz").is_file()
    assert not (tmp_path / "b.html.gz").exists()
