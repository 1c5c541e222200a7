# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for run counters and source snapshots."""

import hashlib
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from precompress.constants import CodecName
from precompress.hashing import file_checksum
from precompress.models import RunCounters, RunResult, SourceFile, TaskFailure


def test_counters_are_safe_across_threads() -> None:
    counters = RunCounters()

    def _work() -> None:
        counters.task_launched()
        counters.artifact_rebuilt()
        counters.task_finished()

    with ThreadPoolExecutor(max_workers=8) as pool:
        for _ in range(500):
            pool.submit(_work)

    snapshot = counters.snapshot()
    assert snapshot.launched == 500
    assert snapshot.rebuilt == 500
    assert snapshot.queued == 0
    assert snapshot.completed == 500


def test_run_result_exit_code_tracks_failures() -> None:
    counters = RunCounters()
    assert RunResult(counters=counters.snapshot()).exit_code == 0

    counters.record_failure(TaskFailure(path=Path("a.html"), message="boom", codec=CodecName.GZIP))
    result = RunResult(counters=counters.snapshot(), failures=counters.failure_list())

    assert counters.failed
    assert not result.ok
    assert result.exit_code == 1
    assert result.counters.failed == 1


def test_source_snapshot_names_artifacts(tmp_path: Path) -> None:
    path = tmp_path / "style.css"
    path.write_text("a{}", encoding="utf-8")
    path.chmod(0o600)

    snapshot = SourceFile.from_path(path)

    assert snapshot.size == 3
    assert snapshot.mode == 0o600
    assert snapshot.artifact_path(CodecName.ZSTD) == tmp_path / "style.css.zst"
    assert snapshot.with_checksum(file_checksum(path)).checksum == file_checksum(path)
    assert file_checksum(path, chunk_size=1) == hashlib.sha1(b"a{}").hexdigest()
