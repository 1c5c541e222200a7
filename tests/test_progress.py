# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the live progress reporter."""

from __future__ import annotations

from pathlib import Path

from precompress.models import CounterSnapshot, RunCounters, RunPhase, TaskFailure
from precompress.progress import ProgressReporter, format_status
from tests.helpers.progress import ProgressRecorder


def _snapshot(**overrides: object) -> CounterSnapshot:
    values: dict[str, object] = {
        "phase": RunPhase.COMPRESSING,
        "files_seen": 12,
        "launched": 9,
        "queued": 4,
        "rebuilt": 5,
        "checksummed": 12,
        "failed": 0,
    }
    values.update(overrides)
    return CounterSnapshot(**values)  # type: ignore[arg-type]


def test_format_status_reports_counters() -> None:
    line = format_status(_snapshot())

    assert line == (
        "Compressing, 5 compressed files updated, 4 source files queued to compress, 12 checked so far"
    )


def test_format_status_mentions_failures() -> None:
    assert format_status(_snapshot(failed=2)).endswith(", 2 failed")


def test_reporter_renders_final_sample_on_stop() -> None:
    counters = RunCounters()
    recorder = ProgressRecorder()
    reporter = ProgressReporter(counters, progress_factory=recorder.factory, interval=60.0)

    with reporter:
        counters.set_phase(RunPhase.COMPRESSING)
        counters.file_found()
        counters.task_launched()
        counters.task_launched()
        counters.task_finished()
        counters.artifact_rebuilt()

    progress = recorder.require_single_instance()
    kinds = [record.kind for record in progress.records]
    assert kinds[:2] == ["add", "start"]
    assert kinds[-1] == "stop"
    description, total, fields = progress.updates()[-1].payload
    assert description == "Compressing"
    assert total == 2
    assert fields["completed"] == 1
    assert "1 compressed files updated" in fields["status"]
    assert progress.options["transient"] is True


def test_reporter_final_sample_counts_failures() -> None:
    counters = RunCounters()
    recorder = ProgressRecorder()

    with ProgressReporter(counters, progress_factory=recorder.factory, interval=60.0):
        counters.record_failure(TaskFailure(path=Path("a.html"), message="boom"))

    _, _, fields = recorder.require_single_instance().updates()[-1].payload
    assert fields["status"].endswith(", 1 failed")


def test_disabled_reporter_creates_no_display() -> None:
    counters = RunCounters()
    recorder = ProgressRecorder()

    with ProgressReporter(counters, enabled=False, progress_factory=recorder.factory) as reporter:
        counters.file_found()

    assert recorder.instances == []
    assert reporter.render().files_seen == 1
