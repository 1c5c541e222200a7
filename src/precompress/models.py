# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime data structures shared by the oracle, dispatcher and reporter."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path
from threading import Lock

from .constants import CODEC_SUFFIXES, CodecName


@dataclass(frozen=True, slots=True)
class SourceFile:
    """Immutable snapshot of a source file taken while it is processed."""

    path: Path
    size: int
    mtime_ns: int
    mode: int
    checksum: str | None = None

    @classmethod
    def from_path(cls, path: Path) -> SourceFile:
        """Stat ``path`` and return a snapshot of its metadata.

        Raises:
            OSError: If the file cannot be stat'ed.
        """

        info = os.stat(path)
        return cls(
            path=path,
            size=info.st_size,
            mtime_ns=info.st_mtime_ns,
            mode=stat.S_IMODE(info.st_mode),
        )

    def with_checksum(self, checksum: str) -> SourceFile:
        """Return a copy of the snapshot carrying ``checksum``."""

        return replace(self, checksum=checksum)

    def artifact_path(self, codec: CodecName) -> Path:
        """Return the sibling path holding this file compressed with ``codec``."""

        return self.path.with_name(self.path.name + CODEC_SUFFIXES[codec])


@dataclass(frozen=True, slots=True)
class CompressionTask:
    """One artifact rebuild: compress ``source`` with ``codec`` at ``level``."""

    source: SourceFile
    codec: CodecName
    level: int

    @property
    def output_path(self) -> Path:
        return self.source.artifact_path(self.codec)


class RunPhase(StrEnum):
    """Coarse lifecycle stage displayed by the progress reporter."""

    STARTING = "Starting"
    FINDING = "Finding files"
    COMPRESSING = "Compressing"
    EXITING = "Exiting"


@dataclass(frozen=True, slots=True)
class TaskFailure:
    """A per-file failure recorded without interrupting sibling work."""

    path: Path
    message: str
    codec: CodecName | None = None


@dataclass(frozen=True, slots=True)
class CounterSnapshot:
    """Point-in-time copy of :class:`RunCounters`."""

    phase: RunPhase
    files_seen: int
    launched: int
    queued: int
    rebuilt: int
    checksummed: int
    failed: int

    @property
    def completed(self) -> int:
        """Return the number of launched tasks that have finished."""

        return self.launched - self.queued


@dataclass(slots=True)
class RunCounters:
    """Mutable run state shared between the walker thread and the workers.

    Every read and write goes through one lock; callers receive immutable
    :class:`CounterSnapshot` copies.
    """

    phase: RunPhase = RunPhase.STARTING
    files_seen: int = 0
    launched: int = 0
    queued: int = 0
    rebuilt: int = 0
    checksummed: int = 0
    failures: list[TaskFailure] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False, compare=False)

    def set_phase(self, phase: RunPhase) -> None:
        with self._lock:
            self.phase = phase

    def file_found(self) -> None:
        with self._lock:
            self.files_seen += 1

    def task_launched(self) -> None:
        with self._lock:
            self.launched += 1
            self.queued += 1

    def task_finished(self) -> None:
        with self._lock:
            self.queued -= 1

    def artifact_rebuilt(self) -> None:
        with self._lock:
            self.rebuilt += 1

    def checksum_computed(self) -> None:
        with self._lock:
            self.checksummed += 1

    def record_failure(self, failure: TaskFailure) -> None:
        with self._lock:
            self.failures.append(failure)

    @property
    def failed(self) -> bool:
        with self._lock:
            return bool(self.failures)

    def snapshot(self) -> CounterSnapshot:
        """Return a consistent copy of every counter."""

        with self._lock:
            return CounterSnapshot(
                phase=self.phase,
                files_seen=self.files_seen,
                launched=self.launched,
                queued=self.queued,
                rebuilt=self.rebuilt,
                checksummed=self.checksummed,
                failed=len(self.failures),
            )

    def failure_list(self) -> tuple[TaskFailure, ...]:
        with self._lock:
            return tuple(self.failures)


@dataclass(frozen=True, slots=True)
class RunResult:
    """Final outcome of a recompression run."""

    counters: CounterSnapshot
    failures: tuple[TaskFailure, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def exit_code(self) -> int:
        """Return ``0`` for a clean run and ``1`` when any task failed."""

        return 0 if self.ok else 1


__all__ = [
    "CompressionTask",
    "CounterSnapshot",
    "RunCounters",
    "RunPhase",
    "RunResult",
    "SourceFile",
    "TaskFailure",
]
