# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Live status rendering driven by periodic samples of the run counters."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Event, Thread
from types import TracebackType
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .constants import PROGRESS_INTERVAL_S
from .models import CounterSnapshot, RunCounters


def format_status(snapshot: CounterSnapshot) -> str:
    """Return the one-line human readable status for ``snapshot``."""

    line = (
        f"{snapshot.phase}, {snapshot.rebuilt} compressed files updated, "
        f"{snapshot.queued} source files queued to compress, {snapshot.files_seen} checked so far"
    )
    if snapshot.failed:
        line = f"{line}, {snapshot.failed} failed"
    return line


@dataclass(slots=True)
class ProgressReporter:
    """Sample :class:`RunCounters` on a fixed interval and render a status line.

    The reporter only reads counters; it never blocks or slows the dispatcher.
    """

    counters: RunCounters
    console: Console | None = None
    enabled: bool = True
    interval: float = PROGRESS_INTERVAL_S
    progress_factory: Callable[..., Any] = Progress
    _progress: Any = field(init=False, default=None)
    _task_id: TaskID | None = field(init=False, default=None)
    _thread: Thread | None = field(init=False, default=None)
    _stop: Event = field(init=False, default_factory=Event)

    def start(self) -> None:
        """Start the background sampling loop when the reporter is enabled."""

        if not self.enabled or self._thread is not None:
            return
        self._progress = self.progress_factory(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            TextColumn("{task.fields[status]}"),
            console=self.console,
            transient=True,
        )
        snapshot = self.counters.snapshot()
        self._task_id = self._progress.add_task(str(snapshot.phase), total=0, status=format_status(snapshot))
        self._progress.start()
        self._stop.clear()
        self._thread = Thread(target=self._loop, name="precompress-progress", daemon=True)
        self._thread.start()

    def render(self) -> CounterSnapshot:
        """Push the current counters to the progress display and return the sample."""

        snapshot = self.counters.snapshot()
        if self._progress is not None and self._task_id is not None:
            self._progress.update(
                self._task_id,
                description=str(snapshot.phase),
                total=snapshot.launched,
                completed=snapshot.completed,
                status=format_status(snapshot),
            )
        return snapshot

    def stop(self) -> CounterSnapshot:
        """Stop the loop, render a last sample and tear the display down."""

        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        snapshot = self.render()
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
            self._task_id = None
        return snapshot

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.render()

    def __enter__(self) -> ProgressReporter:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.stop()


__all__ = ["ProgressReporter", "format_status"]
