# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Fan out artifact rebuilds onto a worker pool and wait for them to finish."""

from __future__ import annotations

from collections.abc import Mapping
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path
from threading import Lock
from types import TracebackType

from .codecs import CodecDriver
from .constants import CodecName
from .errors import CompressionError, SourceError
from .logging import ConsoleLogger
from .models import CompressionTask, RunCounters, TaskFailure
from .oracle import StalenessOracle


class TaskDispatcher:
    """Launch one concurrent task per stale (source, codec) pair.

    Tasks never wait on each other. Failures are recorded in the shared
    :class:`RunCounters` and never cancel sibling tasks; only the final exit
    status observes them.
    """

    def __init__(
        self,
        oracle: StalenessOracle,
        drivers: Mapping[CodecName, CodecDriver],
        levels: Mapping[CodecName, int],
        counters: RunCounters,
        *,
        max_workers: int | None = None,
        logger: ConsoleLogger | None = None,
    ) -> None:
        """Create a dispatcher for the enabled codecs.

        Args:
            oracle: Staleness oracle consulted once per source file.
            drivers: Driver for every enabled codec.
            levels: Effort level for every enabled codec.
            counters: Shared run counters.
            max_workers: Optional pool size; ``None`` lets the executor size itself.
            logger: Logger used for failures and verbose task lines.
        """

        self._oracle = oracle
        self._drivers = dict(drivers)
        self._levels = dict(levels)
        self._counters = counters
        self._logger = logger or ConsoleLogger()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="precompress")
        self._futures: list[Future[None]] = []
        self._futures_lock = Lock()

    def dispatch(self, path: Path) -> list[CompressionTask]:
        """Check ``path`` and launch a task for every stale artifact.

        Args:
            path: Source file accepted by the walker.

        Returns:
            list[CompressionTask]: Tasks launched for ``path`` (empty when up to date
            or when the source could not be read).

        Raises:
            StoreError: If the checksum store fails; the run must abort.
        """

        try:
            decision = self._oracle.check_source(path)
        except SourceError as exc:
            self._record(TaskFailure(path=path, message=str(exc)))
            return []

        launched: list[CompressionTask] = []
        for codec, driver in self._drivers.items():
            if decision.force_recompress or self._oracle.is_artifact_stale(decision.source, codec):
                task = CompressionTask(source=decision.source, codec=codec, level=self._levels[codec])
                self.submit(task, driver)
                launched.append(task)
        return launched

    def submit(self, task: CompressionTask, driver: CodecDriver | None = None) -> Future[None]:
        """Launch ``task`` on the pool, counting it as queued before it starts."""

        selected = driver or self._drivers[task.codec]
        self._counters.task_launched()
        try:
            future = self._executor.submit(self._run, task, selected)
        except RuntimeError:
            self._counters.task_finished()
            raise
        with self._futures_lock:
            self._futures.append(future)
        return future

    def wait(self) -> None:
        """Block until every launched task has signalled completion.

        Unexpected exceptions raised inside a task are re-raised here.
        """

        with self._futures_lock:
            pending = list(self._futures)
        done, _ = wait(pending)
        for future in done:
            future.result()

    def shutdown(self, *, cancel_pending: bool = False) -> None:
        """Stop accepting tasks; with ``cancel_pending`` drop tasks that have not started."""

        if cancel_pending:
            with self._futures_lock:
                for future in self._futures:
                    if future.cancel():
                        self._counters.task_finished()
        self._executor.shutdown(wait=True)

    def _run(self, task: CompressionTask, driver: CodecDriver) -> None:
        try:
            self._logger.debug(f"{task.codec} {str(task.source.path)!r}")
            driver.compress(task)
        except CompressionError as exc:
            self._record(TaskFailure(path=task.source.path, message=str(exc), codec=task.codec))
        else:
            self._counters.artifact_rebuilt()
        finally:
            self._counters.task_finished()

    def _record(self, failure: TaskFailure) -> None:
        self._counters.record_failure(failure)
        self._logger.fail(failure.message)

    def __enter__(self) -> TaskDispatcher:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(cancel_pending=exc is not None)


__all__ = ["TaskDispatcher"]
