# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Run the incremental recompression pipeline end to end."""

from __future__ import annotations

from collections.abc import Callable
from contextlib import closing
from dataclasses import dataclass
from typing import Any

from rich.progress import Progress

from .codecs import build_drivers
from .config import Config
from .console import get_console_manager
from .dispatcher import TaskDispatcher
from .errors import WalkError
from .logging import ConsoleLogger
from .models import RunCounters, RunPhase, RunResult, TaskFailure
from .oracle import StalenessOracle
from .progress import ProgressReporter
from .store import open_store
from .walker import Walker


@dataclass(frozen=True, slots=True)
class _WalkFailureRecorder:
    """Record unreadable directories as run failures and keep walking."""

    counters: RunCounters
    logger: ConsoleLogger

    def __call__(self, error: WalkError) -> None:
        self.counters.record_failure(TaskFailure(path=error.path, message=str(error)))
        self.logger.fail(str(error))


def run_precompress(
    config: Config,
    *,
    logger: ConsoleLogger | None = None,
    counters: RunCounters | None = None,
    progress_factory: Callable[..., Any] = Progress,
) -> RunResult:
    """Walk ``config.discovery.root`` and rebuild every stale artifact.

    Files are discovered and checked on the calling thread while rebuilds run
    concurrently; the call returns once every launched task has completed.

    Args:
        config: Fully resolved configuration.
        logger: Console logger; built from ``config.output`` when omitted.
        counters: Run counters to update, mainly for callers that sample them.
        progress_factory: Factory producing the Rich progress display.

    Returns:
        RunResult: Final counters and per-file failures.

    Raises:
        StoreError: If the checksum store fails at any point.
        WalkError: If the root is not a directory.
    """

    log = logger or ConsoleLogger.from_output(config.output)
    state = counters or RunCounters()
    enabled = config.codecs.enabled()
    levels = dict(enabled)
    drivers = build_drivers([name for name, _level in enabled])
    walker = Walker(config.discovery.suffixes, on_error=_WalkFailureRecorder(state, log))
    reporter = ProgressReporter(
        state,
        console=get_console_manager().get(color=bool(log.use_color), emoji=log.use_emoji),
        enabled=not config.output.quiet,
        progress_factory=progress_factory,
    )

    with closing(open_store(config.store.database_path())) as store:
        oracle = StalenessOracle(store, state, preserve_mtime=config.store.preserve_mtime, logger=log)
        with reporter, TaskDispatcher(
            oracle,
            drivers,
            levels,
            state,
            max_workers=config.execution.jobs,
            logger=log,
        ) as dispatcher:
            state.set_phase(RunPhase.FINDING)
            for path in walker.walk(config.discovery.root):
                state.file_found()
                dispatcher.dispatch(path)
            state.set_phase(RunPhase.COMPRESSING)
            dispatcher.wait()
            state.set_phase(RunPhase.EXITING)

    return RunResult(counters=state.snapshot(), failures=state.failure_list())


__all__ = ["run_precompress"]
