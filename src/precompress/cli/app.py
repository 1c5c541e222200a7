# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .. import __version__
from ..config_loader import load_config
from ..constants import CodecName
from ..engine import run_precompress
from ..errors import ConfigError, StoreError, WalkError
from ..logging import ConsoleLogger
from ..models import RunResult
from ..progress import format_status
from .options import (
    BROTLI_LEVEL_OPTION,
    BROTLI_OPTION,
    COLOR_OPTION,
    CONFIG_OPTION,
    DIR_OPTION,
    EMOJI_OPTION,
    GZIP_LEVEL_OPTION,
    GZIP_OPTION,
    JOBS_OPTION,
    PRESERVE_MTIME_OPTION,
    QUIET_OPTION,
    STATEDIR_OPTION,
    TYPES_OPTION,
    VERBOSE_OPTION,
    ZSTD_LEVEL_OPTION,
    ZSTD_OPTION,
    CodecFlags,
    PrecompressCLIOptions,
)
from .shared import EXIT_FATAL, CLIError, build_cli_logger

app = typer.Typer(
    name="precompress",
    help="Incrementally precompress static assets with gzip, brotli and zstd.",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"precompress {__version__}")
        raise typer.Exit()


@app.command()
def main(
    root: DIR_OPTION = None,
    types: TYPES_OPTION = None,
    statedir: STATEDIR_OPTION = None,
    preserve_mtime: PRESERVE_MTIME_OPTION = None,
    gzip: GZIP_OPTION = None,
    gzip_level: GZIP_LEVEL_OPTION = None,
    brotli: BROTLI_OPTION = None,
    brotli_level: BROTLI_LEVEL_OPTION = None,
    zstd: ZSTD_OPTION = None,
    zstd_level: ZSTD_LEVEL_OPTION = None,
    jobs: JOBS_OPTION = None,
    config_file: CONFIG_OPTION = None,
    quiet: QUIET_OPTION = False,
    verbose: VERBOSE_OPTION = False,
    emoji: EMOJI_OPTION = None,
    color: COLOR_OPTION = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit."),
    ] = False,
) -> None:
    """Recompress every stale artifact below ``--dir``.

    Exit status is 0 on success, 1 when any file failed to compress, and 2
    on configuration, discovery or checksum store errors.
    """

    options = PrecompressCLIOptions(
        root=root.resolve() if root is not None else None,
        config_file=config_file.resolve() if config_file is not None else None,
        types=types,
        statedir=statedir,
        preserve_mtime=preserve_mtime,
        codecs={
            CodecName.GZIP: CodecFlags(enabled=gzip, level=gzip_level),
            CodecName.BROTLI: CodecFlags(enabled=brotli, level=brotli_level),
            CodecName.ZSTD: CodecFlags(enabled=zstd, level=zstd_level),
        },
        jobs=jobs,
        quiet=quiet,
        verbose=verbose,
        emoji=emoji,
        color=color,
    )
    fallback_logger = build_cli_logger(
        emoji=True if emoji is None else emoji,
        color=True if color is None else color,
        verbose=verbose,
    )
    try:
        result = execute(options)
    except CLIError as exc:
        fallback_logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=result.exit_code)


def execute(options: PrecompressCLIOptions) -> RunResult:
    """Load configuration for ``options`` and run the engine.

    Raises:
        CLIError: If configuration, discovery or the checksum store fails.
    """

    try:
        loaded = load_config(options.config_root, config_file=options.config_file, overrides=options.to_overrides())
    except ConfigError as exc:
        raise CLIError(f"Invalid configuration: {exc}", exit_code=EXIT_FATAL) from exc

    config = loaded.config
    logger = ConsoleLogger.from_output(config.output)
    if config.output.verbose:
        logger.info(f"Configuration: {', '.join(loaded.sources)}")
    if not config.codecs.enabled():
        logger.warn("No codecs enabled; only checksums will be refreshed")

    try:
        result = run_precompress(config, logger=logger)
    except StoreError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FATAL) from exc
    except WalkError as exc:
        raise CLIError(str(exc), exit_code=EXIT_FATAL) from exc

    emit_summary(result, logger=logger, quiet=config.output.quiet)
    return result


def emit_summary(result: RunResult, *, logger: ConsoleLogger, quiet: bool) -> None:
    """Print the final status line and a failure count when applicable."""

    if not result.ok:
        logger.fail(f"{len(result.failures)} file(s) could not be processed")
        return
    if not quiet:
        logger.ok(format_status(result.counters))


__all__ = ["app", "emit_summary", "execute", "main"]
