# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer option declarations and the overrides they produce."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

from ..config import normalize_file_types
from ..constants import CodecName

DIR_OPTION = Annotated[
    Path | None,
    typer.Option("--dir", "-d", help="Directory to search for compressible files (default: current directory)."),
]
TYPES_OPTION = Annotated[
    str | None,
    typer.Option("--types", help="File types to compress, separated by a comma."),
]
STATEDIR_OPTION = Annotated[
    Path | None,
    typer.Option("--statedir", help="Checksum database (or directory holding it) kept across runs."),
]
PRESERVE_MTIME_OPTION = Annotated[
    bool | None,
    typer.Option(
        "--preserve-mtime/--no-preserve-mtime",
        help="Restore the recorded mtime of files whose checksum is unchanged.",
    ),
]
GZIP_OPTION = Annotated[bool | None, typer.Option("--gzip/--no-gzip", help="Compress with gzip.")]
GZIP_LEVEL_OPTION = Annotated[int | None, typer.Option("--gzip-level", help="gzip compression level.")]
BROTLI_OPTION = Annotated[bool | None, typer.Option("--brotli/--no-brotli", help="Compress with brotli.")]
BROTLI_LEVEL_OPTION = Annotated[int | None, typer.Option("--brotli-level", help="brotli compression level.")]
ZSTD_OPTION = Annotated[bool | None, typer.Option("--zstd/--no-zstd", help="Compress with zstd.")]
ZSTD_LEVEL_OPTION = Annotated[int | None, typer.Option("--zstd-level", help="zstd compression level.")]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Maximum concurrent compression tasks (default: automatic)."),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="TOML configuration file replacing .precompress.toml."),
]
QUIET_OPTION = Annotated[bool, typer.Option("--quiet", "-q", help="Avoid printing status updates.")]
VERBOSE_OPTION = Annotated[bool, typer.Option("--verbose", "-v", help="Log every compression task.")]
EMOJI_OPTION = Annotated[bool | None, typer.Option("--emoji/--no-emoji", help="Toggle emoji output.")]
COLOR_OPTION = Annotated[bool | None, typer.Option("--color/--no-color", help="Toggle colour output.")]


@dataclass(frozen=True, slots=True)
class CodecFlags:
    """Enable flag and level override for one codec; ``None`` keeps the configured value."""

    enabled: bool | None = None
    level: int | None = None


@dataclass(frozen=True, slots=True)
class PrecompressCLIOptions:
    """Capture the values supplied on the command line."""

    root: Path | None
    config_file: Path | None
    types: str | None
    statedir: Path | None
    preserve_mtime: bool | None
    codecs: dict[CodecName, CodecFlags]
    jobs: int | None
    quiet: bool
    verbose: bool
    emoji: bool | None
    color: bool | None

    @property
    def config_root(self) -> Path:
        """Return the directory searched for configuration files: ``--dir`` or the working directory."""

        return self.root if self.root is not None else Path.cwd()

    def to_overrides(self) -> dict[str, Any]:
        """Return a configuration fragment containing only the flags that were given."""

        overrides: dict[str, Any] = {}
        discovery: dict[str, Any] = {}
        if self.root is not None:
            discovery["root"] = str(self.root)
        if self.types is not None:
            discovery["types"] = normalize_file_types(self.types)
        if discovery:
            overrides["discovery"] = discovery

        store: dict[str, Any] = {}
        if self.statedir is not None:
            store["state_path"] = str(self.statedir.resolve())
        if self.preserve_mtime is not None:
            store["preserve_mtime"] = self.preserve_mtime
        if store:
            overrides["store"] = store

        codecs: dict[str, Any] = {}
        for name, flags in self.codecs.items():
            entry: dict[str, Any] = {}
            if flags.enabled is not None:
                entry["enabled"] = flags.enabled
            if flags.level is not None:
                entry["level"] = flags.level
            if entry:
                codecs[name.value] = entry
        if codecs:
            overrides["codecs"] = codecs

        if self.jobs is not None:
            overrides["execution"] = {"jobs": self.jobs}

        output: dict[str, Any] = {}
        if self.quiet:
            output["quiet"] = True
        if self.verbose:
            output["verbose"] = True
        if self.emoji is not None:
            output["emoji"] = self.emoji
        if self.color is not None:
            output["color"] = self.color
        if output:
            overrides["output"] = output
        return overrides


__all__ = [
    "BROTLI_LEVEL_OPTION",
    "BROTLI_OPTION",
    "COLOR_OPTION",
    "CONFIG_OPTION",
    "CodecFlags",
    "DIR_OPTION",
    "EMOJI_OPTION",
    "GZIP_LEVEL_OPTION",
    "GZIP_OPTION",
    "JOBS_OPTION",
    "PRESERVE_MTIME_OPTION",
    "PrecompressCLIOptions",
    "QUIET_OPTION",
    "STATEDIR_OPTION",
    "TYPES_OPTION",
    "VERBOSE_OPTION",
    "ZSTD_LEVEL_OPTION",
    "ZSTD_OPTION",
]
