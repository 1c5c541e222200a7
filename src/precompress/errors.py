# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Custom exceptions raised by the recompression engine."""

from __future__ import annotations

from pathlib import Path


class PrecompressError(RuntimeError):
    """Base class for errors raised by :mod:`precompress`."""


class ConfigError(PrecompressError):
    """Raised when configuration input is invalid."""


class StoreError(PrecompressError):
    """Raised when the checksum store cannot be opened, read, or written.

    Store failures are fatal to the whole run because every subsequent
    staleness decision depends on the index.
    """


class FileError(PrecompressError):
    """Raised when a single file cannot be processed."""

    def __init__(self, path: Path, message: str, *, cause: BaseException | None = None) -> None:
        """Create the error for ``path`` with a human-readable ``message``.

        Args:
            path: Offending filesystem path.
            message: Description of the failed operation.
            cause: Underlying exception, when one exists.
        """

        detail = f"{message} {str(path)!r}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(detail)
        self.path = path
        self.cause = cause


class SourceError(FileError):
    """Raised when a source file cannot be read or its metadata updated."""


class CompressionError(FileError):
    """Raised when an artifact cannot be produced for a source file."""


class WalkError(FileError):
    """Raised when a directory cannot be listed during discovery."""


__all__ = (
    "CompressionError",
    "ConfigError",
    "FileError",
    "PrecompressError",
    "SourceError",
    "StoreError",
    "WalkError",
)
