# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem traversal yielding the source files eligible for compression."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

from .errors import WalkError

WalkErrorHandler = Callable[[WalkError], None]


class Walker:
    """Traverse a directory tree collecting files with a configured suffix."""

    def __init__(
        self,
        suffixes: Sequence[str],
        *,
        on_error: WalkErrorHandler | None = None,
    ) -> None:
        """Create a walker matching ``suffixes``.

        Args:
            suffixes: Filename endings (``".html"``) accepted by the walker.
            on_error: Callback receiving unreadable-directory errors; the subtree
                is skipped and the walk continues. Without a callback the
                error is raised.
        """

        self.suffixes = tuple(suffixes)
        self._on_error = on_error

    def matches(self, name: str) -> bool:
        """Return whether the file ``name`` ends with one of the configured suffixes."""

        return name.endswith(self.suffixes)

    def walk(self, root: Path) -> Iterator[Path]:
        """Yield absolute paths of matching regular files under ``root``.

        Directories and file names are visited in sorted order so runs are
        reproducible.

        Args:
            root: Directory to traverse.

        Yields:
            Path: Matching files.

        Raises:
            WalkError: If ``root`` is not a directory, or a subdirectory cannot
                be listed and no error callback was supplied.
        """

        base = root.resolve()
        if not base.is_dir():
            raise WalkError(base, "Not a directory")
        if not self.suffixes:
            return
        for dirpath, dirnames, filenames in os.walk(base, onerror=self._handle_error):
            dirnames.sort()
            current = Path(dirpath)
            for filename in sorted(filenames):
                if not self.matches(filename):
                    continue
                candidate = current / filename
                if candidate.is_file():
                    yield candidate

    def _handle_error(self, error: OSError) -> None:
        location = Path(error.filename) if error.filename else Path()
        wrapped = WalkError(location, "Could not read directory", cause=error)
        if self._on_error is None:
            raise wrapped from error
        self._on_error(wrapped)


__all__ = ["WalkErrorHandler", "Walker"]
