# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Content checksum helpers for source files."""

from __future__ import annotations

import hashlib
from pathlib import Path

from .constants import READ_CHUNK_SIZE


def file_checksum(path: Path, *, chunk_size: int = READ_CHUNK_SIZE) -> str:
    """Return the hex SHA-1 digest of the file at ``path``.

    The file is streamed in ``chunk_size`` blocks so arbitrarily large assets
    never need to fit in memory.

    Args:
        path: File whose content should be hashed.
        chunk_size: Number of bytes read per iteration.

    Returns:
        str: Hex-encoded SHA-1 digest of the file contents.

    Raises:
        OSError: If the file cannot be opened or read.
    """

    hasher = hashlib.sha1(usedforsecurity=False)
    with path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


__all__ = ["file_checksum"]
