# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across precompress modules."""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class CodecName(StrEnum):
    """Identifiers of the codecs the engine can produce artifacts with."""

    GZIP = "gzip"
    BROTLI = "brotli"
    ZSTD = "zstd"


CODEC_SUFFIXES: Final[dict[CodecName, str]] = {
    CodecName.GZIP: ".gz",
    CodecName.BROTLI: ".br",
    CodecName.ZSTD: ".zst",
}

# Inclusive effort ranges accepted by each codec.
CODEC_LEVEL_RANGES: Final[dict[CodecName, tuple[int, int]]] = {
    CodecName.GZIP: (0, 9),
    CodecName.BROTLI: (0, 11),
    CodecName.ZSTD: (1, 22),
}

CODEC_DEFAULT_LEVELS: Final[dict[CodecName, int]] = {
    CodecName.GZIP: 9,
    CodecName.BROTLI: 11,
    CodecName.ZSTD: 19,
}

DEFAULT_FILE_TYPES: Final[tuple[str, ...]] = ("html", "css", "js", "json", "xml", "ico", "svg", "md")

STORE_FILE_NAME: Final[str] = "checksums.sqlite3"
LOCAL_CONFIG_NAME: Final[str] = ".precompress.toml"
PYPROJECT_NAME: Final[str] = "pyproject.toml"

READ_CHUNK_SIZE: Final[int] = 1024 * 1024
PROGRESS_INTERVAL_S: Final[float] = 0.05

__all__ = [
    "CODEC_DEFAULT_LEVELS",
    "CODEC_LEVEL_RANGES",
    "CODEC_SUFFIXES",
    "DEFAULT_FILE_TYPES",
    "LOCAL_CONFIG_NAME",
    "PROGRESS_INTERVAL_S",
    "PYPROJECT_NAME",
    "READ_CHUNK_SIZE",
    "STORE_FILE_NAME",
    "CodecName",
]
