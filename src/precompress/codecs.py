# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Codec drivers producing compressed artifacts from source files.

Every codec is exposed through the same :class:`CodecDriver`; only the
streaming encoder factory differs between gzip, brotli and zstd.
"""

from __future__ import annotations

import os
import tempfile
import zlib
from collections.abc import Callable
from contextlib import suppress
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Final, Protocol

import brotli
import zstandard

from .constants import CODEC_SUFFIXES, READ_CHUNK_SIZE, CodecName
from .errors import CompressionError
from .models import CompressionTask, SourceFile

_ENCODE_ERRORS: Final[tuple[type[Exception], ...]] = (zlib.error, brotli.error, zstandard.ZstdError)


class StreamEncoder(Protocol):
    """Incremental compressor fed with successive chunks."""

    def compress(self, data: bytes) -> bytes:
        """Return compressed output available after consuming ``data``."""

    def flush(self) -> bytes:
        """Finish the stream and return any remaining output."""


EncoderFactory = Callable[[int], StreamEncoder]


class _BrotliEncoder:
    """Adapt :class:`brotli.Compressor` to :class:`StreamEncoder`."""

    def __init__(self, level: int) -> None:
        self._compressor = brotli.Compressor(quality=level)

    def compress(self, data: bytes) -> bytes:
        return self._compressor.process(data)

    def flush(self) -> bytes:
        return self._compressor.finish()


def _gzip_encoder(level: int) -> StreamEncoder:
    # wbits offset of 16 selects the gzip container.
    return zlib.compressobj(level, zlib.DEFLATED, zlib.MAX_WBITS | 16)


def _zstd_encoder(level: int) -> StreamEncoder:
    return zstandard.ZstdCompressor(level=level).compressobj()


@dataclass(frozen=True, slots=True)
class CodecSpec:
    """Static description of a codec: name, artifact suffix and encoder factory."""

    name: CodecName
    suffix: str
    factory: EncoderFactory


CODECS: Final[dict[CodecName, CodecSpec]] = {
    CodecName.GZIP: CodecSpec(CodecName.GZIP, CODEC_SUFFIXES[CodecName.GZIP], _gzip_encoder),
    CodecName.BROTLI: CodecSpec(CodecName.BROTLI, CODEC_SUFFIXES[CodecName.BROTLI], _BrotliEncoder),
    CodecName.ZSTD: CodecSpec(CodecName.ZSTD, CODEC_SUFFIXES[CodecName.ZSTD], _zstd_encoder),
}


class CodecDriver:
    """Compress source files into sibling artifacts with one codec."""

    def __init__(self, spec: CodecSpec, *, chunk_size: int = READ_CHUNK_SIZE) -> None:
        self.spec = spec
        self._chunk_size = chunk_size

    @property
    def name(self) -> CodecName:
        return self.spec.name

    def encode(self, source: BinaryIO, sink: BinaryIO, level: int) -> int:
        """Stream ``source`` through the encoder into ``sink``.

        The encoder is flushed once the source is exhausted, so ``sink``
        holds a complete stream when this returns.

        Args:
            source: Readable binary stream with the original bytes.
            sink: Writable binary stream receiving compressed bytes.
            level: Codec effort level.

        Returns:
            int: Number of compressed bytes written.
        """

        encoder = self.spec.factory(level)
        written = 0
        while chunk := source.read(self._chunk_size):
            written += sink.write(encoder.compress(chunk))
        written += sink.write(encoder.flush())
        sink.flush()
        return written

    def compress(self, task: CompressionTask) -> Path:
        """Rebuild the artifact for ``task`` and copy the source's mtime and mode onto it.

        The artifact is written to a temporary sibling and moved into place
        only after its metadata matches the source, so a failed run never
        leaves a truncated artifact that looks fresh.

        Args:
            task: Task describing the source snapshot, codec and level.

        Returns:
            Path: Location of the rebuilt artifact.

        Raises:
            CompressionError: If reading, encoding, writing or updating metadata fails.
        """

        source = task.source
        output = task.output_path
        try:
            handle = tempfile.NamedTemporaryFile(
                mode="wb",
                dir=output.parent,
                prefix=f".{output.name}.",
                suffix=".tmp",
                delete=False,
            )
        except OSError as exc:
            raise CompressionError(output, "Could not open for writing", cause=exc) from exc

        staging = Path(handle.name)
        try:
            try:
                with handle:
                    self._encode_file(source, handle, task.level)
            except OSError as exc:
                raise CompressionError(output, "Could not write", cause=exc) from exc
            _copy_metadata(source, staging, output)
            try:
                os.replace(staging, output)
            except OSError as exc:
                raise CompressionError(output, "Could not replace", cause=exc) from exc
        except CompressionError:
            with suppress(OSError):
                staging.unlink()
            raise
        return output

    def _encode_file(self, source: SourceFile, sink: BinaryIO, level: int) -> None:
        try:
            reader = source.path.open("rb")
        except OSError as exc:
            raise CompressionError(source.path, "Could not open for reading", cause=exc) from exc
        with reader:
            try:
                self.encode(reader, sink, level)
            except OSError as exc:
                raise CompressionError(source.path, "Could not copy data for", cause=exc) from exc
            except _ENCODE_ERRORS as exc:
                raise CompressionError(source.path, f"Could not {self.name}", cause=exc) from exc


def _copy_metadata(source: SourceFile, staging: Path, output: Path) -> None:
    try:
        os.utime(staging, ns=(source.mtime_ns, source.mtime_ns))
    except OSError as exc:
        raise CompressionError(output, "Could not update times for", cause=exc) from exc
    try:
        os.chmod(staging, source.mode)
    except OSError as exc:
        raise CompressionError(output, "Could not update modes for", cause=exc) from exc


def build_drivers(names: list[CodecName] | tuple[CodecName, ...]) -> dict[CodecName, CodecDriver]:
    """Return a driver for each codec in ``names``."""

    return {name: CodecDriver(CODECS[name]) for name in names}


__all__ = [
    "CODECS",
    "CodecDriver",
    "CodecSpec",
    "EncoderFactory",
    "StreamEncoder",
    "build_drivers",
]
