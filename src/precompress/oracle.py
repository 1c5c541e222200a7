# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Two-tier staleness decisions for sources and their compressed artifacts.

The content-hash tier is authoritative whenever a checksum store is
configured: it decides whether a source really changed and normalises the
source mtime back to the canonical value when only the timestamp moved. The
mtime tier then compares each artifact against the (possibly normalised)
source modification time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .constants import CodecName
from .errors import SourceError
from .hashing import file_checksum
from .logging import ConsoleLogger
from .models import RunCounters, SourceFile
from .store import ChecksumStore


@dataclass(frozen=True, slots=True)
class SourceDecision:
    """Result of the source staleness check for one file."""

    source: SourceFile
    force_recompress: bool


class StalenessOracle:
    """Decide which artifacts of a source file must be rebuilt."""

    def __init__(
        self,
        store: ChecksumStore,
        counters: RunCounters,
        *,
        preserve_mtime: bool = True,
        logger: ConsoleLogger | None = None,
    ) -> None:
        """Create an oracle backed by ``store``.

        Args:
            store: Checksum index; a disabled store selects pure mtime mode.
            counters: Shared run counters updated when checksums are computed.
            preserve_mtime: When ``True`` rewrite the source mtime to the stored
                canonical value for files whose content is unchanged.
            logger: Optional logger used for verbose diagnostics.
        """

        self._store = store
        self._counters = counters
        self._preserve_mtime = preserve_mtime
        self._logger = logger or ConsoleLogger(verbose=False)

    def check_source(self, path: Path) -> SourceDecision:
        """Return the snapshot to compress and whether every codec must rebuild.

        Args:
            path: Absolute path of the source file.

        Returns:
            SourceDecision: Snapshot reflecting any mtime normalisation and the
            ``force_recompress`` flag.

        Raises:
            SourceError: If the source cannot be read or its mtime rewritten.
            StoreError: If the checksum store fails.
        """

        snapshot = self._snapshot(path)
        if not self._store.enabled:
            return SourceDecision(source=snapshot, force_recompress=False)

        try:
            checksum = file_checksum(path)
        except OSError as exc:
            raise SourceError(path, "Could not read", cause=exc) from exc
        self._counters.checksum_computed()
        snapshot = snapshot.with_checksum(checksum)

        record = self._store.lookup(path)
        if record is None or record.checksum != checksum:
            self._logger.debug(f"New checksum {checksum} for {str(path)!r}")
            self._store.upsert(path, checksum, snapshot.mtime_ns)
            return SourceDecision(source=snapshot, force_recompress=True)

        if record.mtime_ns != snapshot.mtime_ns and self._preserve_mtime:
            self._logger.debug(f"Changing mtime of {str(path)!r} from {snapshot.mtime_ns} to {record.mtime_ns}")
            try:
                os.utime(path, ns=(record.mtime_ns, record.mtime_ns))
            except OSError as exc:
                raise SourceError(path, "Could not update times for", cause=exc) from exc
            snapshot = self._snapshot(path).with_checksum(checksum)
        return SourceDecision(source=snapshot, force_recompress=False)

    @staticmethod
    def is_artifact_stale(source: SourceFile, codec: CodecName) -> bool:
        """Return ``True`` when the ``codec`` artifact is missing or older than ``source``."""

        try:
            info = os.stat(source.artifact_path(codec))
        except OSError:
            return True
        return info.st_mtime_ns < source.mtime_ns

    @staticmethod
    def _snapshot(path: Path) -> SourceFile:
        try:
            return SourceFile.from_path(path)
        except OSError as exc:
            raise SourceError(path, "Could not stat", cause=exc) from exc


__all__ = ["SourceDecision", "StalenessOracle"]
