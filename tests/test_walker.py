# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for source discovery."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from precompress import walker as walker_module
from precompress.errors import WalkError
from precompress.walker import Walker


def test_walk_yields_matching_files_in_sorted_order(site: Path) -> None:
    found = list(Walker((".html", ".js", ".css")).walk(site))

    assert found == [
        site / "index.html",
        site / "assets" / "app.js",
        site / "assets" / "site.css",
    ]


def test_walk_ignores_directories_and_artifacts(site: Path) -> None:
    (site / "folder.html").mkdir()
    (site / "index.html.gz").write_bytes(b"artifact")

    found = list(Walker((".html",)).walk(site))

    assert found == [site / "index.html"]


def test_walk_without_suffixes_yields_nothing(site: Path) -> None:
    assert list(Walker(()).walk(site)) == []


def test_walk_rejects_non_directory_root(site: Path) -> None:
    with pytest.raises(WalkError, match="Not a directory"):
        list(Walker((".html",)).walk(site / "index.html"))


def test_walk_reports_unreadable_directories_and_continues(
    site: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    real_walk = walker_module.os.walk

    def _flaky_walk(top: Path, onerror=None, followlinks: bool = False) -> Iterator[tuple[str, list[str], list[str]]]:
        onerror(PermissionError(13, "Permission denied", str(site / "private")))
        yield from real_walk(top, onerror=onerror, followlinks=followlinks)

    monkeypatch.setattr(walker_module.os, "walk", _flaky_walk)
    errors: list[WalkError] = []

    found = list(Walker((".html",), on_error=errors.append).walk(site))

    assert found == [site / "index.html"]
    assert len(errors) == 1
    assert errors[0].path == site / "private"
    assert "Could not read directory" in str(errors[0])


def test_walk_raises_unreadable_directory_without_handler(
    site: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    def _broken_walk(top: Path, onerror=None, followlinks: bool = False) -> Iterator[tuple[str, list[str], list[str]]]:
        onerror(PermissionError(13, "Permission denied", str(top)))
        yield from ()

    monkeypatch.setattr(walker_module.os, "walk", _broken_walk)

    with pytest.raises(WalkError):
        list(Walker((".html",)).walk(site))
