# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest

from precompress.config import Config
from precompress.console import get_console_manager
from tests.helpers.fs import BASE_MTIME_NS, set_mtime


@pytest.fixture(autouse=True)
def _fresh_consoles() -> Iterator[None]:
    """Drop cached Rich consoles so each test binds to its own captured stderr."""

    get_console_manager().clear()
    yield
    get_console_manager().clear()


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Return a small static site with compressible and ignored files."""

    root = (tmp_path / "site").resolve()
    (root / "assets").mkdir(parents=True)
    (root / "index.html").write_text("<html><body>" + "hello " * 200 + "</body></html>\n", encoding="utf-8")
    (root / "assets" / "app.js").write_text("console.log('precompress');\n" * 50, encoding="utf-8")
    (root / "assets" / "site.css").write_text("body { margin: 0; }\n" * 50, encoding="utf-8")
    (root / "notes.txt").write_text("not compressed\n", encoding="utf-8")
    for path in root.rglob("*"):
        if path.is_file():
            set_mtime(path, BASE_MTIME_NS)
    return root


@pytest.fixture
def make_config() -> Callable[..., Config]:
    """Return a factory producing quiet configurations rooted at a directory."""

    def _factory(root: Path, *, state_path: Path | None = None, **sections: Any) -> Config:
        data: dict[str, Any] = {
            "discovery": {"root": str(root)},
            "store": {"state_path": str(state_path) if state_path is not None else None},
            "output": {"quiet": True, "emoji": False, "color": False},
        }
        for section, values in sections.items():
            data[section] = {**data.get(section, {}), **values}
        return Config.from_mapping(data)

    return _factory
