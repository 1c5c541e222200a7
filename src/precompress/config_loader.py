# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Layered configuration loading (defaults, pyproject, local TOML, CLI)."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final, Protocol

from .config import Config
from .constants import LOCAL_CONFIG_NAME, PYPROJECT_NAME
from .errors import ConfigError

PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "precompress"
KNOWN_SECTIONS: Final[frozenset[str]] = frozenset({"discovery", "codecs", "store", "execution", "output"})
# Dotted keys whose relative values are anchored at the declaring file's directory.
_PATH_KEYS: Final[tuple[tuple[str, str], ...]] = (("discovery", "root"), ("store", "state_path"))

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class ConfigSource(Protocol):
    """Protocol implemented by configuration fragments."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return a partial configuration mapping."""

    def describe(self) -> str:
        """Return a human-readable description of the source."""


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return Config().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None, env: Mapping[str, str] | None = None) -> None:
        self._path = path
        self.name = name or str(path)
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        document = self._read()
        if not document:
            return {}
        _check_sections(document, self.name)
        anchored = _anchor_paths(document, self._path.parent)
        return _expand_env(anchored, self._env)

    def _read(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            with self._path.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {self._path}: {exc}") from exc
        except OSError as exc:
            raise ConfigError(f"Unable to read {self._path}: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {self._path} must be a table")
        return dict(data)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.precompress]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def _read(self) -> dict[str, Any]:
        data = super()._read()
        tool_section = data.get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class MappingConfigSource:
    """Wrap an in-memory mapping, typically CLI overrides."""

    def __init__(self, data: Mapping[str, Any], *, name: str = "overrides") -> None:
        self._data = data
        self.name = name

    def load(self) -> Mapping[str, Any]:
        _check_sections(self._data, self.name)
        return self._data

    def describe(self) -> str:
        return "Command-line overrides"


@dataclass(slots=True)
class ConfigLoadResult:
    """Resolved configuration plus the sources that contributed to it."""

    config: Config
    sources: list[str] = field(default_factory=list)


def default_sources(
    root: Path,
    *,
    config_file: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> list[ConfigSource]:
    """Return the ordered configuration sources for a project ``root``.

    Args:
        root: Directory being precompressed; configuration files are read from it.
        config_file: Explicit TOML file replacing ``.precompress.toml`` when given.
        env: Environment used for ``$VAR`` expansion, defaulting to ``os.environ``.

    Returns:
        list[ConfigSource]: Sources ordered from lowest to highest precedence.
    """

    local = config_file if config_file is not None else root / LOCAL_CONFIG_NAME
    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Configuration file not found: {config_file}")
    return [
        DefaultConfigSource(),
        PyProjectConfigSource(root / PYPROJECT_NAME, env=env),
        TomlConfigSource(local, env=env),
    ]


def load_config(
    root: Path,
    *,
    config_file: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    env: Mapping[str, str] | None = None,
) -> ConfigLoadResult:
    """Merge every configuration layer for ``root`` into a validated :class:`Config`.

    Args:
        root: Directory being precompressed.
        config_file: Optional explicit TOML configuration file.
        overrides: Highest-precedence fragment, usually built from CLI flags.
        env: Environment used for ``$VAR`` expansion.

    Returns:
        ConfigLoadResult: The validated configuration and contributing source names.

    Raises:
        ConfigError: If any source is malformed or the merged result is invalid.
    """

    sources: list[ConfigSource] = list(default_sources(root, config_file=config_file, env=env))
    if overrides:
        sources.append(MappingConfigSource(overrides))
    return merge_sources(sources)


def merge_sources(sources: Sequence[ConfigSource]) -> ConfigLoadResult:
    """Deep-merge ``sources`` in order and validate the result."""

    merged: dict[str, Any] = {}
    applied: list[str] = []
    for source in sources:
        fragment = source.load()
        if not fragment:
            continue
        merged = _deep_merge(merged, fragment)
        applied.append(source.describe())
    return ConfigLoadResult(config=Config.from_mapping(merged), sources=applied)


def _check_sections(document: Mapping[str, Any], origin: str) -> None:
    unknown = sorted(set(document) - KNOWN_SECTIONS)
    if unknown:
        raise ConfigError(f"Unknown configuration section(s) in {origin}: {', '.join(unknown)}")


def _anchor_paths(document: Mapping[str, Any], base_dir: Path) -> dict[str, Any]:
    anchored = dict(document)
    for section, key in _PATH_KEYS:
        table = anchored.get(section)
        if not isinstance(table, Mapping):
            continue
        value = table.get(key)
        if not isinstance(value, str) or not value:
            continue
        candidate = Path(value)
        if not candidate.is_absolute() and "$" not in value:
            anchored[section] = {**table, key: str(base_dir / candidate)}
    return anchored


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env(data: Mapping[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    return {key: _expand_env_value(value, env) for key, value in data.items()}


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key is None:
            return match.group(0)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


__all__ = [
    "ConfigLoadResult",
    "ConfigSource",
    "DefaultConfigSource",
    "MappingConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "default_sources",
    "load_config",
    "merge_sources",
]
