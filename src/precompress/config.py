# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the precompress engine."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import CODEC_DEFAULT_LEVELS, CODEC_LEVEL_RANGES, DEFAULT_FILE_TYPES, STORE_FILE_NAME, CodecName
from .errors import ConfigError


def normalize_file_types(values: Iterable[str] | str) -> list[str]:
    """Return cleaned extension names preserving their first-seen order.

    Args:
        values: Extension names, either as an iterable or a comma separated string.
            Leading dots and surrounding whitespace are ignored.

    Returns:
        list[str]: Unique, non-empty extension names without leading dots.
    """

    raw = values.split(",") if isinstance(values, str) else list(values)
    cleaned: list[str] = []
    for entry in raw:
        candidate = str(entry).strip().lstrip(".")
        if candidate and candidate not in cleaned:
            cleaned.append(candidate)
    return cleaned


class DiscoveryConfig(BaseModel):
    """Where to look for source files and which of them to compress."""

    model_config = ConfigDict(validate_assignment=True)

    root: Path = Field(default_factory=lambda: Path("."))
    types: list[str] = Field(default_factory=lambda: list(DEFAULT_FILE_TYPES))

    @field_validator("types", mode="before")
    @classmethod
    def _coerce_types(cls, value: Any) -> list[str]:
        if isinstance(value, (str, list, tuple, set, frozenset)):
            return normalize_file_types(value)
        raise ValueError("types must be a list of extensions or a comma separated string")

    @property
    def suffixes(self) -> tuple[str, ...]:
        """Return filename suffixes (with leading dots) matched by the walker."""

        return tuple(f".{entry}" for entry in self.types)


class CodecConfig(BaseModel):
    """Enable flag and effort level for a single codec."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    enabled: bool = True
    level: int


class CodecsConfig(BaseModel):
    """Per-codec settings keyed by codec name."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    gzip: CodecConfig = Field(default_factory=lambda: CodecConfig(level=CODEC_DEFAULT_LEVELS[CodecName.GZIP]))
    brotli: CodecConfig = Field(default_factory=lambda: CodecConfig(level=CODEC_DEFAULT_LEVELS[CodecName.BROTLI]))
    zstd: CodecConfig = Field(default_factory=lambda: CodecConfig(level=CODEC_DEFAULT_LEVELS[CodecName.ZSTD]))

    @model_validator(mode="after")
    def _check_levels(self) -> CodecsConfig:
        for name in CodecName:
            level = self.for_codec(name).level
            low, high = CODEC_LEVEL_RANGES[name]
            if not low <= level <= high:
                raise ValueError(f"{name} level must be between {low} and {high}, got {level}")
        return self

    def for_codec(self, name: CodecName) -> CodecConfig:
        """Return the settings for codec ``name``."""

        return getattr(self, name.value)

    def enabled(self) -> list[tuple[CodecName, int]]:
        """Return ``(codec, level)`` pairs for every enabled codec, in a stable order."""

        return [(name, self.for_codec(name).level) for name in CodecName if self.for_codec(name).enabled]


class StoreConfig(BaseModel):
    """Location and behaviour of the persistent checksum store."""

    model_config = ConfigDict(validate_assignment=True)

    state_path: Path | None = None
    preserve_mtime: bool = True

    @field_validator("state_path", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def database_path(self) -> Path | None:
        """Return the SQLite file backing the store, or ``None`` when disabled.

        An existing directory, or a missing path without a file suffix, holds
        the database under a fixed file name.
        """

        if self.state_path is None:
            return None
        if self.state_path.is_dir() or (not self.state_path.exists() and not self.state_path.suffix):
            return self.state_path / STORE_FILE_NAME
        return self.state_path


class ExecutionConfig(BaseModel):
    """Worker pool sizing."""

    model_config = ConfigDict(validate_assignment=True)

    jobs: int | None = Field(default=None, ge=1)


class OutputConfig(BaseModel):
    """Configuration for controlling console output."""

    model_config = ConfigDict(validate_assignment=True)

    quiet: bool = False
    verbose: bool = False
    emoji: bool = True
    color: bool = True


class Config(BaseModel):
    """Primary configuration container consumed by the engine."""

    model_config = ConfigDict(validate_assignment=True)

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    codecs: CodecsConfig = Field(default_factory=CodecsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of the configuration."""

        return self.model_dump(mode="json")

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Config:
        """Validate ``data`` into a :class:`Config`, raising :class:`ConfigError`."""

        try:
            return cls.model_validate(data)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc


__all__ = [
    "CodecConfig",
    "CodecsConfig",
    "Config",
    "ConfigError",
    "DiscoveryConfig",
    "ExecutionConfig",
    "OutputConfig",
    "StoreConfig",
    "normalize_file_types",
]
