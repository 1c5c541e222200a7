# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from .config import OutputConfig
from .console import detect_tty, get_console_manager


def emoji(symbol: str, enable: bool) -> str:
    """Return *symbol* when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
) -> None:
    """Render ``msg`` to the diagnostic console using shared styling helpers.

    Args:
        msg: Message text to print.
        style: Rich style name to apply when colour output is active.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    _print_line(f"{emoji('ℹ️ ', use_emoji)}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    _print_line(f"{emoji('✅ ', use_emoji)}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    _print_line(f"{emoji('⚠️ ', use_emoji)}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    _print_line(f"{emoji('❌ ', use_emoji)}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


@dataclass(frozen=True, slots=True)
class ConsoleLogger:
    """Adapter around the logging helpers bound to one set of output preferences."""

    use_emoji: bool = True
    use_color: bool | None = None
    verbose: bool = False

    @classmethod
    def from_output(cls, output: OutputConfig) -> ConsoleLogger:
        """Build a logger honouring the emoji, colour and verbosity settings of ``output``."""

        return cls(use_emoji=output.emoji, use_color=output.color and detect_tty(), verbose=output.verbose)

    def info(self, message: str) -> None:
        info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def fail(self, message: str) -> None:
        fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def debug(self, message: str) -> None:
        """Emit ``message`` only when verbose output was requested."""

        if self.verbose:
            _print_line(message, style="dim", use_emoji=self.use_emoji, use_color=self.use_color)


__all__ = ["ConsoleLogger", "emoji", "fail", "info", "ok", "warn"]
