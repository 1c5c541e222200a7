# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared CLI helpers and exit codes."""

from __future__ import annotations

from typing import Final

from ..console import detect_tty
from ..logging import ConsoleLogger

EXIT_FATAL: Final[int] = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_FATAL) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


def build_cli_logger(*, emoji: bool, color: bool, verbose: bool = False) -> ConsoleLogger:
    """Return a :class:`ConsoleLogger` honouring the CLI presentation flags."""

    return ConsoleLogger(use_emoji=emoji, use_color=color and detect_tty(), verbose=verbose)


__all__ = ["CLIError", "EXIT_FATAL", "build_cli_logger"]
