#!/usr/bin/env python3
"""Logging utilities for inclusify."""

import os
import sys
from typing import Any, Optional, TextIO

import colorama

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Formatted console output with colors and credential redaction.

    One instance is built per invocation and handed to every command.
    Keyword fields are appended as ``key=value`` pairs.
    """

    def __init__(
        self,
        name: str = "inclusify",
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.name = name
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr

    def debug(self, message: str, **fields: Any) -> None:
        self._write(self.stdout, colorama.Fore.LIGHTBLACK_EX, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._write(self.stdout, colorama.Fore.CYAN, message, fields)

    def success(self, message: str, **fields: Any) -> None:
        self._write(self.stdout, colorama.Fore.GREEN, message, fields)

    def warn(self, message: str, **fields: Any) -> None:
        self._write(self.stdout, colorama.Fore.YELLOW, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._write(self.stderr, colorama.Fore.RED, message, fields)

    def _write(self, stream: TextIO, color: str, message: str, fields: dict) -> None:
        line = SecurityValidator.sanitize_for_logging(self._render(message, fields))
        stream.write(f"{color}{self._get_header()}{colorama.Style.RESET_ALL} {line}\n")

    def _get_header(self) -> str:
        return f"[{self.name}:{os.getpid()}]"

    @staticmethod
    def _render(message: str, fields: dict) -> str:
        if not fields:
            return str(message)
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message}: {pairs}"
