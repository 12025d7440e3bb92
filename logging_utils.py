#!/usr/bin/env python3
"""Logging utilities for mirror-keeper."""

import os
import sys
import time
from typing import Optional, TextIO

import colorama

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Formatted console output with colors and credential redaction.

    One instance is created by the entry point and handed to every component,
    so the verbosity is a property of the instance rather than process state.
    """

    PROCESS_NAME = "mirror-keeper"

    def __init__(
        self,
        verbose: bool = False,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.verbose = verbose
        self._stdout = stdout
        self._stderr = stderr

    def debug(self, *messages: str) -> None:
        if not self.verbose:
            return
        self._write(self._out(), colorama.Fore.LIGHTBLACK_EX, *messages)

    def info(self, *messages: str) -> None:
        self._write(self._out(), colorama.Fore.CYAN, *messages)

    def warn(self, *messages: str) -> None:
        self._write(self._out(), colorama.Fore.YELLOW, *messages)

    def error(self, *messages: str) -> None:
        self._write(self._err(), colorama.Fore.RED, *messages)

    def security_event(self, event_type: str, details: str) -> None:
        """Log security events with appropriate sanitization."""
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        self._write(
            self._err(),
            colorama.Fore.MAGENTA,
            f"[SECURITY:{event_type}] {timestamp}: {details}",
        )

    def _out(self) -> TextIO:
        # Resolved per call so pytest's capsys sees the output
        return self._stdout or sys.stdout

    def _err(self) -> TextIO:
        return self._stderr or sys.stderr

    def _write(self, stream: TextIO, color: str, *messages: str) -> None:
        sanitized_messages = [
            SecurityValidator.sanitize_for_logging(str(msg)) for msg in messages
        ]
        stream.write(self._format_line(color, *sanitized_messages) + "\n")

    def _get_header(self) -> str:
        return f"[{self.PROCESS_NAME}:{os.getpid()}]"

    def _format_line(self, color: str, *messages: str) -> str:
        header = self._get_header()
        message = " ".join(messages)
        return f"{color}{header}{colorama.Style.RESET_ALL} {message}"
