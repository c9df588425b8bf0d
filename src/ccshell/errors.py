"""Application-level exception types for ccshell."""

from __future__ import annotations


class ShellError(Exception):
    """Base exception for ccshell."""


class HistoryError(ShellError):
    """Base exception for history persistence errors."""


class HistoryFileNotFoundError(HistoryError):
    """Raised when a history file to read does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(f"history file not found: {path}")
        self.path = path


class RedirectionError(ShellError):
    """Raised when a redirection target cannot be opened."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ProcessStartError(ShellError):
    """Raised when a resolved executable fails to launch."""

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"{command}: {reason}")
        self.command = command
        self.reason = reason


class HistoryDecodeError(HistoryError):
    """Raised when a history file is not valid text."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason
