"""Shared core dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class Builtin(StrEnum):
    """Commands implemented inside the interpreter."""

    EXIT = "exit"
    ECHO = "echo"
    TYPE = "type"
    PWD = "pwd"
    CD = "cd"
    HISTORY = "history"


@dataclass(frozen=True)
class ParsedCommand:
    """One pipeline stage after tokenizing and redirection extraction."""

    command: str
    args: list[str] = field(default_factory=list)
    output_file: str | None = None
    error_file: str | None = None
    append_output: bool = False
    append_error: bool = False

    @property
    def args_text(self) -> str:
        return " ".join(self.args)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one builtin invocation or one terminal process."""

    exit_code: int = 0
    output: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class Resolution:
    """Where a command name points to."""

    name: str
    path: str | None = None
    builtin: bool = False

    @property
    def found(self) -> bool:
        return self.builtin or self.path is not None


@dataclass(frozen=True)
class LineResult:
    """Routing outcome for one submitted line."""

    exit_code: int = 0
    output: str | None = None
    error: str | None = None
    exit_requested: bool = False


Pipeline = list[ParsedCommand]
