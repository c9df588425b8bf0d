"""Builtin command dispatch."""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from pathlib import Path

from loguru import logger

from ccshell.core.resolver import CommandResolver
from ccshell.core.types import Builtin, CommandResult, ParsedCommand
from ccshell.errors import HistoryDecodeError, HistoryFileNotFoundError
from ccshell.history import HistoryStore

HISTORY_FILE_FLAGS = frozenset({"-r", "-w", "-a"})
EXIT_CODE_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")
EXIT_CODE_MIN = -(2**31)
EXIT_CODE_MAX = 2**31 - 1

BuiltinHandler = Callable[["BuiltinDispatcher", ParsedCommand, bool], CommandResult]


def parse_exit_code(args: list[str]) -> int:
    if not args:
        return 0
    if EXIT_CODE_PATTERN.fullmatch(args[0]) is None:
        return 0
    code = int(args[0])
    # Values outside a signed 32-bit integer are treated as unparsable.
    return code if EXIT_CODE_MIN <= code <= EXIT_CODE_MAX else 0


class BuiltinDispatcher:
    """Run builtins in-process and report a uniform result.

    ``pipeline_stage`` marks an invocation that is not authoritative for the
    interpreter's own state; ``cd`` and ``history`` do nothing then.
    """

    def __init__(self, resolver: CommandResolver, history: HistoryStore) -> None:
        self._resolver = resolver
        self._history = history

    def is_builtin(self, name: str) -> bool:
        return name in _HANDLERS

    def dispatch(self, command: ParsedCommand, *, pipeline_stage: bool = False) -> CommandResult:
        handler = _HANDLERS.get(command.command)
        if handler is None:
            raise KeyError(command.command)
        return handler(self, command, pipeline_stage)

    def _exit(self, command: ParsedCommand, _pipeline_stage: bool) -> CommandResult:
        return CommandResult(exit_code=parse_exit_code(command.args))

    def _echo(self, command: ParsedCommand, _pipeline_stage: bool) -> CommandResult:
        return CommandResult(output=f"{command.args_text}\n")

    def _type(self, command: ParsedCommand, _pipeline_stage: bool) -> CommandResult:
        name = command.args_text
        if not name:
            return CommandResult()
        resolution = self._resolver.resolve(name)
        if resolution.builtin:
            return CommandResult(output=f"{name} is a shell builtin\n")
        if resolution.path is not None:
            return CommandResult(output=f"{name} is {resolution.path}\n")
        return CommandResult(error=f"{name}: not found\n")

    def _pwd(self, _command: ParsedCommand, _pipeline_stage: bool) -> CommandResult:
        return CommandResult(output=f"{os.getcwd()}\n")

    def _cd(self, command: ParsedCommand, pipeline_stage: bool) -> CommandResult:
        if pipeline_stage:
            return CommandResult()

        target = command.args_text or "~"
        if target == "~":
            directory = self._resolver.home or os.getcwd()
        else:
            directory = self._resolver.expand_user(target)
        if not os.path.isdir(directory):
            return CommandResult(error=f"cd: {target}: No such file or directory\n")
        try:
            os.chdir(directory)
        except OSError as exc:
            return CommandResult(error=f"cd: {target}: {exc.strerror}\n")
        logger.debug("changed directory to {}", os.getcwd())
        return CommandResult()

    def _history(self, command: ParsedCommand, pipeline_stage: bool) -> CommandResult:
        if pipeline_stage:
            return CommandResult()

        args = command.args
        invalid = CommandResult(error=f"history: {command.args_text}: is not a valid argument\n")
        if not args:
            return CommandResult(output=self._history.render())

        if args[0] in HISTORY_FILE_FLAGS:
            if len(args) != 2:
                return invalid
            try:
                self._run_history_file_op(args[0], Path(args[1]))
            except HistoryFileNotFoundError:
                return invalid
            except HistoryDecodeError as exc:
                return CommandResult(error=f"history: {args[1]}: {exc.reason}\n")
            except OSError as exc:
                return CommandResult(error=f"history: {args[1]}: {exc.strerror or exc}\n")
            except ValueError as exc:
                return CommandResult(error=f"history: {args[1]}: {exc}\n")
            return CommandResult()

        if len(args) == 1:
            try:
                limit = int(args[0])
            except ValueError:
                return invalid
            return CommandResult(output=self._history.render(limit))
        return invalid

    def _run_history_file_op(self, flag: str, path: Path) -> None:
        if flag == "-r":
            self._history.read_from(path)
        elif flag == "-w":
            self._history.write_to(path)
        else:
            self._history.append_to(path)


_HANDLERS: dict[str, BuiltinHandler] = {
    Builtin.EXIT: BuiltinDispatcher._exit,
    Builtin.ECHO: BuiltinDispatcher._echo,
    Builtin.TYPE: BuiltinDispatcher._type,
    Builtin.PWD: BuiltinDispatcher._pwd,
    Builtin.CD: BuiltinDispatcher._cd,
    Builtin.HISTORY: BuiltinDispatcher._history,
}
