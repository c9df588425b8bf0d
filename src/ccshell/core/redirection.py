"""Redirection targets for stage output and error streams."""

from __future__ import annotations

from dataclasses import replace
from typing import BinaryIO

from ccshell.core.types import CommandResult, ParsedCommand
from ccshell.errors import RedirectionError

ENCODING = "utf-8"


def open_redirect(path: str, append: bool) -> BinaryIO:
    """Open a redirection target, truncating unless ``append`` is set."""

    try:
        return open(path, "ab" if append else "wb")  # noqa: SIM115
    except OSError as exc:
        raise RedirectionError(path, exc.strerror or str(exc)) from exc
    except ValueError as exc:
        raise RedirectionError(path, str(exc)) from exc


def write_redirect(path: str, text: str | None, append: bool) -> None:
    with open_redirect(path, append) as handle:
        if text:
            handle.write(text.encode(ENCODING))


def settle_redirections(command: ParsedCommand, result: CommandResult) -> CommandResult:
    """Write in-process result text to the command's targets.

    The returned result keeps only the text that still belongs on the
    interpreter's own stdout and stderr.
    """

    try:
        if command.output_file is not None:
            write_redirect(command.output_file, result.output, command.append_output)
            result = replace(result, output=None)
        if command.error_file is not None:
            write_redirect(command.error_file, result.error, command.append_error)
            result = replace(result, error=None)
    except RedirectionError as exc:
        return CommandResult(exit_code=1, output=result.output, error=f"{exc}\n")
    return result
