"""Command parsing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from ccshell.core.types import ParsedCommand

DOUBLE_QUOTE_ESCAPABLE = ('"', "\\")


class RedirectState(Enum):
    NONE = auto()
    REDIRECT_OUTPUT = auto()
    APPEND_OUTPUT = auto()
    REDIRECT_ERROR = auto()
    APPEND_ERROR = auto()


REDIRECT_OPERATORS: dict[str, RedirectState] = {
    ">": RedirectState.REDIRECT_OUTPUT,
    "1>": RedirectState.REDIRECT_OUTPUT,
    ">>": RedirectState.APPEND_OUTPUT,
    "1>>": RedirectState.APPEND_OUTPUT,
    "2>": RedirectState.REDIRECT_ERROR,
    "2>>": RedirectState.APPEND_ERROR,
}


@dataclass
class QuoteState:
    """Quote and escape state shared by the tokenizer and the pipeline segmenter."""

    single: bool = False
    double: bool = False
    escaped: bool = False

    @property
    def quoted(self) -> bool:
        return self.single or self.double

    def consume(self, char: str) -> bool:
        """Advance over one character; return True when it is quoting syntax rather than content."""

        if self.escaped:
            self.escaped = False
            return False
        if char == "\\" and not self.single:
            self.escaped = True
            return True
        if char == '"' and not self.single:
            self.double = not self.double
            return True
        if char == "'" and not self.double:
            self.single = not self.single
            return True
        return False


def tokenize(text: str) -> list[str]:
    """Split command text into words using shell quoting rules.

    An unterminated quote is closed implicitly at end of input.
    """

    tokens: list[str] = []
    buffer: list[str] = []
    state = QuoteState()

    for char in text:
        was_escaped = state.escaped
        if state.consume(char):
            continue
        if was_escaped and state.double and char not in DOUBLE_QUOTE_ESCAPABLE:
            # Inside double quotes only \" and \\ are escapes.
            buffer.append("\\")
        if state.quoted or was_escaped or not char.isspace():
            buffer.append(char)
            continue
        if buffer:
            tokens.append("".join(buffer))
            buffer.clear()

    if buffer:
        tokens.append("".join(buffer))
    return tokens


def extract_redirections(command: str, tokens: list[str]) -> ParsedCommand:
    """Split redirection operators and their targets off the argument tokens."""

    args: list[str] = []
    output_file: str | None = None
    error_file: str | None = None
    append_output = False
    append_error = False
    state = RedirectState.NONE

    for token in tokens:
        operator = REDIRECT_OPERATORS.get(token)
        if operator is not None:
            state = operator
            continue

        if state in (RedirectState.REDIRECT_OUTPUT, RedirectState.APPEND_OUTPUT):
            output_file = token
            append_output = state is RedirectState.APPEND_OUTPUT
        elif state in (RedirectState.REDIRECT_ERROR, RedirectState.APPEND_ERROR):
            error_file = token
            append_error = state is RedirectState.APPEND_ERROR
        else:
            args.append(token)
        state = RedirectState.NONE

    return ParsedCommand(
        command=command,
        args=args,
        output_file=output_file,
        error_file=error_file,
        append_output=append_output,
        append_error=append_error,
    )


def parse_command(text: str) -> ParsedCommand:
    """Parse one pipeline segment into a command with redirections."""

    tokens = tokenize(text)
    if not tokens:
        raise ValueError("cannot parse a blank command")
    return extract_redirections(tokens[0], tokens[1:])
