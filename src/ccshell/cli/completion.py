"""Command-name completion for the interactive prompt."""

from __future__ import annotations

import os
from collections.abc import Iterable

from prompt_toolkit.application.current import get_app_or_none
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from ccshell.core.resolver import CommandResolver


def suggest(text: str, resolver: CommandResolver) -> list[str]:
    """Return completion candidates for a partially typed command name.

    Candidates end with a space. Several candidates collapse to their
    longest common prefix when that extends what was typed.
    """

    candidates = {f"{name} " for name in resolver.builtin_names() if name.startswith(text)}
    candidates.update(f"{name} " for name in resolver.executables(text))
    if len(candidates) <= 1:
        return list(candidates)

    ordered = sorted(candidates)
    prefix = os.path.commonprefix(ordered)
    if len(prefix) > len(text):
        return [prefix]
    return ordered


class CommandCompleter(Completer):
    """Complete the first word of the line against builtins and the search path."""

    def __init__(self, resolver: CommandResolver) -> None:
        self._resolver = resolver

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        word = document.text_before_cursor.lstrip()
        if not word or any(char.isspace() for char in word):
            return

        candidates = suggest(word, self._resolver)
        if not candidates:
            if complete_event.completion_requested:
                _ring_bell()
            return
        for candidate in candidates:
            yield Completion(candidate, start_position=-len(word), display=candidate.rstrip())


def _ring_bell() -> None:
    app = get_app_or_none()
    if app is not None:
        app.output.bell()
