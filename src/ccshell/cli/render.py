"""CLI renderer for ccshell."""

from __future__ import annotations

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer
from prompt_toolkit.history import History
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console


class Renderer:
    """Terminal renderer: raw command text through Rich, prompts through prompt_toolkit."""

    def __init__(
        self,
        prompt: str = "$ ",
        *,
        completer: Completer | None = None,
        history: History | None = None,
    ) -> None:
        self.console: Console = Console(highlight=False)
        self.error_console: Console = Console(stderr=True, highlight=False)
        self._prompt = prompt
        self._completer = completer
        self._history = history
        self._prompt_session: PromptSession[str] | None = None

    def output(self, text: str | None) -> None:
        """Render command output exactly as produced."""
        if text:
            self.console.out(text, end="")

    def error(self, text: str | None) -> None:
        """Render command error text exactly as produced."""
        if text:
            self.error_console.out(text, end="")

    def get_user_input(self) -> str:
        """Prompt user for one line."""
        with patch_stdout(raw=True):
            return self._session().prompt(self._prompt)

    def _session(self) -> PromptSession[str]:
        if self._prompt_session is None:
            self._prompt_session = PromptSession(
                history=self._history,
                completer=self._completer,
                complete_while_typing=False,
            )
        return self._prompt_session
