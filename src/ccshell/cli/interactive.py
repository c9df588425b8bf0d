"""Interactive read-execute loop."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Iterable

from loguru import logger
from prompt_toolkit.history import History

from ccshell.cli.render import Renderer
from ccshell.core.shell import Shell
from ccshell.history import HistoryStore


class StoreHistory(History):
    """Expose the shell history store to prompt_toolkit's line recall."""

    def __init__(self, store: HistoryStore) -> None:
        super().__init__()
        self._store = store

    async def load(self) -> AsyncGenerator[str, None]:
        # Re-read on every prompt so entries added by `history -r` are recalled.
        self._loaded_strings = list(self.load_history_strings())
        self._loaded = True
        for item in self._loaded_strings:
            yield item

    def load_history_strings(self) -> Iterable[str]:
        return reversed(self._store.entries)

    def store_string(self, string: str) -> None:
        # The loop records every accepted line itself, duplicates included.
        return None


class InteractiveCli:
    """Prompt for lines, run them, and render what is left to show."""

    def __init__(self, shell: Shell, renderer: Renderer) -> None:
        self._shell = shell
        self._renderer = renderer
        self._last_exit_code = 0

    def run(self) -> int:
        while True:
            try:
                line = self._renderer.get_user_input()
            except KeyboardInterrupt:
                continue
            except EOFError:
                self._shell.close()
                return self._last_exit_code

            if not line.strip():
                continue
            self._shell.history.append(line)

            try:
                result = self._shell.run_line(line)
            except Exception as exc:
                logger.exception("unexpected error while running {!r}", line)
                self._renderer.error(f"ccshell: {exc!s}\n")
                self._last_exit_code = 1
                continue

            self._renderer.output(result.output)
            self._renderer.error(result.error)
            self._last_exit_code = result.exit_code
            if result.exit_requested:
                return result.exit_code
