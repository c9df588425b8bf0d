"""Command history store with line-oriented file persistence."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from loguru import logger

from ccshell.errors import HistoryDecodeError, HistoryError, HistoryFileNotFoundError

LIST_INDENT = "    "


class HistoryStore:
    """Ordered, append-only log of submitted command lines.

    ``append_offset`` marks how much of the store the last ``append_to``
    call has flushed; ``None`` means nothing has been appended yet.
    """

    def __init__(self, entries: Iterable[str] = ()) -> None:
        self._entries: list[str] = list(entries)
        self.append_offset: int | None = None

    @classmethod
    def from_file(cls, path: Path | None) -> HistoryStore:
        """Create a store seeded from ``path`` when it exists."""

        store = cls()
        if path is None:
            return store
        try:
            store.read_from(path)
        except HistoryFileNotFoundError:
            logger.debug("no history file at {}", path)
        except (OSError, HistoryError) as exc:
            logger.warning("failed to load history from {}: {}", path, exc)
        return store

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def append(self, line: str) -> None:
        self._entries.append(line)

    def extend(self, lines: Iterable[str]) -> None:
        self._entries.extend(lines)

    def render(self, limit: int | None = None) -> str:
        """Render entries 1-indexed, optionally only the last ``limit`` ones."""

        start = 0 if limit is None else max(0, len(self._entries) - limit)
        return "".join(
            f"{LIST_INDENT}{index}  {line}\n"
            for index, line in enumerate(self._entries[start:], start=start + 1)
        )

    def read_from(self, path: Path) -> int:
        if not path.is_file():
            raise HistoryFileNotFoundError(str(path))
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise HistoryDecodeError(str(path), "not a valid text file") from exc
        lines = [line for line in text.splitlines() if line.strip()]
        self.extend(lines)
        logger.debug("read {} history entries from {}", len(lines), path)
        return len(lines)

    def write_to(self, path: Path) -> None:
        path.write_text(_as_lines(self._entries), encoding="utf-8")
        logger.debug("wrote {} history entries to {}", len(self._entries), path)

    def append_to(self, path: Path) -> int:
        """Append entries added since the previous call and advance the offset."""

        pending = self._entries if self.append_offset is None else self._entries[self.append_offset :]
        self.append_offset = len(self._entries)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(_as_lines(pending))
        logger.debug("appended {} history entries to {}", len(pending), path)
        return len(pending)


def _as_lines(entries: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in entries)
