"""Command resolution against builtins and the search path."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator

from loguru import logger

from ccshell.core.types import Builtin, Resolution

BUILTIN_NAMES = frozenset(str(builtin) for builtin in Builtin)


def is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


class CommandResolver:
    """Map command names to builtins or executables on the search path."""

    def __init__(
        self,
        search_path: str,
        home: str | None = None,
        builtins: Iterable[str] = BUILTIN_NAMES,
    ) -> None:
        self._search_path = search_path
        self._home = home
        self._builtins = frozenset(builtins)

    @property
    def home(self) -> str | None:
        return self._home

    def is_builtin(self, name: str) -> bool:
        return name in self._builtins

    def builtin_names(self) -> list[str]:
        return sorted(self._builtins)

    def directories(self) -> list[str]:
        return [entry for entry in self._search_path.split(os.pathsep) if entry]

    def expand_user(self, name: str) -> str:
        """Expand a leading ``~`` against the configured home directory."""

        if self._home is None:
            return name
        if name == "~":
            return self._home
        if name.startswith("~/"):
            return os.path.join(self._home, name[2:])
        return name

    def resolve(self, name: str) -> Resolution:
        if self.is_builtin(name):
            return Resolution(name=name, builtin=True)

        candidate = self.expand_user(name)
        if not candidate:
            return Resolution(name=name)
        if os.sep in candidate or os.path.isabs(candidate):
            path = candidate if is_executable(candidate) else None
            return Resolution(name=name, path=path)

        for directory in self.directories():
            full_path = os.path.join(directory, candidate)
            if is_executable(full_path):
                logger.debug("resolved {} -> {}", name, full_path)
                return Resolution(name=name, path=full_path)

        logger.debug("unresolved command {}", name)
        return Resolution(name=name)

    def which(self, name: str) -> str | None:
        return self.resolve(name).path

    def executables(self, prefix: str = "") -> Iterator[str]:
        """Yield executable names in the search path starting with ``prefix``."""

        for directory in self.directories():
            try:
                with os.scandir(directory) as entries:
                    names = [entry.name for entry in entries if entry.name.startswith(prefix)]
            except OSError:
                # Missing or unreadable directories do not fail the search.
                continue
            for name in names:
                if is_executable(os.path.join(directory, name)):
                    yield name
