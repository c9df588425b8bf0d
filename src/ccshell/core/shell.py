"""Line routing from raw input to executed pipelines."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from ccshell.config import Settings
from ccshell.core.builtins import BuiltinDispatcher
from ccshell.core.pipeline import PipelineExecutor
from ccshell.core.resolver import CommandResolver
from ccshell.core.segmenter import parse_pipeline
from ccshell.core.types import Builtin, LineResult
from ccshell.history import HistoryStore


class Shell:
    """Command interpreter core shared by the interactive loop and one-shot runs."""

    def __init__(
        self,
        resolver: CommandResolver,
        history: HistoryStore,
        histfile: Path | None = None,
    ) -> None:
        self.resolver = resolver
        self.history = history
        self.histfile = histfile
        self.builtins = BuiltinDispatcher(resolver, history)
        self.executor = PipelineExecutor(resolver, self.builtins)

    @classmethod
    def from_settings(cls, settings: Settings) -> Shell:
        resolver = CommandResolver(settings.path, home=settings.home)
        history = HistoryStore.from_file(settings.histfile)
        return cls(resolver, history, histfile=settings.histfile)

    def run_line(self, line: str) -> LineResult:
        if not line.strip():
            return LineResult()

        pipeline = parse_pipeline(line)
        if not pipeline:
            return LineResult()

        # Keep earlier output ahead of anything child processes write.
        sys.stdout.flush()
        result = self.executor.execute(pipeline)

        exit_requested = len(pipeline) == 1 and pipeline[0].command == Builtin.EXIT
        if exit_requested:
            self.close()
        return LineResult(
            exit_code=result.exit_code,
            output=result.output,
            error=result.error,
            exit_requested=exit_requested,
        )

    def close(self) -> None:
        """Persist the whole history store to the history file, if configured."""

        if self.histfile is None:
            return
        try:
            self.history.write_to(self.histfile)
        except OSError as exc:
            logger.warning("failed to save history to {}: {}", self.histfile, exc)
