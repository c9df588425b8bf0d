"""Execution of single commands and multi-stage pipelines."""

from __future__ import annotations

import contextlib
import io
import subprocess
import threading
from contextlib import ExitStack
from functools import partial
from typing import IO

from loguru import logger

from ccshell.core.builtins import BuiltinDispatcher
from ccshell.core.redirection import ENCODING, open_redirect, settle_redirections
from ccshell.core.resolver import CommandResolver
from ccshell.core.types import CommandResult, ParsedCommand, Pipeline
from ccshell.errors import ProcessStartError, RedirectionError, ShellError

EXIT_NOT_FOUND = 127
EXIT_CANNOT_EXECUTE = 126
EXIT_REDIRECTION_FAILED = 1
SIGNAL_EXIT_BASE = 128
CHUNK_SIZE = 65536

StreamTarget = int | IO[bytes] | None


class StreamPump:
    """Copy bytes from one stage's output into the next stage's stdin.

    The sink is closed once the source is drained so the receiving process
    sees end-of-input.
    """

    def __init__(self, source: IO[bytes], sink: IO[bytes], name: str) -> None:
        self._source = source
        self._sink = sink
        self._thread = threading.Thread(target=self._run, name=f"pump-{name}", daemon=True)

    def start(self) -> StreamPump:
        self._thread.start()
        return self

    def join(self) -> None:
        self._thread.join()

    def _run(self) -> None:
        try:
            # read1 returns whatever is available instead of waiting for a full chunk.
            read = getattr(self._source, "read1", self._source.read)
            for chunk in iter(partial(read, CHUNK_SIZE), b""):
                self._sink.write(chunk)
                self._sink.flush()
        except OSError as exc:
            # The consumer exited before reading everything, e.g. `head`.
            logger.debug("{} stopped early: {}", self._thread.name, exc)
        finally:
            with contextlib.suppress(OSError):
                self._sink.close()
            with contextlib.suppress(OSError):
                self._source.close()
        logger.debug("{} finished", self._thread.name)


class StreamCollector:
    """Read a stream to its end on a background thread."""

    def __init__(self, stream: IO[bytes], name: str) -> None:
        self._stream = stream
        self._chunks: list[bytes] = []
        self._thread = threading.Thread(target=self._run, name=f"collect-{name}", daemon=True)

    def start(self) -> StreamCollector:
        self._thread.start()
        return self

    def text(self) -> str:
        self._thread.join()
        return b"".join(self._chunks).decode(ENCODING, errors="replace")

    def _run(self) -> None:
        with self._stream:
            for chunk in iter(partial(self._stream.read, CHUNK_SIZE), b""):
                self._chunks.append(chunk)


def exit_status(returncode: int) -> int:
    return returncode if returncode >= 0 else SIGNAL_EXIT_BASE - returncode


def not_found(command: ParsedCommand) -> CommandResult:
    return CommandResult(exit_code=EXIT_NOT_FOUND, error=f"{command.command}: command not found\n")


class PipelineExecutor:
    """Run pipeline stages, builtin or external, over shared streams."""

    def __init__(self, resolver: CommandResolver, builtins: BuiltinDispatcher) -> None:
        self._resolver = resolver
        self._builtins = builtins

    def execute(self, pipeline: Pipeline) -> CommandResult:
        if not pipeline:
            return CommandResult()
        if len(pipeline) == 1:
            return self.run_command(pipeline[0])
        return self.run_pipeline(pipeline)

    def run_command(self, command: ParsedCommand) -> CommandResult:
        """Run one command attached to the interpreter's own streams."""

        if self._builtins.is_builtin(command.command):
            return settle_redirections(command, self._builtins.dispatch(command))

        resolution = self._resolver.resolve(command.command)
        if resolution.path is None:
            return settle_redirections(command, not_found(command))

        with ExitStack() as stack:
            try:
                stdout = self._redirect_target(stack, command.output_file, command.append_output, None)
                stderr = self._redirect_target(stack, command.error_file, command.append_error, None)
            except RedirectionError as exc:
                return CommandResult(exit_code=EXIT_REDIRECTION_FAILED, error=f"{exc}\n")
            try:
                process = self._spawn(command, resolution.path, stdin=None, stdout=stdout, stderr=stderr)
            except ProcessStartError as exc:
                return settle_redirections(
                    command, CommandResult(exit_code=EXIT_CANNOT_EXECUTE, error=f"{exc}\n")
                )
            return CommandResult(exit_code=exit_status(process.wait()))

    def run_pipeline(self, pipeline: Pipeline) -> CommandResult:
        """Run every stage concurrently and report the terminal stage's outcome.

        Intermediate output only ever feeds the next stage. A stage with no
        upstream data gets an empty stdin.
        """

        processes: list[subprocess.Popen[bytes]] = []
        pumps: list[StreamPump] = []
        notices: list[str] = []
        upstream: IO[bytes] | None = None
        terminal: subprocess.Popen[bytes] | None = None
        collector: StreamCollector | None = None
        result = CommandResult()
        last = len(pipeline) - 1

        with ExitStack() as stack:
            try:
                for index, command in enumerate(pipeline):
                    is_last = index == last
                    source, upstream = upstream, None

                    if self._builtins.is_builtin(command.command):
                        _discard(source)
                        outcome = self._builtins.dispatch(command, pipeline_stage=True)
                        if is_last:
                            result = settle_redirections(command, outcome)
                            continue
                        outcome = settle_redirections(command, outcome)
                        if outcome.error:
                            notices.append(outcome.error)
                        if outcome.output:
                            upstream = io.BytesIO(outcome.output.encode(ENCODING))
                        continue

                    resolution = self._resolver.resolve(command.command)
                    if resolution.path is None:
                        _discard(source)
                        if is_last:
                            result = settle_redirections(command, not_found(command))
                        else:
                            # Intermediate misses stop the data flow without aborting siblings.
                            logger.debug("pipeline stage {} not found", command.command)
                        continue

                    stdin: StreamTarget = None
                    if index > 0:
                        stdin = subprocess.PIPE if source is not None else subprocess.DEVNULL
                    try:
                        stdout = self._redirect_target(
                            stack, command.output_file, command.append_output, None if is_last else subprocess.PIPE
                        )
                        stderr = self._redirect_target(
                            stack, command.error_file, command.append_error, subprocess.PIPE if is_last else None
                        )
                        process = self._spawn(command, resolution.path, stdin=stdin, stdout=stdout, stderr=stderr)
                    except ShellError as exc:
                        _discard(source)
                        failure = CommandResult(
                            exit_code=EXIT_REDIRECTION_FAILED
                            if isinstance(exc, RedirectionError)
                            else EXIT_CANNOT_EXECUTE,
                            error=f"{exc}\n",
                        )
                        if is_last:
                            result = failure
                        else:
                            notices.append(failure.error or "")
                        continue

                    processes.append(process)
                    if source is not None and process.stdin is not None:
                        pumps.append(StreamPump(source, process.stdin, f"{index}-{command.command}").start())
                    if is_last:
                        terminal = process
                        if process.stderr is not None:
                            collector = StreamCollector(process.stderr, command.command).start()
                    elif process.stdout is not None:
                        upstream = process.stdout
            finally:
                _discard(upstream)
                for process in processes:
                    process.wait()
                for pump in pumps:
                    pump.join()

        if terminal is not None:
            error = collector.text() if collector is not None else ""
            result = CommandResult(exit_code=exit_status(terminal.returncode), error=error or None)

        if notices:
            result = CommandResult(
                exit_code=result.exit_code,
                output=result.output,
                error="".join(notices) + (result.error or ""),
            )
        return result

    @staticmethod
    def _redirect_target(
        stack: ExitStack, path: str | None, append: bool, default: StreamTarget
    ) -> StreamTarget:
        if path is None:
            return default
        return stack.enter_context(open_redirect(path, append))

    @staticmethod
    def _spawn(
        command: ParsedCommand,
        executable: str,
        *,
        stdin: StreamTarget,
        stdout: StreamTarget,
        stderr: StreamTarget,
    ) -> subprocess.Popen[bytes]:
        try:
            # Commands are resolved to a concrete executable; no shell is involved.
            process = subprocess.Popen(  # noqa: S603
                [command.command, *command.args],
                executable=executable,
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as exc:
            logger.warning("failed to start {}: {}", executable, exc)
            raise ProcessStartError(command.command, exc.strerror or str(exc)) from exc
        except ValueError as exc:
            # Arguments with embedded NUL bytes cannot be passed to exec.
            logger.warning("failed to start {}: {}", executable, exc)
            raise ProcessStartError(command.command, str(exc)) from exc
        logger.debug("started {} pid={}", executable, process.pid)
        return process


def _discard(stream: IO[bytes] | None) -> None:
    if stream is not None:
        with contextlib.suppress(OSError):
            stream.close()
