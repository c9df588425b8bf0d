"""CLI main module for ccshell."""

from __future__ import annotations

import typer

from ccshell.cli.completion import CommandCompleter
from ccshell.cli.interactive import InteractiveCli, StoreHistory
from ccshell.cli.render import Renderer
from ccshell.config import Settings, load_settings
from ccshell.core.shell import Shell
from ccshell.logging_utils import LogProfile, configure_logging

app = typer.Typer(
    name="ccshell",
    help="A small interactive command interpreter.",
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_callback(ctx: typer.Context) -> None:
    if ctx.invoked_subcommand is None:
        interactive()


def _build_shell(profile: LogProfile) -> tuple[Settings, Shell]:
    settings = load_settings()
    configure_logging(settings.log_level, profile=profile)
    return settings, Shell.from_settings(settings)


@app.command()
def interactive() -> None:
    """Start the interactive prompt."""
    settings, shell = _build_shell("interactive")
    renderer = Renderer(
        settings.prompt,
        completer=CommandCompleter(shell.resolver),
        history=StoreHistory(shell.history),
    )
    exit_code = InteractiveCli(shell, renderer).run()
    raise typer.Exit(exit_code)


@app.command()
def run(line: str) -> None:
    """Run a single command line and exit with its status."""
    settings, shell = _build_shell("default")
    renderer = Renderer(settings.prompt)
    result = shell.run_line(line)
    renderer.output(result.output)
    renderer.error(result.error)
    raise typer.Exit(result.exit_code)
