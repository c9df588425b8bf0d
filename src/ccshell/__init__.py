"""ccshell - a small interactive command interpreter."""

from .core import CommandResult, LineResult, ParsedCommand, PipelineExecutor, Shell

__version__ = "0.1.0"

__all__ = ["CommandResult", "LineResult", "ParsedCommand", "PipelineExecutor", "Shell"]
