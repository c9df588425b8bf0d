"""Core command execution engine for ccshell."""

from .pipeline import PipelineExecutor
from .shell import Shell
from .types import CommandResult, LineResult, ParsedCommand

__all__ = ["CommandResult", "LineResult", "ParsedCommand", "PipelineExecutor", "Shell"]
