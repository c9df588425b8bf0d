"""Command-line interface for ccshell."""

from .app import app
from .interactive import InteractiveCli
from .render import Renderer

__all__ = ["InteractiveCli", "Renderer", "app"]
