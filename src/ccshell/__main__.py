"""ccshell CLI bootstrap."""

from __future__ import annotations

from ccshell.cli.app import app

if __name__ == "__main__":
    app()
