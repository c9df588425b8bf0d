from __future__ import annotations

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest

from ccshell.core.resolver import CommandResolver
from ccshell.core.shell import Shell
from ccshell.history import HistoryStore

MakeExecutable = Callable[..., Path]


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    # cd changes the process directory; monkeypatch restores it afterwards.
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def make_executable(bin_dir: Path) -> MakeExecutable:
    def _make(name: str, body: str = "exit 0\n", *, directory: Path | None = None, mode: int | None = None) -> Path:
        target = (directory or bin_dir) / name
        target.write_text(f"#!/bin/sh\n{body}", encoding="utf-8")
        target.chmod(mode if mode is not None else target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return target

    return _make


@pytest.fixture
def system_path() -> str:
    return os.environ.get("PATH", os.defpath)


@pytest.fixture
def resolver(system_path: str, tmp_path: Path) -> CommandResolver:
    return CommandResolver(system_path, home=str(tmp_path))


@pytest.fixture
def shell(resolver: CommandResolver) -> Shell:
    return Shell(resolver, HistoryStore())
