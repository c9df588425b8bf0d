import os
from pathlib import Path

import pytest

from ccshell.core.builtins import BuiltinDispatcher
from ccshell.core.commands import parse_command
from ccshell.core.resolver import CommandResolver
from ccshell.history import HistoryStore


@pytest.fixture
def history() -> HistoryStore:
    return HistoryStore()


@pytest.fixture
def dispatcher(bin_dir: Path, tmp_path: Path, history: HistoryStore) -> BuiltinDispatcher:
    return BuiltinDispatcher(CommandResolver(str(bin_dir), home=str(tmp_path)), history)


def run(dispatcher: BuiltinDispatcher, line: str, *, pipeline_stage: bool = False):
    return dispatcher.dispatch(parse_command(line), pipeline_stage=pipeline_stage)


def test_echo_joins_arguments_with_newline(dispatcher: BuiltinDispatcher) -> None:
    result = run(dispatcher, "echo  hello   'big  world'")
    assert result.output == "hello big  world\n"
    assert result.exit_code == 0
    assert run(dispatcher, "echo").output == "\n"


@pytest.mark.parametrize(
    ("line", "code"),
    [
        ("exit", 0),
        ("exit 3", 3),
        ("exit abc", 0),
        ("exit -1", -1),
        ("exit +4", 4),
        ("exit 1_000", 0),
        ("exit 2147483647", 2147483647),
        ("exit 2147483648", 0),
        ("exit 99999999999999999999999", 0),
    ],
)
def test_exit_code_parsing(dispatcher: BuiltinDispatcher, line: str, code: int) -> None:
    assert run(dispatcher, line).exit_code == code


def test_type_reports_builtins_even_when_shadowed(dispatcher: BuiltinDispatcher, make_executable) -> None:
    make_executable("cd")
    assert run(dispatcher, "type cd").output == "cd is a shell builtin\n"
    assert run(dispatcher, "type type").output == "type is a shell builtin\n"


def test_type_reports_path_or_not_found(dispatcher: BuiltinDispatcher, bin_dir: Path, make_executable) -> None:
    make_executable("mytool")
    assert run(dispatcher, "type mytool").output == f"mytool is {bin_dir / 'mytool'}\n"
    missing = run(dispatcher, "type nothing_here")
    assert missing.output is None
    assert missing.error == "nothing_here: not found\n"
    assert missing.exit_code == 0


def test_pwd_prints_working_directory(dispatcher: BuiltinDispatcher) -> None:
    assert run(dispatcher, "pwd").output == f"{os.getcwd()}\n"


def test_cd_changes_directory(dispatcher: BuiltinDispatcher, tmp_path: Path) -> None:
    target = tmp_path / "sub"
    target.mkdir()
    assert run(dispatcher, f"cd {target}").error is None
    assert Path.cwd() == target
    run(dispatcher, "cd ..")
    assert Path.cwd() == tmp_path


def test_cd_tilde_goes_home(dispatcher: BuiltinDispatcher, tmp_path: Path) -> None:
    (tmp_path / "sub").mkdir()
    os.chdir(tmp_path / "sub")
    run(dispatcher, "cd ~")
    assert Path.cwd() == tmp_path


def test_cd_tilde_without_home_stays_put(history: HistoryStore, tmp_path: Path) -> None:
    dispatcher = BuiltinDispatcher(CommandResolver(""), history)
    result = run(dispatcher, "cd ~")
    assert result.error is None
    assert Path.cwd() == tmp_path


def test_cd_missing_directory_reports_error(dispatcher: BuiltinDispatcher, tmp_path: Path) -> None:
    result = run(dispatcher, "cd /does/not/exist")
    assert result.error == "cd: /does/not/exist: No such file or directory\n"
    assert result.exit_code == 0
    assert Path.cwd() == tmp_path


def test_cd_is_a_noop_as_pipeline_stage(dispatcher: BuiltinDispatcher, tmp_path: Path) -> None:
    result = run(dispatcher, "cd /", pipeline_stage=True)
    assert result.error is None
    assert Path.cwd() == tmp_path


def test_history_lists_entries(dispatcher: BuiltinDispatcher, history: HistoryStore) -> None:
    history.extend(["echo a", "pwd", "history 2"])
    assert run(dispatcher, "history").output == "    1  echo a\n    2  pwd\n    3  history 2\n"
    assert run(dispatcher, "history 2").output == "    2  pwd\n    3  history 2\n"


@pytest.mark.parametrize("line", ["history abc", "history 1 2", "history -w", "history -a", "history -r a b"])
def test_history_rejects_malformed_arguments(dispatcher: BuiltinDispatcher, line: str) -> None:
    args = line.split(" ", 1)[1]
    result = run(dispatcher, line)
    assert result.error == f"history: {args}: is not a valid argument\n"
    assert result.output is None


def test_history_read_missing_file_is_an_error(dispatcher: BuiltinDispatcher) -> None:
    result = run(dispatcher, "history -r missing.txt")
    assert result.error == "history: -r missing.txt: is not a valid argument\n"


def test_history_file_operations(dispatcher: BuiltinDispatcher, history: HistoryStore, tmp_path: Path) -> None:
    history.extend(["echo one", "history -a log.txt"])
    run(dispatcher, "history -a log.txt")
    history.append("echo two")
    run(dispatcher, "history -a log.txt")
    assert (tmp_path / "log.txt").read_text(encoding="utf-8") == "echo one\nhistory -a log.txt\necho two\n"

    run(dispatcher, "history -w full.txt")
    assert (tmp_path / "full.txt").read_text(encoding="utf-8") == "echo one\nhistory -a log.txt\necho two\n"

    (tmp_path / "more.txt").write_text("ls\npwd\n", encoding="utf-8")
    run(dispatcher, "history -r more.txt")
    assert history.entries[-2:] == ["ls", "pwd"]


def test_history_is_a_noop_as_pipeline_stage(dispatcher: BuiltinDispatcher, history: HistoryStore, tmp_path: Path) -> None:
    history.append("echo a")
    assert run(dispatcher, "history", pipeline_stage=True).output is None
    run(dispatcher, "history -w out.txt", pipeline_stage=True)
    assert not (tmp_path / "out.txt").exists()


def test_history_read_undecodable_file_is_an_error(
    dispatcher: BuiltinDispatcher, history: HistoryStore, tmp_path: Path
) -> None:
    (tmp_path / "bad.txt").write_bytes(b"ok\n\xff\xfe\n")
    result = run(dispatcher, "history -r bad.txt")
    assert result.error == "history: bad.txt: not a valid text file\n"
    assert result.exit_code == 0
    assert history.entries == []
