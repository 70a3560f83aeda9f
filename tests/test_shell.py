import glob
import os
import signal

import pytest

from minishell.env import Environment
from minishell.shell import main, minishell_loop, minishell_step
from minishell.state import ShellState


@pytest.fixture(autouse=True)
def restore_signals():
    saved = {sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGQUIT)}
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


@pytest.fixture
def state():
    return ShellState(env=Environment.from_envp([f"PATH={os.environ.get('PATH', '/bin:/usr/bin')}", "USER=alice"]))


def reader(lines, prompts=None):
    it = iter(lines)

    def read_line(prompt):
        if prompts is not None:
            prompts.append(prompt)
        return next(it, None)

    return read_line


def test_step_runs_builtin(state):
    assert minishell_step(state, "export FOO=bar") == 0
    assert state.env.get("FOO") == "bar"


def test_step_expands_before_running(state):
    assert minishell_step(state, "export NAME=$USER") == 0
    assert state.env.get("NAME") == "alice"


def test_blank_line_keeps_status(state):
    state.last_status = 5
    assert minishell_step(state, "  \t ") == 5
    assert state.last_status == 5


def test_newline_only_is_status_two(state):
    assert minishell_step(state, "\n") == 2


def test_unclosed_quote(state, capsys):
    assert minishell_step(state, "echo 'oops") == 2
    assert state.last_status == 2
    assert capsys.readouterr().err == "minishell: error: unclosed quotes\n"


def test_syntax_error(state, capsys):
    assert minishell_step(state, "| x") == 2
    assert capsys.readouterr().err == "minishell: syntax error\n"


def test_exit_sets_exit_request(state):
    assert minishell_step(state, "exit 3") == 3
    assert state.should_exit
    assert state.exit_code == 3


def test_heredoc_is_fed_and_removed(state, capfd, monkeypatch):
    lines = iter(["hello", "EOF"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))
    assert minishell_step(state, "cat << EOF") == 0
    assert capfd.readouterr().out == "hello\n"
    assert glob.glob(f"/tmp/minishell_heredoc_{os.getpid()}_*") == []


def test_loop_until_exit(state, capsys):
    prompts = []
    code = minishell_loop(state, reader(["export A=1", "exit 5", "export B=1"], prompts))
    assert code == 5
    assert state.env.get("A") == "1"
    assert state.env.get("B") is None
    assert prompts == ["minishell> ", "minishell> "]
    assert capsys.readouterr().out == "exit\n"


def test_loop_end_of_input_uses_last_status(state, capsys):
    code = minishell_loop(state, reader(["unset 1bad"]))
    assert code == 1
    assert state.should_exit
    assert capsys.readouterr().out.endswith("exit\n")


def test_main_on_end_of_input(monkeypatch, capsys):
    def no_input(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", no_input)
    assert main() == 0
    assert capsys.readouterr().out == "exit\n"