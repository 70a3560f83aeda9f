"""The interactive read-evaluate loop and its entry point."""

from __future__ import annotations

import contextlib
import os
import sys
from collections.abc import Callable, Sequence

from minishell.env import Environment
from minishell.executor import execute
from minishell.expander import expand_tokens
from minishell.lexer import ShellSyntaxError, lex
from minishell.parser import Job, parse
from minishell.redirs import HEREDOC_PREFIX
from minishell.signals import setup_signals_prompt
from minishell.state import ShellState

try:
    import readline
except ImportError:  # pragma: no cover - platforms without readline
    readline = None

PROMPT = "minishell> "

ReadLine = Callable[[str], "str | None"]


def _read_from_terminal(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _is_blank(line: str | None) -> bool:
    return line is None or all(ch in " \t" for ch in line)


def _add_history(line: str) -> None:
    if readline is not None:
        readline.add_history(line)


def _clear_history() -> None:
    if readline is not None:
        with contextlib.suppress(AttributeError):
            readline.clear_history()


def _remove_heredoc_files(jobs: Sequence[Job]) -> None:
    for job in jobs:
        for command in job.commands:
            for redir in command.redirs:
                if redir.file and redir.file.startswith(HEREDOC_PREFIX):
                    with contextlib.suppress(OSError):
                        os.unlink(redir.file)


def minishell_step(state: ShellState, line: str | None) -> int:
    """Lex, expand, parse and run one input line; return the resulting status."""
    if _is_blank(line):
        return state.last_status
    _add_history(line)
    try:
        tokens = lex(line)
    except ShellSyntaxError as exc:
        sys.stderr.write(f"minishell: {exc}\n")
        sys.stderr.flush()
        state.last_status = 2
        return 2
    if not tokens:
        state.last_status = 2
        return 2
    expand_tokens(state, tokens)
    try:
        jobs = parse(tokens)
    except ShellSyntaxError:
        jobs = []
    if not jobs:
        state.last_status = 2
        return 2
    try:
        state.last_status = execute(state, jobs)
    finally:
        _remove_heredoc_files(jobs)
    return state.last_status


def minishell_loop(state: ShellState, read_line: ReadLine | None = None) -> int:
    """Read and run lines until end of input or ``exit``; return the exit code."""
    read_line = read_line or _read_from_terminal
    while not state.should_exit:
        try:
            line = read_line(PROMPT)
        except KeyboardInterrupt:
            continue
        if line is None:
            state.request_exit(state.last_status)
            break
        state.last_status = minishell_step(state, line)
    sys.stdout.write("exit\n")
    sys.stdout.flush()
    return state.exit_code


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive shell over the process environment."""
    env = Environment.from_envp(f"{key}={value}" for key, value in os.environ.items())
    state = ShellState(env=env)
    setup_signals_prompt()
    try:
        return minishell_loop(state)
    finally:
        _clear_history()


if __name__ == "__main__":
    sys.exit(main())