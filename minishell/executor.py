"""Run parsed jobs: builtins in the shell itself, other commands in children."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Mapping, Sequence

from minishell.builtins import exec_builtin, is_builtin
from minishell.parser import Command, Job, Operator
from minishell.pipeline import exec_pipeline, wait_status_to_code
from minishell.redirs import (
    RedirectionError,
    apply_redirs,
    prepare_heredocs,
    resolve_cmd_path,
    saved_stdio,
)
from minishell.signals import (
    setup_signals_exec,
    setup_signals_prompt,
    signals_exec_parent_handlers,
)
from minishell.state import ShellState


def _report(message: object) -> None:
    sys.stderr.write(f"{message}\n")
    sys.stderr.flush()


def _write_stderr_fd(text: str) -> None:
    try:
        os.write(2, text.encode("utf-8", "surrogateescape"))
    except OSError:
        pass


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError, AttributeError):
            pass


def _child_exec_external(
    state: ShellState, command: Command, environ: Mapping[str, str]
) -> int:
    setup_signals_exec()
    try:
        apply_redirs(command.redirs)
    except RedirectionError as exc:
        _write_stderr_fd(f"{exc}\n")
        return 1
    name = command.argv[0]
    path = resolve_cmd_path(state.env, name)
    if path is None:
        _write_stderr_fd(f"minishell: {name}: command not found\n")
        return 127
    try:
        os.execve(path, command.argv, dict(environ))
    except OSError as exc:
        reason = os.strerror(exc.errno) if exc.errno else str(exc)
        _write_stderr_fd(f"{path}: {reason}\n")
        return 127 if exc.errno == errno.ENOENT else 126
    return 1


def exec_external_one(state: ShellState, command: Command) -> int:
    """Run a non-builtin command in a child process and return its exit status."""
    environ = dict(entry.split("=", 1) for entry in state.env.to_envp())
    _flush_std_streams()
    try:
        pid = os.fork()
    except OSError:
        return 1
    if pid == 0:
        code = 1
        try:
            code = _child_exec_external(state, command, environ)
        finally:
            os._exit(code & 0xFF)
    signals_exec_parent_handlers()
    try:
        _, status = os.waitpid(pid, 0)
    except OSError:
        return 1
    finally:
        setup_signals_prompt()
    return wait_status_to_code(status)


def exec_redirs_only(command: Command | None) -> int:
    """Perform the redirections of a command without words, then restore stdio."""
    if command is None or not command.redirs:
        return 0
    try:
        with saved_stdio():
            apply_redirs(command.redirs)
    except RedirectionError as exc:
        _report(exc)
        return 1
    return 0


def _exec_builtin_in_parent(state: ShellState, command: Command) -> int:
    try:
        with saved_stdio():
            try:
                apply_redirs(command.redirs)
            except RedirectionError as exc:
                _report(exc)
                return 1
            with open(1, "w", closefd=False) as out, open(
                2, "w", closefd=False
            ) as err:
                return exec_builtin(state, command.argv, out, err)
    except RedirectionError as exc:
        _report(exc)
        return 1


def exec_cmd_simple(state: ShellState | None, command: Command | None) -> int:
    """Run a single command; empty words are dropped first."""
    if state is None or command is None or not command.argv:
        return 0
    command.argv[:] = [word for word in command.argv if word]
    if not command.argv:
        return 0
    if is_builtin(command.argv[0]):
        return _exec_builtin_in_parent(state, command)
    return exec_external_one(state, command)


def _should_run(op: Operator, last_status: int) -> bool:
    if op is Operator.AND:
        return last_status == 0
    if op is Operator.OR:
        return last_status != 0
    return True


def _run_commands(state: ShellState, commands: Sequence[Command]) -> int:
    if not commands:
        return 0
    if state.should_exit:
        return state.exit_code
    try:
        prepare_heredocs(commands)
    except RedirectionError as exc:
        _report(exc)
        return 1
    if len(commands) > 1:
        return exec_pipeline(state, commands)
    command = commands[0]
    if not command.argv:
        return exec_redirs_only(command)
    return exec_cmd_simple(state, command)


def execute(state: ShellState | None, jobs: Sequence[Job]) -> int:
    """Run ``jobs`` in order, honouring ``&&`` and ``||``; return the last status."""
    if state is None:
        return 1
    status = 0
    for job in jobs:
        op = Operator.NONE if status == 0 else job.next_op
        if _should_run(op, status):
            status = _run_commands(state, job.commands)
        state.last_status = status
        if state.should_exit:
            break
    return status