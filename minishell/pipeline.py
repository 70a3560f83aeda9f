"""Run commands joined by pipes, one child process per command."""

from __future__ import annotations

import errno
import os
import sys
from collections.abc import Sequence
from typing import NoReturn

from minishell.builtins import exec_builtin, is_builtin
from minishell.parser import Command
from minishell.redirs import RedirectionError, apply_redirs, resolve_cmd_path
from minishell.signals import (
    setup_signals_exec,
    setup_signals_prompt,
    signals_exec_parent_handlers,
)
from minishell.state import ShellState

MAX_PIPELINE_COMMANDS = 1024


def wait_status_to_code(status: int) -> int:
    """Turn a raw wait status into a shell exit status."""
    if os.WIFEXITED(status):
        return os.WEXITSTATUS(status)
    if os.WIFSIGNALED(status):
        return 128 + os.WTERMSIG(status)
    return 1


def wait_all(pids: Sequence[int], last_pid: int) -> int:
    """Wait for every child in ``pids``; return the status of ``last_pid``."""
    last_status = 0
    for pid in pids:
        try:
            _, status = os.waitpid(pid, 0)
        except OSError:
            status = 1
        if pid == last_pid:
            last_status = wait_status_to_code(status)
    return last_status


def _write_stderr(text: str) -> None:
    try:
        os.write(2, text.encode("utf-8", "surrogateescape"))
    except OSError:
        pass


def _run_in_child(state: ShellState, command: Command) -> int:
    setup_signals_exec()
    try:
        apply_redirs(command.redirs)
    except RedirectionError as exc:
        _write_stderr(f"{exc}\n")
        return 1
    if not command.argv:
        return 0
    name = command.argv[0]
    if is_builtin(name):
        with open(1, "w", closefd=False) as out, open(2, "w", closefd=False) as err:
            return exec_builtin(state, command.argv, out, err)
    path = resolve_cmd_path(state.env, name)
    if path is None:
        _write_stderr(f"minishell: {name}: command not found\n")
        return 127
    environ = dict(entry.split("=", 1) for entry in state.env.to_envp())
    try:
        os.execve(path, command.argv, environ)
    except OSError as exc:
        reason = os.strerror(exc.errno) if exc.errno else str(exc)
        _write_stderr(f"{path}: {reason}\n")
        return 127 if exc.errno == errno.ENOENT else 126
    return 1


def exec_pipeline_child(state: ShellState, command: Command) -> NoReturn:
    """Run ``command`` in the current (child) process and never return."""
    code = 1
    try:
        code = _run_in_child(state, command)
    finally:
        os._exit(code & 0xFF)


def _child_setup_pipe(prev_read: int | None, pipe_fds: tuple[int, int] | None) -> None:
    try:
        if prev_read is not None:
            os.dup2(prev_read, 0)
            os.close(prev_read)
        if pipe_fds is not None:
            read_end, write_end = pipe_fds
            os.close(read_end)
            os.dup2(write_end, 1)
            os.close(write_end)
    except OSError:
        os._exit(1)


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError, AttributeError):
            pass


def _spawn(
    state: ShellState,
    command: Command,
    prev_read: int | None,
    pipe_fds: tuple[int, int] | None,
) -> int | None:
    _flush_std_streams()
    try:
        pid = os.fork()
    except OSError:
        return None
    if pid == 0:
        try:
            _child_setup_pipe(prev_read, pipe_fds)
            exec_pipeline_child(state, command)
        finally:
            os._exit(1)
    return pid


def _close_quietly(*fds: int | None) -> None:
    for fd in fds:
        if fd is not None:
            try:
                os.close(fd)
            except OSError:
                pass


def _pipeline_loop(state: ShellState, commands: Sequence[Command]) -> int:
    pids: list[int] = []
    last_pid = -1
    prev_read: int | None = None
    for index, command in enumerate(commands):
        has_next = index + 1 < len(commands)
        pipe_fds: tuple[int, int] | None = None
        if has_next:
            try:
                pipe_fds = os.pipe()
            except OSError:
                _close_quietly(prev_read)
                wait_all(pids, last_pid)
                return 1
        pid = _spawn(state, command, prev_read, pipe_fds)
        if pid is None:
            _close_quietly(prev_read, *(pipe_fds or ()))
            wait_all(pids, last_pid)
            return 1
        pids.append(pid)
        last_pid = pid
        _close_quietly(prev_read)
        prev_read = None
        if pipe_fds is not None:
            _close_quietly(pipe_fds[1])
            prev_read = pipe_fds[0]
    _close_quietly(prev_read)
    return wait_all(pids, last_pid)


def exec_pipeline(state: ShellState, commands: Sequence[Command]) -> int:
    """Run ``commands`` connected by pipes and return the status of the last one."""
    signals_exec_parent_handlers()
    try:
        return _pipeline_loop(state, list(commands)[:MAX_PIPELINE_COMMANDS])
    finally:
        setup_signals_prompt()