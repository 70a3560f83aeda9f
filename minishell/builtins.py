"""Commands the shell runs itself: echo, pwd, env, exit, cd, export and unset."""

from __future__ import annotations

import os
import re
import sys
from collections.abc import Sequence
from typing import TextIO

from minishell.state import ShellState

_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMERIC = re.compile(r"[+-]?[0-9]+")
_BUILTINS = frozenset({"echo", "pwd", "env", "exit", "cd", "export", "unset"})


def _stdout(out: TextIO | None) -> TextIO:
    return sys.stdout if out is None else out


def _stderr(err: TextIO | None) -> TextIO:
    return sys.stderr if err is None else err


def _describe(exc: OSError) -> str:
    return os.strerror(exc.errno) if exc.errno else str(exc)


def is_valid_ident(name: str | None) -> bool:
    """Return True if ``name`` is a valid variable name for export and unset."""
    return bool(name) and _IDENT.fullmatch(name) is not None


def is_builtin(name: str | None) -> bool:
    """Return True if ``name`` is one of the shell's own commands."""
    return name in _BUILTINS


def _is_n_flag(word: str) -> bool:
    return len(word) >= 2 and word[0] == "-" and set(word[1:]) == {"n"}


def builtin_echo(argv: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; leading ``-n`` flags drop the newline."""
    out = _stdout(out)
    words = list(argv[1:])
    newline = True
    while words and _is_n_flag(words[0]):
        newline = False
        words.pop(0)
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    return 0


def builtin_pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the current working directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        _stderr(err).write(f"minishell: pwd: {_describe(exc)}\n")
        return 1
    _stdout(out).write(f"{cwd}\n")
    return 0


def builtin_env(
    state: ShellState | None,
    argv: Sequence[str] | None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Print exported variables that have a value; any argument is an error."""
    if state is None:
        return 1
    if argv and len(argv) > 1:
        _stderr(err).write(f"minishell: env: {argv[1]}: No such file or directory\n")
        return 127
    out = _stdout(out)
    for var in state.env:
        if var.exported and var.key and var.value is not None:
            out.write(f"{var.key}={var.value}\n")
    return 0


def builtin_exit(
    state: ShellState | None,
    argv: Sequence[str] | None,
    err: TextIO | None = None,
) -> int:
    """Ask the shell to exit, with the last status or the given numeric code."""
    if state is None:
        return 1
    if not argv or len(argv) < 2:
        state.request_exit(state.last_status)
        return state.exit_code
    arg = argv[1]
    if _NUMERIC.fullmatch(arg) is None:
        _stderr(err).write(f"minishell: exit: {arg}: numeric argument required\n")
        state.request_exit(2)
        return 2
    if len(argv) > 2:
        _stderr(err).write("minishell: exit: too many arguments\n")
        state.last_status = 1
        return 1
    code = int(arg) % 256
    state.request_exit(code)
    return code


def builtin_cd(
    state: ShellState,
    argv: Sequence[str] | None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Change directory to the argument, ``$HOME`` or, for ``-``, ``$OLDPWD``."""
    err = _stderr(err)
    if argv and len(argv) > 2:
        err.write("minishell: cd: too many arguments\n")
        return 1
    arg = argv[1] if argv and len(argv) > 1 else None
    if arg is None:
        path = state.env.get("HOME")
        if path is None:
            err.write("minishell: cd: HOME not set\n")
            return 1
    elif arg == "-":
        path = state.env.get("OLDPWD")
        if path is None:
            err.write("minishell: cd: OLDPWD not set\n")
            return 1
        _stdout(out).write(f"{path}\n")
    else:
        path = arg
    try:
        os.chdir(path)
    except OSError as exc:
        err.write(f"minishell: cd: {path}: {_describe(exc)}\n")
        return 1
    old = state.env.get("PWD")
    if old is not None:
        state.env.set("OLDPWD", old)
    try:
        state.env.set("PWD", os.getcwd())
    except OSError:
        pass
    return 0


def _export_one(state: ShellState, arg: str) -> bool:
    key, sep, value = arg.partition("=")
    if not is_valid_ident(key):
        return False
    state.env.set(key, value if sep else None)
    return True


def builtin_export(
    state: ShellState,
    argv: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Export variables, or list exported ones when called without arguments."""
    if len(argv) < 2:
        out = _stdout(out)
        for var in state.env:
            if not var.exported:
                continue
            if var.value is None:
                out.write(f"declare -x {var.key}\n")
            else:
                out.write(f'declare -x {var.key}="{var.value}"\n')
        return 0
    status = 0
    for arg in argv[1:]:
        if not _export_one(state, arg):
            _stderr(err).write(
                f"minishell: export: `{arg}': not a valid identifier\n"
            )
            status = 1
    return status


def builtin_unset(
    state: ShellState,
    argv: Sequence[str] | None,
    err: TextIO | None = None,
) -> int:
    """Remove the named variables; invalid names are reported and skipped."""
    status = 0
    for name in (argv or [])[1:]:
        if is_valid_ident(name):
            state.env.unset(name)
        else:
            _stderr(err).write(
                f"minishell: unset: `{name}': not a valid identifier\n"
            )
            status = 1
    return status


def exec_builtin(
    state: ShellState,
    argv: Sequence[str] | None,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run the builtin named by ``argv[0]`` and return its status."""
    if not argv:
        return 1
    name = argv[0]
    if name == "echo":
        return builtin_echo(argv, out)
    if name == "pwd":
        return builtin_pwd(out, err)
    if name == "env":
        return builtin_env(state, argv, out, err)
    if name == "exit":
        return builtin_exit(state, argv, err)
    if name == "cd":
        return builtin_cd(state, argv, out, err)
    if name == "export":
        return builtin_export(state, argv, out, err)
    if name == "unset":
        return builtin_unset(state, argv, err)
    return 1