"""File redirections, here-documents and command lookup along ``PATH``."""

from __future__ import annotations

import contextlib
import itertools
import os
import sys
from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import TextIO

from minishell.env import Environment
from minishell.parser import Command, Redirection, RedirType
from minishell.signals import setup_signals_heredoc, setup_signals_prompt

HEREDOC_PREFIX = "/tmp/minishell_heredoc_"
HEREDOC_PROMPT = "> "

_heredoc_ids = itertools.count()

ReadLine = Callable[[str], "str | None"]


class RedirectionError(Exception):
    """Raised when a redirection or here-document cannot be set up."""


def _reason(exc: OSError) -> str:
    return os.strerror(exc.errno) if exc.errno else str(exc)


def _open(path: str, flags: int, mode: int = 0o644) -> int:
    try:
        return os.open(path, flags, mode)
    except OSError as exc:
        raise RedirectionError(f"{path}: {_reason(exc)}") from exc


def open_infile(path: str) -> int:
    """Open ``path`` for reading and return the descriptor."""
    return _open(path, os.O_RDONLY)


def open_outfile_trunc(path: str) -> int:
    """Open ``path`` for writing, creating or truncating it."""
    return _open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC)


def open_outfile_append(path: str) -> int:
    """Open ``path`` for appending, creating it if needed."""
    return _open(path, os.O_WRONLY | os.O_CREAT | os.O_APPEND)


def _open_redirection(redir: Redirection) -> tuple[int, int]:
    if redir.kind is RedirType.IN:
        return open_infile(redir.file), 0
    if redir.kind is RedirType.OUT:
        return open_outfile_trunc(redir.file), 1
    if redir.kind is RedirType.APPEND:
        return open_outfile_append(redir.file), 1
    raise RedirectionError(f"{redir.file}: here-document not prepared")


def apply_redirs(redirs: Iterable[Redirection]) -> None:
    """Point standard input and output at the redirection targets, in order.

    Stops at the first redirection that fails and raises RedirectionError.
    """
    for redir in redirs:
        if redir.file is None:
            raise RedirectionError("missing redirection target")
        fd, target = _open_redirection(redir)
        try:
            os.dup2(fd, target)
        except OSError as exc:
            raise RedirectionError(f"dup2: {_reason(exc)}") from exc
        finally:
            os.close(fd)


def _flush_std_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (OSError, ValueError, AttributeError):
            pass


@contextlib.contextmanager
def saved_stdio() -> Iterator[None]:
    """Save standard input and output on entry and put them back on exit."""
    _flush_std_streams()
    try:
        in_save = os.dup(0)
    except OSError as exc:
        raise RedirectionError(f"dup: {_reason(exc)}") from exc
    try:
        out_save = os.dup(1)
    except OSError as exc:
        os.close(in_save)
        raise RedirectionError(f"dup: {_reason(exc)}") from exc
    try:
        yield
    finally:
        _flush_std_streams()
        for saved, target in ((in_save, 0), (out_save, 1)):
            with contextlib.suppress(OSError):
                os.dup2(saved, target)
            os.close(saved)


def heredoc_make_path() -> str:
    """Return a fresh temporary path for a here-document of this process."""
    return f"{HEREDOC_PREFIX}{os.getpid()}_{next(_heredoc_ids)}"


def _read_line_from_stdin(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def heredoc_read(
    limiter: str,
    out: TextIO,
    read_line: ReadLine | None = None,
) -> None:
    """Copy lines from ``read_line`` to ``out`` until ``limiter`` or end of input."""
    read_line = read_line or _read_line_from_stdin
    while True:
        line = read_line(HEREDOC_PROMPT)
        if line is None or line == limiter:
            return
        try:
            out.write(f"{line}\n")
        except OSError as exc:
            raise RedirectionError(f"here-document: {_reason(exc)}") from exc


def _prepare_one(redir: Redirection, read_line: ReadLine | None) -> None:
    path = heredoc_make_path()
    fd = _open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    setup_signals_heredoc()
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as out:
            heredoc_read(redir.file, out, read_line)
    except (OSError, RedirectionError) as exc:
        with contextlib.suppress(OSError):
            os.unlink(path)
        if isinstance(exc, RedirectionError):
            raise
        raise RedirectionError(f"{path}: {_reason(exc)}") from exc
    setup_signals_prompt()
    redir.file = path
    redir.kind = RedirType.IN


def prepare_heredocs(
    commands: Sequence[Command],
    read_line: ReadLine | None = None,
) -> None:
    """Read every here-document into a temporary file and turn it into an input redirection."""
    try:
        for command in commands:
            for redir in command.redirs:
                if redir.kind is RedirType.HEREDOC:
                    _prepare_one(redir, read_line)
    except RedirectionError:
        setup_signals_prompt()
        raise


def resolve_cmd_path(env: Environment, cmd: str | None) -> str | None:
    """Find the file to run for ``cmd``, or None if it cannot be found.

    A name containing ``/`` is used as is; otherwise each ``PATH`` entry is
    tried in order, an empty entry meaning the current directory.
    """
    if not cmd:
        return None
    if "/" in cmd:
        return cmd if os.access(cmd, os.F_OK) else None
    path_value = env.get("PATH")
    if path_value is None:
        return None
    for directory in path_value.split(":"):
        candidate = f"{directory or '.'}/{cmd}"
        if os.access(candidate, os.F_OK):
            return candidate
    return None