"""Signal dispositions for the prompt, running commands and here-documents."""

from __future__ import annotations

import os
import signal

_last_signal = 0


def _write_stdout(data: bytes) -> None:
    try:
        os.write(1, data)
    except OSError:
        pass


def _handle_sigint_prompt(signum, frame) -> None:
    """Abandon the line being edited and start a fresh prompt."""
    global _last_signal
    _last_signal = signal.SIGINT
    _write_stdout(b"\n")
    raise KeyboardInterrupt


def _handle_sigint_exec(signum, frame) -> None:
    global _last_signal
    _last_signal = signal.SIGINT
    _write_stdout(b"\n")


def _handle_sigquit_exec(signum, frame) -> None:
    global _last_signal
    _last_signal = signal.SIGQUIT
    _write_stdout(b"Quit (core dumped)\n")


def signals_prompt_handlers() -> None:
    """Install interactive-prompt handlers: Ctrl-C restarts the line, Ctrl-\\ is ignored."""
    signal.signal(signal.SIGINT, _handle_sigint_prompt)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def signals_exec_parent_handlers() -> None:
    """Install handlers used by the shell while it waits for children."""
    signal.signal(signal.SIGINT, _handle_sigint_exec)
    signal.signal(signal.SIGQUIT, _handle_sigquit_exec)


def setup_signals_prompt() -> None:
    """Switch to prompt mode."""
    signals_prompt_handlers()


def setup_signals_exec() -> None:
    """Restore default dispositions, as a child about to run a command needs."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_DFL)


def setup_signals_heredoc() -> None:
    """Let Ctrl-C interrupt a here-document while Ctrl-\\ is ignored."""
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    signal.signal(signal.SIGQUIT, signal.SIG_IGN)


def last_signal() -> int:
    """Return the number of the last signal caught by a shell handler, or 0."""
    return _last_signal