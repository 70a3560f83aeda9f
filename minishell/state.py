"""State shared by every part of a running shell."""

from __future__ import annotations

from dataclasses import dataclass, field

from minishell.env import Environment


@dataclass
class ShellState:
    """Environment, last exit status and exit request of a shell session."""

    env: Environment = field(default_factory=Environment)
    last_status: int = 0
    should_exit: bool = False
    exit_code: int = 0

    def request_exit(self, code: int) -> None:
        """Ask the main loop to stop and exit with ``code``."""
        self.should_exit = True
        self.exit_code = code