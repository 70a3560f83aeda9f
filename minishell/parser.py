"""Turn a token list into jobs of piped commands joined by ``&&`` and ``||``."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from minishell.lexer import ShellSyntaxError, Token, TokenType, is_logic_type

_REDIR_TOKENS = {
    TokenType.REDIR_IN: "IN",
    TokenType.REDIR_OUT: "OUT",
    TokenType.APPEND: "APPEND",
    TokenType.HEREDOC: "HEREDOC",
}


class RedirType(enum.IntEnum):
    """Kinds of redirection attached to a command."""

    IN = 0
    OUT = 1
    APPEND = 2
    HEREDOC = 3


class Operator(enum.Enum):
    """Logical operator recorded on a job."""

    NONE = enum.auto()
    AND = enum.auto()
    OR = enum.auto()


@dataclass
class Redirection:
    """A redirection; for a here-document ``file`` holds the limiter."""

    kind: RedirType
    file: str


@dataclass
class Command:
    """One simple command: its words and its redirections, in order."""

    argv: list[str] = field(default_factory=list)
    redirs: list[Redirection] = field(default_factory=list)


@dataclass
class Job:
    """Commands joined by pipes, with the operator that follows the job."""

    commands: list[Command] = field(default_factory=list)
    next_op: Operator = Operator.NONE


def is_redir_token(kind: TokenType) -> bool:
    """Return True for the four redirection token kinds."""
    return kind in _REDIR_TOKENS


def token_to_redir_type(kind: TokenType) -> RedirType:
    """Map a redirection token kind to its RedirType; anything else is a here-document."""
    return RedirType[_REDIR_TOKENS.get(kind, "HEREDOC")]


def parse(tokens: Sequence[Token]) -> list[Job]:
    """Group ``tokens`` into jobs.

    Pipes separate commands inside a job; ``&&`` and ``||`` end a job and
    mark it with the operator. Raises ShellSyntaxError if a redirection is
    not followed by a word.
    """
    jobs: list[Job] = []
    pending: list[Command] = []
    command: Command | None = None
    redir_kind: RedirType | None = None

    def flush() -> None:
        nonlocal pending
        if pending:
            jobs.append(Job(pending))
            pending = []

    for token in tokens:
        if redir_kind is not None:
            if token.kind is not TokenType.WORD:
                raise ShellSyntaxError("syntax error")
            command.redirs.append(Redirection(redir_kind, token.value))
            redir_kind = None
            continue
        if token.kind is TokenType.PIPE:
            command = None
            continue
        if is_logic_type(token.kind):
            command = None
            flush()
            if jobs:
                jobs[-1].next_op = (
                    Operator.AND if token.kind is TokenType.AND else Operator.OR
                )
            continue
        if command is None:
            command = Command()
            pending.append(command)
        if is_redir_token(token.kind):
            redir_kind = token_to_redir_type(token.kind)
        elif token.kind is TokenType.WORD:
            command.argv.append(token.value)

    if redir_kind is not None:
        raise ShellSyntaxError("syntax error")
    flush()
    return jobs


def format_commands(commands: Iterable[Command]) -> str:
    """Describe ``commands`` in a readable, line-per-item debugging format."""
    lines: list[str] = []
    for number, command in enumerate(commands):
        lines.append(f"CMD {number}:")
        lines.extend(
            f"  argv[{index}] = '{word}'" for index, word in enumerate(command.argv)
        )
        lines.extend(
            f"  redir: type={int(redir.kind)} file='{redir.file}'"
            for redir in command.redirs
        )
    return "".join(f"{line}\n" for line in lines)