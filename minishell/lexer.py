"""Split a command line into tokens and check their syntax."""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass

_SPACES = frozenset(" \t\n")
_OPERATOR_CHARS = frozenset("|<>&")
_QUOTE_FLAGS = {"'": 1, '"': 2}

_SYNTAX_ERROR = "syntax error"
_UNCLOSED_QUOTES = "error: unclosed quotes"


class TokenType(enum.Enum):
    """Kinds of token produced by the lexer."""

    WORD = enum.auto()
    PIPE = enum.auto()
    REDIR_IN = enum.auto()
    REDIR_OUT = enum.auto()
    APPEND = enum.auto()
    HEREDOC = enum.auto()
    AND = enum.auto()
    OR = enum.auto()
    INVALID = enum.auto()


@dataclass
class Token:
    """A lexed token.

    ``value`` keeps any quote characters of a word; ``quoted`` is a bit set:
    1 if the word holds single quotes, 2 if it holds double quotes.
    """

    kind: TokenType
    value: str
    quoted: int = 0


class ShellSyntaxError(Exception):
    """Raised when a command line cannot be tokenised or is malformed."""


def _is_space(ch: str) -> bool:
    return ch in _SPACES


def _is_operator(ch: str) -> bool:
    return ch in _OPERATOR_CHARS


def has_unclosed_quotes(text: str | None) -> bool:
    """Return True if a single or double quote in ``text`` is never closed."""
    open_quote = None
    for ch in text or "":
        if ch in _QUOTE_FLAGS:
            if open_quote is None:
                open_quote = ch
            elif open_quote == ch:
                open_quote = None
    return open_quote is not None


def is_redir_type(kind: TokenType) -> bool:
    """Return True for the four redirection token kinds."""
    return kind in (
        TokenType.REDIR_IN,
        TokenType.REDIR_OUT,
        TokenType.APPEND,
        TokenType.HEREDOC,
    )


def is_logic_type(kind: TokenType) -> bool:
    """Return True for ``&&`` and ``||``."""
    return kind in (TokenType.AND, TokenType.OR)


def read_operator(text: str, pos: int) -> tuple[TokenType, int]:
    """Read the operator starting at ``pos``; return its kind and the position after it."""
    if pos >= len(text) or not _is_operator(text[pos]):
        raise ValueError(f"no operator at position {pos}")
    pair = text[pos : pos + 2]
    if pair == "||":
        return TokenType.OR, pos + 2
    if pair == "&&":
        return TokenType.AND, pos + 2
    if pair == "<<":
        return TokenType.HEREDOC, pos + 2
    if pair == ">>":
        return TokenType.APPEND, pos + 2
    single = {
        "|": TokenType.PIPE,
        "&": TokenType.INVALID,
        "<": TokenType.REDIR_IN,
        ">": TokenType.REDIR_OUT,
    }
    return single[text[pos]], pos + 1


def read_word(text: str, pos: int) -> tuple[str, int, int]:
    """Read the word starting at ``pos``.

    Quoted sections may hold spaces and operators and are kept verbatim,
    quotes included. Returns the word, its quote flags and the position after it.
    """
    start = pos
    quoted = 0
    length = len(text)
    while pos < length and not _is_space(text[pos]) and not _is_operator(text[pos]):
        ch = text[pos]
        if ch in _QUOTE_FLAGS:
            end = text.find(ch, pos + 1)
            if end == -1:
                raise ShellSyntaxError(_UNCLOSED_QUOTES)
            quoted |= _QUOTE_FLAGS[ch]
            pos = end + 1
        else:
            pos += 1
    if pos == start:
        raise ValueError(f"no word at position {start}")
    return text[start:pos], quoted, pos


def _is_control(kind: TokenType) -> bool:
    return kind is TokenType.PIPE or is_logic_type(kind)


def check_syntax(tokens: Sequence[Token]) -> None:
    """Raise ShellSyntaxError if the token sequence is malformed."""
    if not tokens:
        return
    first = tokens[0].kind
    if first is TokenType.INVALID or _is_control(first):
        raise ShellSyntaxError(_SYNTAX_ERROR)
    for current, following in zip(tokens, [*tokens[1:], None]):
        kind = current.kind
        if kind is TokenType.INVALID:
            raise ShellSyntaxError(_SYNTAX_ERROR)
        if _is_control(kind) and (
            following is None
            or following.kind is TokenType.INVALID
            or _is_control(following.kind)
        ):
            raise ShellSyntaxError(_SYNTAX_ERROR)
        if is_redir_type(kind) and (
            following is None or following.kind is not TokenType.WORD
        ):
            raise ShellSyntaxError(_SYNTAX_ERROR)


def check_pipe_syntax(tokens: Sequence[Token]) -> None:
    """Raise ShellSyntaxError if a pipe starts, ends or doubles up in ``tokens``."""
    if not tokens:
        return
    expect_command = True
    for token in tokens:
        is_pipe = token.kind is TokenType.PIPE
        if is_pipe and expect_command:
            raise ShellSyntaxError(_SYNTAX_ERROR)
        expect_command = is_pipe
    if expect_command:
        raise ShellSyntaxError(_SYNTAX_ERROR)


def lex(line: str | None) -> list[Token]:
    """Tokenise ``line`` and check its syntax; a blank line gives an empty list."""
    text = line or ""
    if has_unclosed_quotes(text):
        raise ShellSyntaxError(_UNCLOSED_QUOTES)
    tokens: list[Token] = []
    pos = 0
    length = len(text)
    while True:
        while pos < length and _is_space(text[pos]):
            pos += 1
        if pos >= length:
            break
        if _is_operator(text[pos]):
            kind, end = read_operator(text, pos)
            tokens.append(Token(kind, text[pos:end]))
            pos = end
        else:
            value, quoted, pos = read_word(text, pos)
            tokens.append(Token(TokenType.WORD, value, quoted))
    check_syntax(tokens)
    return tokens