"""Variable, status and tilde expansion with quote removal."""

from __future__ import annotations

import re
from collections.abc import Iterable

from minishell.lexer import Token, TokenType
from minishell.state import ShellState

_NAME = re.compile(r"[A-Za-z0-9_]*")


def _expand_dollar(state: ShellState, word: str, pos: int) -> tuple[str, int]:
    """Expand the text after a ``$`` at ``pos``; return it and the next position."""
    if word.startswith("?", pos):
        return str(state.last_status), pos + 1
    match = _NAME.match(word, pos)
    name = match.group()
    if not name:
        return "$", pos
    return state.env.get(name) or "", match.end()


def expand_word(state: ShellState, word: str | None) -> str | None:
    """Expand ``$NAME``, ``$?`` and a leading ``~`` in ``word`` and drop its quotes.

    Nothing is expanded inside single quotes; inside double quotes only
    ``$`` expansions happen.
    """
    if word is None:
        return None
    out: list[str] = []
    in_single = False
    in_double = False
    pos = 0
    length = len(word)
    while pos < length:
        ch = word[pos]
        if ch == "'" and not in_double:
            in_single = not in_single
            pos += 1
        elif ch == '"' and not in_single:
            in_double = not in_double
            pos += 1
        elif (
            ch == "~"
            and not in_single
            and not in_double
            and (pos == 0 or word[pos - 1] == " ")
        ):
            out.append(state.env.get("HOME") or "")
            pos += 1
        elif ch == "$" and not in_single:
            text, pos = _expand_dollar(state, word, pos + 1)
            out.append(text)
        else:
            out.append(ch)
            pos += 1
    return "".join(out)


def expand_tokens(state: ShellState, tokens: Iterable[Token]) -> None:
    """Expand every word token in place; other tokens are left alone."""
    for token in tokens:
        if token.kind is TokenType.WORD and token.value is not None:
            token.value = expand_word(state, token.value)