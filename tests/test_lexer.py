import pytest

from minishell.lexer import (
    ShellSyntaxError,
    Token,
    TokenType,
    check_pipe_syntax,
    check_syntax,
    has_unclosed_quotes,
    is_logic_type,
    is_redir_type,
    lex,
    read_operator,
    read_word,
)


def _word(value):
    return Token(TokenType.WORD, value)


def _pipe():
    return Token(TokenType.PIPE, "|")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("abc", False),
        ("'abc", True),
        ('"', True),
        ("'a\"b'", False),
        ('"a\'b"', False),
        ("'a' \"b", True),
        ("", False),
    ],
)
def test_has_unclosed_quotes(text, expected):
    assert has_unclosed_quotes(text) is expected


@pytest.mark.parametrize(
    "text, kind",
    [
        ("||", TokenType.OR),
        ("|", TokenType.PIPE),
        ("&&", TokenType.AND),
        ("&", TokenType.INVALID),
        ("<<", TokenType.HEREDOC),
        (">>", TokenType.APPEND),
        ("<", TokenType.REDIR_IN),
        (">", TokenType.REDIR_OUT),
    ],
)
def test_read_operator(text, kind):
    got_kind, end = read_operator(text + "x", 0)
    assert got_kind is kind
    assert end == len(text)


def test_read_operator_rejects_non_operator():
    with pytest.raises(ValueError):
        read_operator("abc", 0)


def test_read_word_keeps_quotes_and_stops_at_operator():
    text = 'ab"c d"e|x'
    value, quoted, end = read_word(text, 0)
    assert value == 'ab"c d"e'
    assert quoted == 2
    assert text[end] == "|"


def test_read_word_quote_flags_combine():
    value, quoted, end = read_word("'a'\"b\"", 0)
    assert value == "'a'\"b\""
    assert quoted == 3
    assert end == len(value)


def test_read_word_unclosed_quote():
    with pytest.raises(ShellSyntaxError):
        read_word("ab'cd", 0)


def test_is_redir_and_logic_partition():
    redirs = {k for k in TokenType if is_redir_type(k)}
    logic = {k for k in TokenType if is_logic_type(k)}
    assert redirs == {
        TokenType.REDIR_IN,
        TokenType.REDIR_OUT,
        TokenType.APPEND,
        TokenType.HEREDOC,
    }
    assert logic == {TokenType.AND, TokenType.OR}


def test_lex_simple_pipeline():
    tokens = lex("echo hello | cat > out")
    assert [t.kind for t in tokens] == [
        TokenType.WORD,
        TokenType.WORD,
        TokenType.PIPE,
        TokenType.WORD,
        TokenType.REDIR_OUT,
        TokenType.WORD,
    ]
    assert [t.value for t in tokens] == ["echo", "hello", "|", "cat", ">", "out"]


def test_lex_logic_operators_without_spaces():
    tokens = lex("ls&&pwd||echo")
    assert [t.kind for t in tokens] == [
        TokenType.WORD,
        TokenType.AND,
        TokenType.WORD,
        TokenType.OR,
        TokenType.WORD,
    ]


def test_lex_quoted_word_with_spaces_and_operators():
    tokens = lex("echo 'a | b' \"c\"")
    assert [t.value for t in tokens] == ["echo", "'a | b'", '"c"']
    assert [t.quoted for t in tokens] == [0, 1, 2]


def test_lex_whitespace_kinds_separate_words():
    tokens = lex("a\tb\nc")
    assert [t.value for t in tokens] == ["a", "b", "c"]


def test_lex_heredoc_and_append():
    tokens = lex("cat << EOF >> log")
    assert [t.kind for t in tokens] == [
        TokenType.WORD,
        TokenType.HEREDOC,
        TokenType.WORD,
        TokenType.APPEND,
        TokenType.WORD,
    ]


def test_lex_blank_line_is_empty():
    assert lex("   ") == []
    assert lex("") == []


def test_lex_round_trip_through_values():
    line = "grep -v 'x y' < in | sort >> out && echo \"done\""
    tokens = lex(line)
    again = lex(" ".join(t.value for t in tokens))
    assert again == tokens


def test_lex_unclosed_quotes():
    with pytest.raises(ShellSyntaxError, match="unclosed quotes"):
        lex("echo 'oops")


@pytest.mark.parametrize(
    "line",
    [
        "| ls",
        "ls |",
        "ls &",
        "&& ls",
        "ls >",
        "ls > | wc",
        "ls && || pwd",
        "ls | | wc",
        "cat < < f",
    ],
)
def test_lex_syntax_errors(line):
    with pytest.raises(ShellSyntaxError, match="syntax error"):
        lex(line)


def test_check_syntax_accepts_valid_sequence():
    tokens = [_word("ls"), _pipe(), Token(TokenType.REDIR_IN, "<"), _word("f"), _word("wc")]
    check_syntax(tokens)
    assert len(tokens) == 5


def test_check_syntax_rejects_invalid_token_mid_line():
    with pytest.raises(ShellSyntaxError):
        check_syntax([_word("ls"), Token(TokenType.INVALID, "&"), _word("x")])


def test_check_pipe_syntax_valid_and_empty():
    check_pipe_syntax([])
    tokens = [_word("a"), _pipe(), _word("b")]
    check_pipe_syntax(tokens)
    assert [t.kind for t in tokens].count(TokenType.PIPE) == 1


@pytest.mark.parametrize(
    "tokens",
    [
        [_pipe(), _word("a")],
        [_word("a"), _pipe()],
        [_word("a"), _pipe(), _pipe(), _word("b")],
    ],
)
def test_check_pipe_syntax_errors(tokens):
    with pytest.raises(ShellSyntaxError):
        check_pipe_syntax(tokens)