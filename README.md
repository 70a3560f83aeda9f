# minishell

An interactive command shell for POSIX systems. It reads a line, splits it
into tokens, expands variables, and runs the resulting commands. It starts
with a copy of the process environment.

## Features

- Pipelines: `ls | grep py | wc -l`
- Command lists joined by `&&` and `||`
- Redirection of standard input and output: `<`, `>`, `>>`, and
  here-documents with `<<`. A here-document is read line by line after a
  `> ` prompt into a temporary file under `/tmp`, which is removed after
  the line has run.
- Single and double quotes. Single quotes block all expansion; inside
  double quotes only `$` expansions happen. Quotes are removed from words.
- Expansion of `$NAME`, `$?` (the last exit status) and `~` at the start of
  a word (from `HOME`)
- Built-in commands: `echo` (with `-n`), `cd` (with `-`, which prints and
  goes to `OLDPWD`), `pwd`, `env`, `export` (without arguments it lists
  exported variables as `declare -x`), `unset`, `exit`
- Other commands are looked up in `PATH` (or used as given when the name
  contains `/`) and run as child processes.
- Line editing and in-session history when Python's `readline` module is
  available.
- At the prompt, Ctrl-C abandons the current line and Ctrl-\ is ignored.

## Installation

```
pip install .
```

## Usage

Start the shell:

```
minishell
```

The prompt is `minishell> `. Ctrl-D (end of input) or `exit [n]` leaves the
shell. It prints `exit` and returns the exit status; `exit` without an
argument uses the last status, and a numeric argument is taken modulo 256.

```
minishell> export GREETING=hello
minishell> echo "$GREETING, $USER" | tr a-z A-Z
minishell> cat << EOF > notes.txt
> first line
> EOF
minishell> false || echo "status was $?"
```

## Exit statuses

| Status | Meaning |
|--------|---------|
| 1 | A redirection failed, or a builtin reported an error |
| 2 | Syntax error, unclosed quote, or a non-numeric argument to `exit` |
| 126 | A command was found but could not be run |
| 127 | A command was not found, or `env` was given an argument |
| 128 + n | A command was ended by signal n |

## What it does not do

- No `;` separator, no grouping with parentheses, no subshells.
- No background jobs or job control; a single `&` is a syntax error.
- No filename globbing and no word splitting of expanded variables.
- Only standard input and output can be redirected; there is no `2>` or
  descriptor duplication.
- History is not saved between sessions.

## Using it from Python

`minishell.shell.minishell_step(state, line)` runs one line against a
`minishell.state.ShellState` and returns the line's exit status.

`minishell.shell.minishell_loop(state, read_line)` reads lines from any
callable that takes a prompt and returns a string, until it returns `None`
or the shell is asked to exit, and returns the exit code.

The pieces can also be used on their own: `minishell.lexer.lex(line)`
returns a list of `Token` objects (raising `ShellSyntaxError` on bad input),
`minishell.expander.expand_tokens(state, tokens)` expands them in place,
`minishell.parser.parse(tokens)` returns a list of `Job` objects, and
`minishell.executor.execute(state, jobs)` runs them.
`minishell.env.Environment.from_envp(entries)` builds an environment from
`KEY=VALUE` strings.

## Tests

```
pip install .[test]
pytest
```