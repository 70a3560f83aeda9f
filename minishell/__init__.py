"""An interactive shell with pipelines, redirections, here-documents and variable expansion."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "env",
    "executor",
    "expander",
    "lexer",
    "parser",
    "pipeline",
    "redirs",
    "shell",
    "signals",
    "state",
]