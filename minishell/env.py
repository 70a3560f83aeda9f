"""Ordered shell environment with exported variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


@dataclass
class Variable:
    """A single shell variable; ``value`` is None for names exported without a value."""

    key: str
    value: str | None = None
    exported: bool = True


class Environment:
    """Shell variables kept in insertion order, like the process environment."""

    def __init__(self) -> None:
        self._vars: list[Variable] = []

    @classmethod
    def from_envp(cls, envp: Iterable[str] | None) -> Environment:
        """Build an environment from ``KEY=VALUE`` strings, skipping entries without ``=``."""
        env = cls()
        for entry in envp or ():
            key, sep, value = entry.partition("=")
            if not sep:
                continue
            env._vars.append(Variable(key, value))
        return env

    def find(self, key: str | None) -> Variable | None:
        """Return the first variable named ``key``, or None."""
        if key is None:
            return None
        return next((var for var in self._vars if var.key == key), None)

    def get(self, key: str | None) -> str | None:
        """Return the value of ``key``, or None if unset or valueless."""
        var = self.find(key)
        return var.value if var is not None else None

    def set(self, key: str | None, value: str | None) -> None:
        """Create or update ``key`` and mark it exported.

        A None ``value`` leaves an existing value untouched.
        """
        if not key:
            return
        var = self.find(key)
        if var is None:
            self._vars.append(Variable(key, value))
            return
        var.exported = True
        if value is not None:
            var.value = value

    def unset(self, key: str | None) -> None:
        """Remove the first variable named ``key`` if present."""
        var = self.find(key)
        if var is not None:
            self._vars.remove(var)

    def to_envp(self) -> list[str]:
        """Return exported variables that have a value as ``KEY=VALUE`` strings."""
        return [
            f"{var.key}={var.value}"
            for var in self._vars
            if var.exported and var.key and var.value is not None
        ]

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)