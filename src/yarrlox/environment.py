"""Lexical environments: parent-linked scopes shared by closures."""

from __future__ import annotations

from typing import TYPE_CHECKING

from yarrlox.errors import AssignNonexistentError

if TYPE_CHECKING:
    from yarrlox.values import Value


class Environment:
    """A single scope level.

    Scopes form a tree through `enclosing`; the root is the global scope.
    Closures keep their defining scope alive simply by referencing it.
    """

    def __init__(self, enclosing: Environment | None = None) -> None:
        self.enclosing = enclosing
        self.values: dict[str, Value] = {}

    def child(self) -> Environment:
        return Environment(self)

    def define(self, name: str, value: Value) -> None:
        """Bind `name` in this scope, replacing any existing binding."""
        self.values[name] = value

    def get(self, name: str) -> Value:
        """Look `name` up through the chain; unknown names read as nil."""
        env: Environment | None = self
        while env is not None:
            if name in env.values:
                return env.values[name]
            env = env.enclosing
        return None

    def assign(self, name: str, value: Value) -> None:
        env: Environment | None = self
        while env is not None:
            if name in env.values:
                env.values[name] = value
                return
            env = env.enclosing
        raise AssignNonexistentError(name)

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            if env.enclosing is None:
                raise RuntimeError(
                    f"scope distance {distance} exceeds environment depth; "
                    "resolver and interpreter are out of sync"
                )
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Value:
        return self.ancestor(distance).values.get(name)

    def assign_at(self, distance: int, name: str, value: Value) -> None:
        self.ancestor(distance).values[name] = value
