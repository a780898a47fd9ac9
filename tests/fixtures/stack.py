# tests/fixtures/stack.py
"""Small class hierarchy used as the operation under specification.

Specifications in tests refer to these by qualified name, e.g.
"tests.fixtures.stack.Stack.pop".
"""

from __future__ import annotations

from typing import Any


class StackFullError(Exception):
    """Raised by BoundedStack.push when capacity is reached."""


class Stack:
    def __init__(self, *items: Any) -> None:
        self.items = list(items)

    @property
    def size(self) -> int:
        return len(self.items)

    def push(self, item: Any) -> None:
        self.items.append(item)

    def pop(self) -> Any:
        return self.items.pop()

    def peek(self) -> Any:
        return self.items[-1]


class BoundedStack(Stack):
    def __init__(self, capacity: int, *items: Any) -> None:
        if capacity < 0:
            raise ValueError("capacity must be non-negative")
        super().__init__(*items)
        self.capacity = capacity

    def push(self, item: Any) -> None:
        if len(self.items) >= self.capacity:
            raise StackFullError(f"capacity {self.capacity} reached")
        super().push(item)


class Exploding:
    """Receiver whose attribute read fails, to exercise evaluation errors."""

    @property
    def items(self) -> list[Any]:
        raise RuntimeError("cannot read items")
