"""Specification clause types.

These types answer: "What does a specification promise about a call?"

Guards and properties are only seen through the Predicate protocol here;
the compiled implementations live in engine/predicates.py so that this
package stays a leaf with no engine dependencies.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Predicate(Protocol):
    """A boolean expression over a prestate or poststate context.

    evaluate() returns a real bool or raises SpecificationEvaluationError.
    It must never report a failure as False. parameters names the call's
    positional arguments so the caller can bind them in the context.
    """

    @property
    def description(self) -> str: ...

    @property
    def parameters(self) -> tuple[str, ...]: ...

    def evaluate(self, context: Mapping[str, Any]) -> bool: ...


def qualified_name(exception_type: type[BaseException]) -> str:
    """Return the dotted name used to report an exception type."""
    if exception_type.__module__ == "builtins":
        return exception_type.__qualname__
    return f"{exception_type.__module__}.{exception_type.__qualname__}"


@dataclass(frozen=True)
class ThrowsClause:
    """One exception type a specification requires, plus its justification.

    Equality and hashing use the exception type only, so two clauses for
    the same type with different comments collapse in a set.
    """

    exception_type: type[BaseException]
    comment: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not (isinstance(self.exception_type, type) and issubclass(self.exception_type, BaseException)):
            raise TypeError(f"ThrowsClause requires an exception class, got {self.exception_type!r}")

    @property
    def name(self) -> str:
        return qualified_name(self.exception_type)

    def matches(self, exception: BaseException) -> bool:
        """True if the thrown exception is an instance of this clause's type."""
        return isinstance(exception, self.exception_type)


@dataclass(frozen=True)
class GuardPropertyPair:
    """If guard holds in prestate, property must hold in poststate."""

    guard: Predicate
    property: Predicate


@dataclass(frozen=True)
class GuardThrowsPair:
    """If guard holds in prestate, the call must raise one member of throws.

    Invariant: throws is non-empty.
    """

    guard: Predicate
    throws: frozenset[ThrowsClause]

    def __post_init__(self) -> None:
        if not self.throws:
            raise ValueError("GuardThrowsPair requires at least one ThrowsClause")
        # Freeze whatever iterable the caller handed in
        object.__setattr__(self, "throws", frozenset(self.throws))
