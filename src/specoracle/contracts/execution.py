"""What the execution collaborator reports after running an operation once.

These types answer: "What actually happened when the call ran?"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from specoracle.contracts.enums import OutcomeKind


@dataclass(frozen=True)
class ExecutionOutcome:
    """Observed result of exactly one real invocation.

    Use the factory methods to create instances.

    receiver and args are the poststate values (the same objects the
    prestate was evaluated against, possibly mutated by the call).

    Invariants (enforced by __post_init__):
    - NORMAL carries no exception
    - EXCEPTIONAL carries an exception and no return value
    - NULL_RECEIVER carries neither an exception nor a return value
    """

    kind: OutcomeKind
    receiver: Any
    args: tuple[Any, ...]
    return_value: Any = None
    exception: BaseException | None = None

    def __post_init__(self) -> None:
        if self.kind == OutcomeKind.NORMAL and self.exception is not None:
            raise ValueError("NORMAL outcome must not carry an exception")
        if self.kind == OutcomeKind.EXCEPTIONAL:
            if self.exception is None:
                raise ValueError("EXCEPTIONAL outcome requires an exception")
            if self.return_value is not None:
                raise ValueError("EXCEPTIONAL outcome must not carry a return value")
        if self.kind == OutcomeKind.NULL_RECEIVER and (self.exception is not None or self.return_value is not None):
            raise ValueError("NULL_RECEIVER outcome must not carry a return value or exception")

    @classmethod
    def normal(cls, return_value: Any = None, *, receiver: Any = None, args: tuple[Any, ...] = ()) -> ExecutionOutcome:
        """The call returned normally."""
        return cls(kind=OutcomeKind.NORMAL, receiver=receiver, args=tuple(args), return_value=return_value)

    @classmethod
    def exceptional(
        cls,
        exception: BaseException,
        *,
        receiver: Any = None,
        args: tuple[Any, ...] = (),
    ) -> ExecutionOutcome:
        """The operation itself raised."""
        return cls(kind=OutcomeKind.EXCEPTIONAL, receiver=receiver, args=tuple(args), exception=exception)

    @classmethod
    def null_receiver(cls, *, args: tuple[Any, ...] = ()) -> ExecutionOutcome:
        """An instance operation was invoked without a receiver."""
        return cls(kind=OutcomeKind.NULL_RECEIVER, receiver=None, args=tuple(args))

    @property
    def raised(self) -> bool:
        return self.kind == OutcomeKind.EXCEPTIONAL
