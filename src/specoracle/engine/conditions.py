# src/specoracle/engine/conditions.py
"""Per-operation specification catalog and prestate evaluation.

OperationConditions is the immutable, already-flattened set of clauses for
one operation. It is shared read-only across attempts; every call to
check_prestate() builds a fresh ExpectedOutcomeTable owned by the caller.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from specoracle.contracts.conditions import GuardPropertyPair, GuardThrowsPair, Predicate
from specoracle.core.logging import get_logger
from specoracle.engine.outcome_table import ExpectedOutcomeTable
from specoracle.engine.predicates import prestate_context

logger = get_logger(__name__)


@dataclass(frozen=True)
class OperationConditions:
    """All clauses that govern one operation, merged across its supertypes.

    Attributes:
        operation: Qualified name of the operation (e.g. "pkg.mod.Stack.pop")
        parameters: Names bound positionally to the call's arguments
        preconditions: Guards that must all hold for the call to be valid
        guard_property_pairs: Properties expected when their guard holds
        guard_throws_pairs: Exceptions expected when their guard holds
    """

    operation: str
    parameters: tuple[str, ...] = ()
    preconditions: tuple[Predicate, ...] = ()
    guard_property_pairs: tuple[GuardPropertyPair, ...] = ()
    guard_throws_pairs: tuple[GuardThrowsPair, ...] = ()

    @classmethod
    def empty(cls, operation: str) -> OperationConditions:
        """Conditions for an operation with no specifications."""
        return cls(operation=operation)

    @property
    def is_empty(self) -> bool:
        return not (self.preconditions or self.guard_property_pairs or self.guard_throws_pairs)

    def merge(self, *others: OperationConditions) -> OperationConditions:
        """Concatenate clauses from other declarations, keeping order.

        Parameter names come from the first declaration that names any;
        an overriding operation's names win over its supertypes'.
        """
        parameters = self.parameters
        preconditions = list(self.preconditions)
        property_pairs = list(self.guard_property_pairs)
        throws_pairs = list(self.guard_throws_pairs)
        for other in others:
            if not parameters:
                parameters = other.parameters
            preconditions.extend(other.preconditions)
            property_pairs.extend(other.guard_property_pairs)
            throws_pairs.extend(other.guard_throws_pairs)
        return OperationConditions(
            operation=self.operation,
            parameters=parameters,
            preconditions=tuple(preconditions),
            guard_property_pairs=tuple(property_pairs),
            guard_throws_pairs=tuple(throws_pairs),
        )

    def check_prestate(self, receiver: Any, args: Sequence[Any]) -> ExpectedOutcomeTable:
        """Evaluate every clause against one concrete prestate.

        Preconditions fold one row (all held, no property, no exceptions).
        Each guard/property pair folds one row; its guard only counts as
        satisfied if the preconditions held too. Each guard/throws pair
        folds one row carrying its exception set when its guard holds, or
        a no-op row otherwise; throws guards are evaluated independently
        of preconditions and property guards.

        Each guard sees the arguments under the parameter names it was
        compiled with, so clauses inherited from a supertype keep working
        when the overriding operation names its parameters differently.

        Args:
            receiver: Receiver object, or None for constructors and static operations
            args: Positional arguments of the call

        Returns:
            A fresh table holding one row per consulted clause

        Raises:
            SpecificationEvaluationError: If any guard fails to evaluate.
                The attempt should be discarded.
        """
        contexts: dict[tuple[str, ...], dict[str, Any]] = {}

        def holds(guard: Predicate) -> bool:
            parameters = tuple(guard.parameters)
            if parameters not in contexts:
                contexts[parameters] = prestate_context(receiver, args, parameters)
            return guard.evaluate(contexts[parameters])

        table = ExpectedOutcomeTable()

        preconditions_hold = True
        if self.preconditions:
            # Evaluate all of them: a later failing precondition must still surface
            outcomes = [holds(guard) for guard in self.preconditions]
            preconditions_hold = all(outcomes)
            table.add(preconditions_hold, None, frozenset())
            logger.debug("precondition_row", operation=self.operation, satisfied=preconditions_hold)

        for pair in self.guard_property_pairs:
            satisfied = holds(pair.guard) and preconditions_hold
            table.add(satisfied, pair.property if satisfied else None, frozenset())
            logger.debug(
                "property_row",
                operation=self.operation,
                guard=pair.guard.description,
                satisfied=satisfied,
            )

        for throws_pair in self.guard_throws_pairs:
            triggered = holds(throws_pair.guard)
            # A pair that was consulted keeps the table non-empty even when its guard fails
            table.add(False, None, throws_pair.throws if triggered else frozenset())
            logger.debug(
                "throws_row",
                operation=self.operation,
                guard=throws_pair.guard.description,
                triggered=triggered,
                expected=sorted(clause.name for clause in throws_pair.throws),
            )

        return table
