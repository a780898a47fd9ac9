# src/specoracle/engine/outcome_table.py
"""Expected outcome table for one invocation attempt.

Records the outcome of checking every precondition, guard/property pair and
guard/throws pair of an operation against one concrete prestate. Each row
records:

1. Whether the row's guard was satisfied
2. The property that must hold in the poststate, if any
3. The set of exceptions the call must raise, if any

The table is write-then-read. OperationConditions.check_prestate() folds in
every row, then the caller either asks is_invalid_prestate() or builds the
verdict handler with add_post_check_generator(). The resulting handler
classifies the real call as follows:

- Some row expects exceptions: raising a member of any recorded set is
  EXPECTED; raising anything else, or returning normally, is ERROR.
- No row's guard was satisfied: INVALID.
- Otherwise every recorded property must hold after a normal return,
  on top of whatever the baseline handler requires.

One table belongs to one attempt and is never shared, so it takes no locks.
"""

from __future__ import annotations

from specoracle.contracts.conditions import Predicate, ThrowsClause
from specoracle.contracts.errors import OutcomeTableSealedError
from specoracle.contracts.verdict import VerdictHandler
from specoracle.core.logging import get_logger

logger = get_logger(__name__)


class ExpectedOutcomeTable:
    """Append-only accumulator of per-row guard outcomes.

    Invariant: is_empty implies no satisfied guard, no post-conditions and
    no exception sets.

    Example:
        table = ExpectedOutcomeTable()
        table.add(True, size_shrinks, frozenset())
        if table.is_invalid_prestate():
            ...  # discard the attempt
        handler = table.add_post_check_generator(VerdictHandler.pass_through())
    """

    def __init__(self) -> None:
        self._is_empty = True
        self._has_satisfied_guard_expression = False
        self._post_conditions: list[Predicate] = []
        self._exception_sets: list[frozenset[ThrowsClause]] = []
        self._sealed = False

    @property
    def is_empty(self) -> bool:
        return self._is_empty

    @property
    def has_satisfied_guard_expression(self) -> bool:
        return self._has_satisfied_guard_expression

    @property
    def post_conditions(self) -> tuple[Predicate, ...]:
        return tuple(self._post_conditions)

    @property
    def exception_sets(self) -> tuple[frozenset[ThrowsClause], ...]:
        return tuple(self._exception_sets)

    @property
    def sealed(self) -> bool:
        return self._sealed

    def add(
        self,
        guard_satisfied: bool,
        property_expression: Predicate | None,
        throws: frozenset[ThrowsClause],
    ) -> None:
        """Fold the outcome of one specification row into the table.

        Args:
            guard_satisfied: Whether the row's property guard held in prestate
            property_expression: Property that must hold in poststate, if any
            throws: Exceptions expected because a throws guard held. Callers
                filter on the throws guard before calling, so a non-empty set
                is recorded whatever guard_satisfied says.

        Raises:
            OutcomeTableSealedError: If the verdict handler was already built
        """
        if self._sealed:
            raise OutcomeTableSealedError("Cannot add rows after the verdict handler has been built")

        # A row that contributes nothing still proves a specification was
        # consulted; an empty table can never be an invalid prestate.
        self._is_empty = False
        if guard_satisfied:
            if property_expression is not None:
                self._post_conditions.append(property_expression)
            self._has_satisfied_guard_expression = True
        if throws:
            self._exception_sets.append(frozenset(throws))

    def is_invalid_prestate(self) -> bool:
        """True if specifications exist but no guard held and no exception is expected.

        Call only after every row for the attempt has been added.
        """
        return not self._is_empty and not self._has_satisfied_guard_expression and not self._exception_sets

    def add_post_check_generator(self, baseline: VerdictHandler) -> VerdictHandler:
        """Build the verdict handler for this attempt.

        Precedence:
        - empty table: baseline unchanged
        - any expected exceptions: ExpectedException over all recorded sets
          (baseline discarded)
        - no satisfied guard: Invalid
        - recorded properties: PostCondition composed in front of baseline
        - otherwise: baseline unchanged

        Seals the table.
        """
        self._sealed = True
        handler = self._decide(baseline)
        logger.debug(
            "verdict_handler_built",
            kind=handler.kind.value,
            rows_empty=self._is_empty,
            satisfied_guard=self._has_satisfied_guard_expression,
            post_conditions=len(self._post_conditions),
            exception_sets=len(self._exception_sets),
        )
        return handler

    def _decide(self, baseline: VerdictHandler) -> VerdictHandler:
        if self._is_empty:
            return baseline

        # An expected exception makes any normal-return assertion meaningless
        if self._exception_sets:
            return VerdictHandler.expected_exception(self._exception_sets)

        if not self._has_satisfied_guard_expression:
            return VerdictHandler.invalid()

        if self._post_conditions:
            return VerdictHandler.post_condition(self._post_conditions, inner=baseline)

        return baseline

    def __repr__(self) -> str:
        return (
            f"ExpectedOutcomeTable(is_empty={self._is_empty}, "
            f"satisfied={self._has_satisfied_guard_expression}, "
            f"post_conditions={len(self._post_conditions)}, "
            f"exception_sets={len(self._exception_sets)})"
        )
