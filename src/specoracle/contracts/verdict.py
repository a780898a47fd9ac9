"""Verdict handlers and verdicts.

These types answer: "How must this invocation be judged?"

VerdictHandler is a tagged union built before the call runs. Verdict is
what classifying the real outcome against a handler produces. Both are
frozen; use the factory methods to create instances.
"""

from __future__ import annotations

from dataclasses import dataclass

from specoracle.contracts.conditions import Predicate, ThrowsClause, qualified_name
from specoracle.contracts.enums import BehaviorType, CheckKind
from specoracle.contracts.errors import ViolationReason


@dataclass(frozen=True)
class VerdictHandler:
    """One of {PassThrough, Invalid, ExpectedException, PostCondition}.

    Payload per kind:
    - PASS_THROUGH: declared (exception types the baseline accepts)
    - INVALID: nothing
    - EXPECTED_EXCEPTION: exception_sets, one non-empty set per satisfied
      throws guard, in the order they were recorded
    - POST_CONDITION: properties (non-empty) and inner, the handler the
      properties are composed in front of

    Invariants (enforced by __post_init__):
    - Fields outside a kind's payload stay at their empty defaults
    - EXPECTED_EXCEPTION has at least one set and no empty set
    - POST_CONDITION has at least one property and an inner handler
    """

    kind: CheckKind
    declared: frozenset[type[BaseException]] = frozenset()
    exception_sets: tuple[frozenset[ThrowsClause], ...] = ()
    properties: tuple[Predicate, ...] = ()
    inner: VerdictHandler | None = None

    def __post_init__(self) -> None:
        """Validate that each kind carries exactly its own payload."""
        if self.declared and self.kind != CheckKind.PASS_THROUGH:
            raise ValueError(f"{self.kind.value} handler must not declare exceptions")

        if self.kind == CheckKind.EXPECTED_EXCEPTION:
            if not self.exception_sets:
                raise ValueError("EXPECTED_EXCEPTION requires at least one exception set")
            if any(not s for s in self.exception_sets):
                raise ValueError("EXPECTED_EXCEPTION exception sets must be non-empty")
        elif self.exception_sets:
            raise ValueError(f"{self.kind.value} handler must not carry exception sets")

        if self.kind == CheckKind.POST_CONDITION:
            if not self.properties:
                raise ValueError("POST_CONDITION requires at least one property")
            if self.inner is None:
                raise ValueError("POST_CONDITION requires an inner handler")
        elif self.properties or self.inner is not None:
            raise ValueError(f"{self.kind.value} handler must not carry properties or an inner handler")

    @classmethod
    def pass_through(cls, declared: frozenset[type[BaseException]] | None = None) -> VerdictHandler:
        """Baseline judgment when no specification governs the call.

        Args:
            declared: Exception types that count as EXPECTED rather than ERROR.
        """
        return cls(kind=CheckKind.PASS_THROUGH, declared=frozenset(declared or ()))

    @classmethod
    def invalid(cls) -> VerdictHandler:
        """Prestate satisfied no guard; the real outcome is irrelevant."""
        return cls(kind=CheckKind.INVALID)

    @classmethod
    def expected_exception(cls, exception_sets: list[frozenset[ThrowsClause]]) -> VerdictHandler:
        """The call must raise a member of at least one of the sets."""
        return cls(
            kind=CheckKind.EXPECTED_EXCEPTION,
            exception_sets=tuple(frozenset(s) for s in exception_sets),
        )

    @classmethod
    def post_condition(cls, properties: list[Predicate], inner: VerdictHandler) -> VerdictHandler:
        """Check properties in the poststate after inner has been satisfied."""
        return cls(kind=CheckKind.POST_CONDITION, properties=tuple(properties), inner=inner)

    def expected_types(self) -> list[str]:
        """Names of every exception type accepted across all recorded sets."""
        names = {clause.name for clauses in self.exception_sets for clause in clauses}
        return sorted(names)


@dataclass(frozen=True)
class Verdict:
    """Classification of one invocation attempt.

    ERROR verdicts carry a reason naming the unmet clause or the mismatched
    exception type. Other behaviors carry no reason.
    """

    behavior: BehaviorType
    reason: ViolationReason | None = None
    exception_type: str | None = None

    def __post_init__(self) -> None:
        if self.behavior == BehaviorType.ERROR and self.reason is None:
            raise ValueError("ERROR verdict requires a reason")
        if self.behavior != BehaviorType.ERROR and self.reason is not None:
            raise ValueError(f"{self.behavior.value} verdict must not carry a reason")

    @classmethod
    def passed(cls) -> Verdict:
        return cls(behavior=BehaviorType.PASS)

    @classmethod
    def expected(cls, exception: BaseException) -> Verdict:
        return cls(behavior=BehaviorType.EXPECTED, exception_type=qualified_name(type(exception)))

    @classmethod
    def invalid_invocation(cls) -> Verdict:
        return cls(behavior=BehaviorType.INVALID)

    @classmethod
    def contract_violation(
        cls,
        rule: str,
        *,
        clause: str | None = None,
        exception: BaseException | None = None,
        expected: list[str] | None = None,
    ) -> Verdict:
        """Build an ERROR verdict.

        Args:
            rule: Which rule was broken, in words
            clause: Description of the property that did not hold
            exception: The exception actually raised, if any
            expected: Exception types the handler would have accepted
        """
        reason: ViolationReason = {"rule": rule}
        exception_type = None
        if clause is not None:
            reason["clause"] = clause
        if exception is not None:
            exception_type = qualified_name(type(exception))
            reason["exception_type"] = exception_type
        if expected is not None:
            reason["expected"] = list(expected)
        return cls(behavior=BehaviorType.ERROR, reason=reason, exception_type=exception_type)

    @property
    def is_error(self) -> bool:
        return self.behavior == BehaviorType.ERROR

    @property
    def failed_clause(self) -> str | None:
        if self.reason is None:
            return None
        return self.reason.get("clause")
