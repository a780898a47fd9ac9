"""Shared contracts for cross-boundary data types.

Every dataclass, enum and TypedDict that crosses from the catalog to the
outcome table to the verdict handlers is defined here.

This package is a LEAF MODULE with no outbound dependencies to core/engine.

Import patterns:
    from specoracle.contracts import ThrowsClause, VerdictHandler, Verdict
"""

from specoracle.contracts.conditions import (
    GuardPropertyPair,
    GuardThrowsPair,
    Predicate,
    ThrowsClause,
    qualified_name,
)
from specoracle.contracts.enums import BehaviorType, CheckKind, OutcomeKind
from specoracle.contracts.errors import (
    OutcomeTableSealedError,
    SpecificationEvaluationError,
    SpecificationLoadError,
    ViolationReason,
)
from specoracle.contracts.execution import ExecutionOutcome
from specoracle.contracts.verdict import Verdict, VerdictHandler

__all__ = [
    "BehaviorType",
    "CheckKind",
    "ExecutionOutcome",
    "GuardPropertyPair",
    "GuardThrowsPair",
    "OutcomeKind",
    "OutcomeTableSealedError",
    "Predicate",
    "SpecificationEvaluationError",
    "SpecificationLoadError",
    "ThrowsClause",
    "Verdict",
    "VerdictHandler",
    "ViolationReason",
    "qualified_name",
]
