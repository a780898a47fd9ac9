# src/specoracle/engine/__init__.py
"""Oracle engine: prestate evaluation, outcome tables and verdicts.

This module provides the decision logic of the oracle:
- ExpressionParser: Whitelisted expression language for predicates
- Guard / PropertyExpression: Compiled prestate and poststate predicates
- OperationConditions: Immutable per-operation clause catalog
- ExpectedOutcomeTable: Per-attempt accumulator and handler decision
- classify: Judges a real outcome against a verdict handler

Example:
    from specoracle.contracts import ExecutionOutcome, VerdictHandler
    from specoracle.engine import classify

    table = conditions.check_prestate(stack, ())
    if table.is_invalid_prestate():
        return  # not a meaningful test
    handler = table.add_post_check_generator(VerdictHandler.pass_through())
    outcome = run_once(stack.pop)  # execution collaborator
    verdict = classify(handler, outcome)
"""

from specoracle.engine.conditions import OperationConditions
from specoracle.engine.expression_parser import (
    ExpressionEvaluationError,
    ExpressionParser,
    ExpressionSecurityError,
    ExpressionSyntaxError,
)
from specoracle.engine.outcome_table import ExpectedOutcomeTable
from specoracle.engine.predicates import Guard, PropertyExpression, poststate_context, prestate_context
from specoracle.engine.verdicts import classify

__all__ = [
    "ExpectedOutcomeTable",
    "ExpressionEvaluationError",
    "ExpressionParser",
    "ExpressionSecurityError",
    "ExpressionSyntaxError",
    "Guard",
    "OperationConditions",
    "PropertyExpression",
    "classify",
    "poststate_context",
    "prestate_context",
]
