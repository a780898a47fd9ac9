# src/specoracle/engine/verdicts.py
"""Classification of a real outcome against a verdict handler.

classify() is consulted exactly once per attempt, after the execution
collaborator has run the operation. Contract violations and invalid
invocations come back as Verdict data; nothing here raises for them.
"""

from __future__ import annotations

from typing import cast

from specoracle.contracts.enums import BehaviorType, CheckKind, OutcomeKind
from specoracle.contracts.errors import SpecificationEvaluationError
from specoracle.contracts.execution import ExecutionOutcome
from specoracle.contracts.verdict import Verdict, VerdictHandler
from specoracle.core.logging import get_logger
from specoracle.engine.predicates import poststate_context

logger = get_logger(__name__)


def classify(handler: VerdictHandler, outcome: ExecutionOutcome) -> Verdict:
    """Judge one real outcome.

    Args:
        handler: Handler produced by ExpectedOutcomeTable.add_post_check_generator()
        outcome: What the execution collaborator observed

    Returns:
        INVALID, EXPECTED, ERROR or PASS; ERROR verdicts name the unmet
        clause or the mismatched exception type
    """
    verdict = _classify(handler, outcome)
    logger.debug(
        "outcome_classified",
        handler=handler.kind.value,
        outcome=outcome.kind.value,
        behavior=verdict.behavior.value,
    )
    return verdict


def _classify(handler: VerdictHandler, outcome: ExecutionOutcome) -> Verdict:
    match handler.kind:
        case CheckKind.INVALID:
            return Verdict.invalid_invocation()
        case CheckKind.PASS_THROUGH:
            return _pass_through(handler, outcome)
        case CheckKind.EXPECTED_EXCEPTION:
            return _expected_exception(handler, outcome)
        case CheckKind.POST_CONDITION:
            return _post_condition(handler, outcome)
    raise AssertionError(f"Unhandled handler kind: {handler.kind!r}")


def _pass_through(handler: VerdictHandler, outcome: ExecutionOutcome) -> Verdict:
    if outcome.kind == OutcomeKind.NULL_RECEIVER:
        return Verdict.contract_violation("instance operation invoked without a receiver")
    if outcome.exception is not None:
        if isinstance(outcome.exception, tuple(handler.declared)):
            return Verdict.expected(outcome.exception)
        return Verdict.contract_violation("undeclared exception raised", exception=outcome.exception)
    return Verdict.passed()


def _expected_exception(handler: VerdictHandler, outcome: ExecutionOutcome) -> Verdict:
    expected = handler.expected_types()
    if outcome.kind == OutcomeKind.NULL_RECEIVER:
        return Verdict.contract_violation(
            "expected exception not raised: instance operation invoked without a receiver",
            expected=expected,
        )
    if outcome.exception is None:
        return Verdict.contract_violation("expected exception not raised", expected=expected)

    # Union across every recorded set
    for clauses in handler.exception_sets:
        if any(clause.matches(outcome.exception) for clause in clauses):
            return Verdict.expected(outcome.exception)
    return Verdict.contract_violation(
        "raised exception is not one of the expected types",
        exception=outcome.exception,
        expected=expected,
    )


def _post_condition(handler: VerdictHandler, outcome: ExecutionOutcome) -> Verdict:
    # __post_init__ guarantees a POST_CONDITION handler carries an inner handler
    inner = _classify(cast(VerdictHandler, handler.inner), outcome)
    # Properties only describe a normal return; an inner failure wins
    if inner.behavior == BehaviorType.ERROR or outcome.kind != OutcomeKind.NORMAL:
        return inner

    for prop in handler.properties:
        context = poststate_context(outcome.receiver, outcome.args, outcome.return_value, prop.parameters)
        try:
            holds = prop.evaluate(context)
        except SpecificationEvaluationError as e:
            return Verdict.contract_violation(f"post-condition could not be evaluated: {e}", clause=prop.description)
        if not holds:
            return Verdict.contract_violation("post-condition does not hold", clause=prop.description)
    return inner
