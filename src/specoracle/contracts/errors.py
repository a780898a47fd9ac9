"""Error types and structured reason payloads.

Only genuine failures are exceptions here. Contract violations and invalid
invocations are ordinary Verdict data (see contracts/verdict.py).
"""

from typing import NotRequired, TypedDict


class ViolationReason(TypedDict):
    """Schema for the explanation attached to an ERROR verdict."""

    rule: str  # Human-readable rule that was broken
    clause: NotRequired[str]  # Description of the unmet property
    exception_type: NotRequired[str]  # Qualified name of the mismatched exception
    expected: NotRequired[list[str]]  # Exception types that would have been accepted


class SpecificationEvaluationError(Exception):
    """Raised when a guard or property predicate itself fails to evaluate.

    Never coerced to False. Aborts classification for the current attempt
    only; the generator discards the attempt and continues.

    The underlying error is chained via __cause__.
    """

    def __init__(self, expression: str, message: str) -> None:
        self.expression = expression
        super().__init__(f"Evaluation of {expression!r} failed: {message}")


class SpecificationLoadError(Exception):
    """Raised when a specification document cannot be turned into conditions.

    Covers malformed documents, unresolvable exception types and
    expressions rejected by the parser.
    """

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{source}: {message}")


class OutcomeTableSealedError(Exception):
    """Raised when a row is added to a table that already produced its handler.

    A table is write-then-read: every row must be folded in before the
    verdict handler is built.
    """
