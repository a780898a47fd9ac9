"""Status codes and kinds shared across the oracle's subsystem boundaries."""

from enum import StrEnum


class BehaviorType(StrEnum):
    """Final classification of one invocation attempt.

    Values:
        INVALID: Prestate satisfied no guard although specifications exist.
            Not a meaningful test and not a failure of the code under test.
        EXPECTED: The call raised an exception a specification required
            (or the baseline declared).
        ERROR: The real outcome contradicts a satisfied expectation.
        PASS: Nothing contradicted.
    """

    INVALID = "invalid"
    EXPECTED = "expected"
    ERROR = "error"
    PASS = "pass"


class CheckKind(StrEnum):
    """Tag of a VerdictHandler variant."""

    PASS_THROUGH = "pass_through"
    INVALID = "invalid"
    EXPECTED_EXCEPTION = "expected_exception"
    POST_CONDITION = "post_condition"


class OutcomeKind(StrEnum):
    """How the execution collaborator reports a finished call.

    NULL_RECEIVER is distinct from EXCEPTIONAL: calling an instance
    operation without a receiver is a violation reported by the executor,
    not an exception raised by the operation.
    """

    NORMAL = "normal"
    EXCEPTIONAL = "exceptional"
    NULL_RECEIVER = "null_receiver"
