# tests/property/engine/test_expression_parser_properties.py
"""Property-based tests for expression parser security and correctness.

Security Properties:
- Unknown names and calls always raise ExpressionSecurityError
- Arbitrary text never escapes as anything but a parser error

Correctness Properties:
- Comparisons over bound arguments agree with Python
- Evaluation is deterministic
"""

from __future__ import annotations

import keyword

import pytest
from hypothesis import given
from hypothesis import strategies as st

from specoracle.engine.expression_parser import (
    POSTSTATE_NAMES,
    ExpressionParser,
    ExpressionSecurityError,
    ExpressionSyntaxError,
)
from tests.fixtures.stack import Stack
from tests.property.settings import QUICK_SETTINGS, STANDARD_SETTINGS

# =============================================================================
# Strategies
# =============================================================================

_RESERVED = {"receiver", "args", "result", "True", "False", "None", "len", "abs", "min", "max"}

identifiers = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,11}", fullmatch=True).filter(
    lambda s: s not in _RESERVED and not keyword.iskeyword(s)
)

small_ints = st.integers(min_value=-1000, max_value=1000)

comparison_ops = st.sampled_from(["==", "!=", "<", ">", "<=", ">="])

_PY_COMPARE = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
}

printable_text = st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=40)


class TestSecurityProperties:
    @given(name=identifiers)
    @STANDARD_SETTINGS
    def test_unbound_names_rejected(self, name: str) -> None:
        with pytest.raises(ExpressionSecurityError, match="Forbidden name"):
            ExpressionParser(f"{name} == 1")

    @given(name=identifiers)
    @STANDARD_SETTINGS
    def test_declared_names_accepted(self, name: str) -> None:
        parser = ExpressionParser(f"{name} == 1", names=POSTSTATE_NAMES | {name})
        assert parser.evaluate({name: 1}) is True

    @given(name=identifiers)
    @STANDARD_SETTINGS
    def test_method_calls_rejected(self, name: str) -> None:
        with pytest.raises(ExpressionSecurityError, match="Forbidden function call"):
            ExpressionParser(f"receiver.{name}()")

    @given(name=identifiers)
    @QUICK_SETTINGS
    def test_private_attributes_rejected(self, name: str) -> None:
        with pytest.raises(ExpressionSecurityError, match="private attribute"):
            ExpressionParser(f"receiver._{name} is None")

    @given(text=printable_text)
    @STANDARD_SETTINGS
    def test_arbitrary_text_fails_only_with_parser_errors(self, text: str) -> None:
        try:
            ExpressionParser(text, names=POSTSTATE_NAMES)
        except (ExpressionSyntaxError, ExpressionSecurityError):
            pass


class TestEvaluationProperties:
    @given(a=small_ints, b=small_ints, op=comparison_ops)
    @STANDARD_SETTINGS
    def test_argument_comparison_matches_python(self, a: int, b: int, op: str) -> None:
        parser = ExpressionParser(f"args[0] {op} args[1]")
        assert parser.evaluate({"receiver": None, "args": (a, b)}) is _PY_COMPARE[op](a, b)

    @given(items=st.lists(small_ints, max_size=10))
    @STANDARD_SETTINGS
    def test_receiver_state_reads(self, items: list[int]) -> None:
        parser = ExpressionParser("len(receiver.items) == args[0]")
        assert parser.evaluate({"receiver": Stack(*items), "args": (len(items),)}) is True

    @given(items=st.lists(small_ints, min_size=1, max_size=10))
    @STANDARD_SETTINGS
    def test_result_bound_in_poststate(self, items: list[int]) -> None:
        parser = ExpressionParser("result == max(receiver.items)", names=POSTSTATE_NAMES)
        stack = Stack(*items)
        assert parser.evaluate({"receiver": stack, "args": (), "result": max(items)}) is True

    @given(a=small_ints, b=small_ints)
    @STANDARD_SETTINGS
    def test_evaluation_is_deterministic(self, a: int, b: int) -> None:
        parser = ExpressionParser("abs(args[0] - args[1]) <= 10 or args[0] is None")
        context = {"receiver": None, "args": (a, b)}
        assert parser.evaluate(context) == parser.evaluate(context)
