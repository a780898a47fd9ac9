# src/specoracle/engine/predicates.py
"""Compiled guard and property predicates.

Both variants wrap an ExpressionParser and implement the Predicate protocol
from contracts/conditions.py. A Guard is evaluated against the prestate
(receiver, args); a PropertyExpression against the poststate, which also
binds result.

Evaluation never answers False on failure: any error raised while
evaluating, and any non-bool result, surfaces as
SpecificationEvaluationError.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from specoracle.contracts.errors import SpecificationEvaluationError
from specoracle.engine.expression_parser import (
    POSTSTATE_NAMES,
    PRESTATE_NAMES,
    ExpressionEvaluationError,
    ExpressionParser,
)


def prestate_context(receiver: Any, args: Sequence[Any], parameters: Sequence[str] = ()) -> dict[str, Any]:
    """Build the name bindings a guard is evaluated against.

    Declared parameter names are bound positionally; extra arguments are
    only reachable through args.
    """
    context: dict[str, Any] = {"receiver": receiver, "args": tuple(args)}
    context.update(zip(parameters, args, strict=False))
    return context


def poststate_context(
    receiver: Any,
    args: Sequence[Any],
    result: Any,
    parameters: Sequence[str] = (),
) -> dict[str, Any]:
    """Build the name bindings a property is evaluated against."""
    context = prestate_context(receiver, args, parameters)
    context["result"] = result
    return context


@dataclass(frozen=True)
class _CompiledPredicate:
    """Shared evaluation for Guard and PropertyExpression.

    parser is None only for a guard that always holds. parameters are the
    declared names bound positionally to the call's arguments.
    """

    description: str
    parser: ExpressionParser | None
    parameters: tuple[str, ...] = ()

    @property
    def expression(self) -> str:
        return "True" if self.parser is None else self.parser.expression

    def evaluate(self, context: Mapping[str, Any]) -> bool:
        if self.parser is None:
            return True
        try:
            value = self.parser.evaluate(context)
        except ExpressionEvaluationError as e:
            raise SpecificationEvaluationError(self.parser.expression, str(e)) from e
        except Exception as e:
            # User-defined __eq__/__len__/__contains__ run inside the evaluator
            raise SpecificationEvaluationError(self.parser.expression, f"{type(e).__name__}: {e}") from e
        if not isinstance(value, bool):
            raise SpecificationEvaluationError(
                self.parser.expression,
                f"expected a bool, got {type(value).__name__}",
            )
        return value


@dataclass(frozen=True)
class Guard(_CompiledPredicate):
    """Boolean predicate over the prestate that gates a specification clause."""

    @classmethod
    def compile(cls, expression: str, *, description: str | None = None, parameters: Sequence[str] = ()) -> Guard:
        """Compile guard text.

        Raises:
            ExpressionSecurityError: If expression contains forbidden constructs
            ExpressionSyntaxError: If expression is not valid Python syntax
        """
        parser = ExpressionParser(expression, names=PRESTATE_NAMES | set(parameters))
        return cls(description=description or expression, parser=parser, parameters=tuple(parameters))

    @classmethod
    def always(cls, description: str = "always") -> Guard:
        """Guard of a clause that declares no condition."""
        return cls(description=description, parser=None)


@dataclass(frozen=True)
class PropertyExpression(_CompiledPredicate):
    """Boolean predicate that must hold in the poststate of a normal return."""

    def __post_init__(self) -> None:
        if self.parser is None:
            raise ValueError("PropertyExpression requires an expression")

    @classmethod
    def compile(
        cls,
        expression: str,
        *,
        description: str | None = None,
        parameters: Sequence[str] = (),
    ) -> PropertyExpression:
        """Compile property text; may reference result.

        Raises:
            ExpressionSecurityError: If expression contains forbidden constructs
            ExpressionSyntaxError: If expression is not valid Python syntax
        """
        parser = ExpressionParser(expression, names=POSTSTATE_NAMES | set(parameters))
        return cls(description=description or expression, parser=parser, parameters=tuple(parameters))
