# src/specoracle/engine/expression_parser.py
"""Safe expression parser for guard and property predicates.

Uses Python's ast module to parse and evaluate specification expressions in
a restricted subset of Python. This is NOT eval() - it's a whitelist-based
parser.

The parser operates in two phases:
1. Parse-time validation: Reject forbidden constructs at construction
2. Evaluation: Execute the validated AST against a prestate or poststate
   context (a mapping of names such as receiver, args, result)

Specification files are data, not code. Expressions may read the values
they are given but must not call into them, so evaluating a guard can never
mutate the prestate it is judging.
"""

from __future__ import annotations

import ast
import operator
from collections.abc import Iterable, Mapping
from typing import Any, cast


class ExpressionSecurityError(Exception):
    """Raised when expression contains forbidden constructs."""


class ExpressionSyntaxError(Exception):
    """Raised when expression is not valid Python syntax."""


class ExpressionEvaluationError(Exception):
    """Raised when expression evaluation fails at runtime.

    This wraps operational errors (missing names, AttributeError, IndexError,
    ZeroDivisionError, TypeError) that occur when evaluating a valid
    expression against concrete values.

    The original exception is chained via __cause__ for debugging.
    """


# Names bound in every prestate context
PRESTATE_NAMES: frozenset[str] = frozenset({"receiver", "args"})

# Poststate adds the return value
POSTSTATE_NAMES: frozenset[str] = PRESTATE_NAMES | {"result"}

_LITERAL_NAMES: dict[str, Any] = {"True": True, "False": False, "None": None}

# Pure builtins callable from expressions
_FUNCTIONS: dict[str, Any] = {
    "len": len,
    "abs": abs,
    "min": min,
    "max": max,
}

# Allowed comparison operators
_COMPARISON_OPS: dict[type[ast.cmpop], Any] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}

# Allowed binary operators
_BINARY_OPS: dict[type[ast.operator], Any] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

# Allowed unary operators
_UNARY_OPS: dict[type[ast.unaryop], Any] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}


class _ExpressionValidator(ast.NodeVisitor):
    """AST visitor that validates expressions against the whitelist.

    Collects every problem instead of stopping at the first, so one
    ExpressionSecurityError reports them all.
    """

    def __init__(self, names: frozenset[str]) -> None:
        self.errors: list[str] = []
        self._names = names

    def _is_context_derived(self, node: ast.expr) -> bool:
        """Check if node reads from the evaluation context.

        Handles: args, args[0], receiver.items, receiver.items[0].key
        """
        if isinstance(node, ast.Name):
            return node.id in self._names
        if isinstance(node, ast.Subscript | ast.Attribute):
            return self._is_context_derived(node.value)
        return False

    def visit_Name(self, node: ast.Name) -> None:
        """Allow only context names and literal names."""
        if node.id not in self._names and node.id not in _LITERAL_NAMES:
            self.errors.append(f"Forbidden name: {node.id!r}")

    def visit_Subscript(self, node: ast.Subscript) -> None:
        """Allow subscript access on context-derived data only."""
        if isinstance(node.slice, ast.Slice):
            self.errors.append("Slice syntax (e.g., [1:3]) is forbidden")
        if not self._is_context_derived(node.value):
            self.errors.append(f"Subscript access is only allowed on context data; got subscript on {ast.dump(node.value)}")
        self.generic_visit(node)

    def visit_Slice(self, node: ast.Slice) -> None:
        """Reject slice syntax."""
        self.errors.append("Slice syntax (e.g., [1:3]) is forbidden")

    def visit_Attribute(self, node: ast.Attribute) -> None:
        """Allow reading public attributes of context-derived data."""
        if node.attr.startswith("_"):
            self.errors.append(f"Forbidden private attribute access: {node.attr!r}")
        elif not self._is_context_derived(node.value):
            self.errors.append(f"Attribute access is only allowed on context data; got {node.attr!r}")
        self.generic_visit(node)

    def visit_Call(self, node: ast.Call) -> None:
        """Allow only calls to whitelisted builtins by bare name."""
        if not (isinstance(node.func, ast.Name) and node.func.id in _FUNCTIONS):
            self.errors.append(f"Forbidden function call: {ast.dump(node.func)}")
            self.generic_visit(node)
            return
        if node.keywords:
            self.errors.append(f"{node.func.id}() does not accept keyword arguments")
        if not node.args:
            self.errors.append(f"{node.func.id}() requires at least one argument")
        # Skip visiting func: the builtin name is not a context name
        for arg in node.args:
            self.visit(arg)

    def visit_Compare(self, node: ast.Compare) -> None:
        """Validate comparison operators."""
        all_operands = [node.left, *node.comparators]

        for i, op in enumerate(node.ops):
            if type(op) not in _COMPARISON_OPS:
                self.errors.append(f"Forbidden comparison operator: {type(op).__name__}")
            # Restrict is/is not to None checks only
            elif isinstance(op, ast.Is | ast.IsNot):
                left_operand = all_operands[i]
                right_operand = all_operands[i + 1]
                if not (_is_none_constant(left_operand) or _is_none_constant(right_operand)):
                    self.errors.append("'is' and 'is not' operators are only allowed for None checks")
        self.generic_visit(node)

    def visit_BinOp(self, node: ast.BinOp) -> None:
        """Validate binary operators."""
        if type(node.op) not in _BINARY_OPS:
            self.errors.append(f"Forbidden binary operator: {type(node.op).__name__}")
        self.generic_visit(node)

    def visit_UnaryOp(self, node: ast.UnaryOp) -> None:
        """Validate unary operators."""
        if type(node.op) not in _UNARY_OPS:
            self.errors.append(f"Forbidden unary operator: {type(node.op).__name__}")
        self.generic_visit(node)

    def visit_Constant(self, node: ast.Constant) -> None:
        """Allow literals: strings, numbers, booleans, None."""
        if node.value is None or isinstance(node.value, str | int | float | bool):
            return
        self.errors.append(f"Forbidden constant type: {type(node.value).__name__}")

    def visit_Dict(self, node: ast.Dict) -> None:
        """Allow dict literals for membership checks, but reject spread syntax."""
        for key in node.keys:
            if key is None:
                self.errors.append("Dict spread (**) is forbidden")
        self.generic_visit(node)

    # Explicitly forbidden constructs

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self.errors.append("Lambda expressions are forbidden")

    def visit_ListComp(self, node: ast.ListComp) -> None:
        self.errors.append("List comprehensions are forbidden")

    def visit_DictComp(self, node: ast.DictComp) -> None:
        self.errors.append("Dict comprehensions are forbidden")

    def visit_SetComp(self, node: ast.SetComp) -> None:
        self.errors.append("Set comprehensions are forbidden")

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> None:
        self.errors.append("Generator expressions are forbidden")

    def visit_Await(self, node: ast.Await) -> None:
        self.errors.append("Await expressions are forbidden")

    def visit_Yield(self, node: ast.Yield) -> None:
        self.errors.append("Yield expressions are forbidden")

    def visit_YieldFrom(self, node: ast.YieldFrom) -> None:
        self.errors.append("Yield from expressions are forbidden")

    def visit_NamedExpr(self, node: ast.NamedExpr) -> None:
        self.errors.append("Assignment expressions (:=) are forbidden")

    def visit_JoinedStr(self, node: ast.JoinedStr) -> None:
        self.errors.append("F-strings are forbidden")

    def visit_TemplateStr(self, node: ast.AST) -> None:
        # ast.TemplateStr only exists on Python 3.14+
        self.errors.append("Template strings are forbidden")

    def visit_Starred(self, node: ast.Starred) -> None:
        self.errors.append("Starred expressions (*) are forbidden")


def _is_none_constant(node: ast.expr) -> bool:
    """Check if node is a None literal (ast.Constant or ast.Name)."""
    if isinstance(node, ast.Constant) and node.value is None:
        return True
    return isinstance(node, ast.Name) and node.id == "None"


class _ExpressionEvaluator(ast.NodeVisitor):
    """AST visitor that evaluates validated expressions."""

    def __init__(self, context: Mapping[str, Any]) -> None:
        self._context = context

    def visit_Expression(self, node: ast.Expression) -> Any:
        return self.visit(node.body)

    def visit_Name(self, node: ast.Name) -> Any:
        if node.id in _LITERAL_NAMES:
            return _LITERAL_NAMES[node.id]
        try:
            return self._context[node.id]
        except KeyError as e:
            available = sorted(self._context)
            msg = f"Name '{node.id}' is not bound in this context. Available names: {available}"
            raise ExpressionEvaluationError(msg) from e

    def visit_Constant(self, node: ast.Constant) -> Any:
        return node.value

    def visit_Subscript(self, node: ast.Subscript) -> Any:
        value = self.visit(node.value)
        key = self.visit(node.slice)
        try:
            return value[key]
        except KeyError as e:
            if isinstance(value, dict):
                msg = f"Key '{key}' not found. Available keys: {list(value.keys())}"
            else:
                msg = f"Key '{key}' not found in {type(value).__name__}"
            raise ExpressionEvaluationError(msg) from e
        except IndexError as e:
            msg = f"Index {key} out of range for {type(value).__name__} of length {len(value)}"
            raise ExpressionEvaluationError(msg) from e
        except TypeError as e:
            msg = f"Cannot access '{key}' on {type(value).__name__}: {e}"
            raise ExpressionEvaluationError(msg) from e

    def visit_Attribute(self, node: ast.Attribute) -> Any:
        value = self.visit(node.value)
        try:
            return getattr(value, node.attr)
        except AttributeError as e:
            msg = f"{type(value).__name__} has no attribute '{node.attr}'"
            raise ExpressionEvaluationError(msg) from e
        except Exception as e:
            # Properties are user code and may raise anything
            msg = f"reading '{node.attr}' on {type(value).__name__} raised {type(e).__name__}: {e}"
            raise ExpressionEvaluationError(msg) from e

    def visit_Call(self, node: ast.Call) -> Any:
        # Validation guarantees func is a whitelisted bare name
        name = cast(ast.Name, node.func).id
        func = _FUNCTIONS[name]
        args = [self.visit(arg) for arg in node.args]
        try:
            return func(*args)
        except (TypeError, ValueError) as e:
            msg = f"invalid argument to {name}(): {e}"
            raise ExpressionEvaluationError(msg) from e

    def visit_Compare(self, node: ast.Compare) -> Any:
        """Evaluate comparison chains."""
        left = self.visit(node.left)
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            right = self.visit(comparator)
            op_func = _COMPARISON_OPS[type(op)]
            try:
                if not op_func(left, right):
                    return False
            except TypeError as e:
                op_name = type(op).__name__
                msg = f"type error in comparison ({op_name}): cannot compare {type(left).__name__} and {type(right).__name__}"
                raise ExpressionEvaluationError(msg) from e
            left = right
        return True

    def visit_BoolOp(self, node: ast.BoolOp) -> Any:
        """Evaluate boolean operations (and, or) with short-circuiting."""
        if isinstance(node.op, ast.And):
            for value in node.values:
                result = self.visit(value)
                if not result:
                    return result
            return result
        for value in node.values:
            result = self.visit(value)
            if result:
                return result
        return result

    def visit_BinOp(self, node: ast.BinOp) -> Any:
        left = self.visit(node.left)
        right = self.visit(node.right)
        op_func = _BINARY_OPS[type(node.op)]
        try:
            return op_func(left, right)
        except ZeroDivisionError as e:
            msg = f"division by zero in {type(node.op).__name__} operation"
            raise ExpressionEvaluationError(msg) from e
        except TypeError as e:
            op_name = type(node.op).__name__
            msg = f"type error in {op_name}: cannot apply to {type(left).__name__} and {type(right).__name__}"
            raise ExpressionEvaluationError(msg) from e

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Any:
        operand = self.visit(node.operand)
        op_func = _UNARY_OPS[type(node.op)]
        try:
            return op_func(operand)
        except TypeError as e:
            msg = f"type error in unary {type(node.op).__name__}: cannot apply to {type(operand).__name__}"
            raise ExpressionEvaluationError(msg) from e

    def visit_List(self, node: ast.List) -> Any:
        return [self.visit(elt) for elt in node.elts]

    def visit_Tuple(self, node: ast.Tuple) -> Any:
        return tuple(self.visit(elt) for elt in node.elts)

    def visit_Dict(self, node: ast.Dict) -> Any:
        try:
            return {self.visit(k): self.visit(v) for k, v in zip(node.keys, node.values, strict=True) if k is not None}
        except TypeError as e:
            raise ExpressionEvaluationError(f"cannot create dict literal: {e}") from e

    def visit_Set(self, node: ast.Set) -> Any:
        try:
            return {self.visit(elt) for elt in node.elts}
        except TypeError as e:
            raise ExpressionEvaluationError(f"cannot create set literal: {e}") from e

    def visit_IfExp(self, node: ast.IfExp) -> Any:
        if self.visit(node.test):
            return self.visit(node.body)
        return self.visit(node.orelse)


class ExpressionParser:
    """Safe expression parser for specification predicates.

    Parses and validates expressions at construction time, then evaluates
    them against a context mapping. Only a restricted subset of Python is
    allowed.

    Allowed operations:
    - Context names: receiver, args, result (poststate only), and any
      declared parameter names
    - Subscripts and public attribute reads on context data:
      args[0], receiver.items, receiver.items[-1].key
    - Calls to len(), abs(), min(), max()
    - Comparisons, membership, boolean operators, ternaries
    - is / is not (for None checks only)
    - Literals and list/tuple/dict/set displays
    - Basic arithmetic: +, -, *, /, //, %

    Forbidden operations:
    - Any other function or method call
    - Private attributes (leading underscore)
    - Lambdas, comprehensions, :=, await, yield, f-strings, slices

    Example:
        parser = ExpressionParser("len(receiver.items) > 0")
        parser.evaluate({"receiver": stack, "args": ()})
    """

    def __init__(self, expression: str, names: Iterable[str] = PRESTATE_NAMES) -> None:
        """Parse and validate expression at construction time.

        Args:
            expression: The expression string to parse
            names: Context names the expression may reference

        Raises:
            ExpressionSecurityError: If expression contains forbidden constructs
            ExpressionSyntaxError: If expression is not valid Python syntax
        """
        self._expression = expression
        self._names = frozenset(names)

        try:
            self._ast = ast.parse(expression, mode="eval")
        except SyntaxError as e:
            msg = f"Invalid syntax: {e.msg}"
            raise ExpressionSyntaxError(msg) from e

        validator = _ExpressionValidator(self._names)
        validator.visit(self._ast)

        if validator.errors:
            raise ExpressionSecurityError("; ".join(validator.errors))

    @property
    def expression(self) -> str:
        """Return the original expression string."""
        return self._expression

    @property
    def names(self) -> frozenset[str]:
        return self._names

    def evaluate(self, context: Mapping[str, Any]) -> Any:
        """Evaluate expression against a context.

        Raises:
            ExpressionEvaluationError: If evaluation fails on these values
        """
        return _ExpressionEvaluator(context).visit(self._ast)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExpressionParser):
            return NotImplemented
        return self._expression == other._expression and self._names == other._names

    def __hash__(self) -> int:
        return hash((self._expression, self._names))

    def __repr__(self) -> str:
        return f"ExpressionParser({self._expression!r})"
