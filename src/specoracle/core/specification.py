# src/specoracle/core/specification.py
"""
Specification documents and their compilation into OperationConditions.

Documents are YAML (or JSON, which YAML accepts) validated with Pydantic.
Every expression is compiled and every exception name resolved at load
time, so a bad specification fails when it is loaded rather than in the
middle of a generation run.

Example YAML:
    specifications:
      - operation: "mypkg.stack.Stack.pop"
        preconditions:
          - description: "receiver exists"
            guard: "receiver is not None"
        throws:
          - description: "empty stack"
            guard: "len(receiver.items) == 0"
            exception: IndexError
        post:
          - description: "returns the former top"
            guard: "len(receiver.items) > 0"
            property: "result is not None"
"""

from __future__ import annotations

import builtins
import importlib
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from specoracle.contracts.conditions import GuardPropertyPair, GuardThrowsPair, ThrowsClause
from specoracle.contracts.errors import SpecificationLoadError
from specoracle.engine.conditions import OperationConditions
from specoracle.engine.expression_parser import ExpressionSecurityError, ExpressionSyntaxError
from specoracle.engine.predicates import Guard, PropertyExpression


class PreconditionSpec(BaseModel):
    """A guard that must hold for the call to be meaningful at all."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: str = ""
    guard: str


class ThrowsSpec(BaseModel):
    """Exceptions the call must raise when guard holds.

    A missing guard means the exception is always expected.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    description: str = ""
    guard: str | None = None
    exception: list[str] = Field(min_length=1)

    @field_validator("exception", mode="before")
    @classmethod
    def accept_single_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [v]
        return v


class PostSpec(BaseModel):
    """A property that must hold after a normal return when guard holds."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    description: str = ""
    guard: str | None = None
    condition: str = Field(alias="property")


class OperationSpec(BaseModel):
    """All clauses one declaration attaches to one operation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    operation: str
    parameters: list[str] = Field(default_factory=list)
    preconditions: list[PreconditionSpec] = Field(default_factory=list)
    throws: list[ThrowsSpec] = Field(default_factory=list)
    post: list[PostSpec] = Field(default_factory=list)

    @field_validator("operation")
    @classmethod
    def validate_operation_name(cls, v: str) -> str:
        """Operations are named module.Qualname[.member]."""
        if "." not in v or any(not part for part in v.split(".")):
            raise ValueError(f"operation must be a dotted qualified name, got {v!r}")
        return v

    @field_validator("parameters")
    @classmethod
    def validate_parameter_names(cls, v: list[str]) -> list[str]:
        reserved = {"receiver", "args", "result", "True", "False", "None"}
        for name in v:
            if not name.isidentifier():
                raise ValueError(f"parameter name {name!r} is not an identifier")
            if name in reserved:
                raise ValueError(f"parameter name {name!r} is reserved")
        if len(v) != len(set(v)):
            raise ValueError(f"parameter names must be unique: {v}")
        return v


class SpecificationDocument(BaseModel):
    """Top-level shape of a specification file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    specifications: list[OperationSpec] = Field(default_factory=list)


def resolve_exception_type(name: str) -> type[BaseException]:
    """Resolve an exception name to its class.

    Bare names are looked up in builtins; dotted names are imported
    (nested classes are reached by walking attributes from the longest
    importable module prefix).

    Raises:
        ValueError: If the name does not resolve to an exception class
    """
    if "." not in name:
        candidate = getattr(builtins, name, None)
    else:
        parts = name.split(".")
        candidate = None
        for split in range(len(parts) - 1, 0, -1):
            try:
                target: Any = importlib.import_module(".".join(parts[:split]))
            except ImportError:
                continue
            try:
                for attr in parts[split:]:
                    target = getattr(target, attr)
            except AttributeError:
                break
            candidate = target
            break

    if not (isinstance(candidate, type) and issubclass(candidate, BaseException)):
        raise ValueError(f"{name!r} does not name an exception class")
    return candidate


def compile_operation(spec: OperationSpec, *, source: str = "<specification>") -> OperationConditions:
    """Compile one declaration into OperationConditions.

    Raises:
        SpecificationLoadError: If an expression is rejected or an exception
            name cannot be resolved
    """
    params = tuple(spec.parameters)

    def guard(text: str | None, description: str) -> Guard:
        if text is None:
            return Guard.always(description or "always")
        return Guard.compile(text, description=description or None, parameters=params)

    try:
        preconditions = tuple(guard(p.guard, p.description) for p in spec.preconditions)
        throws_pairs = tuple(
            GuardThrowsPair(
                guard=guard(t.guard, t.description),
                throws=frozenset(ThrowsClause(resolve_exception_type(name), t.description) for name in t.exception),
            )
            for t in spec.throws
        )
        property_pairs = tuple(
            GuardPropertyPair(
                guard=guard(p.guard, p.description),
                property=PropertyExpression.compile(p.condition, description=p.description or None, parameters=params),
            )
            for p in spec.post
        )
    except (ExpressionSyntaxError, ExpressionSecurityError, ValueError) as e:
        raise SpecificationLoadError(source, f"{spec.operation}: {e}") from e

    return OperationConditions(
        operation=spec.operation,
        parameters=params,
        preconditions=preconditions,
        guard_property_pairs=property_pairs,
        guard_throws_pairs=throws_pairs,
    )


def parse_specifications(raw: Any, *, source: str = "<specification>") -> list[OperationConditions]:
    """Validate an already-decoded document and compile every declaration.

    Raises:
        SpecificationLoadError: If the document is malformed or any
            declaration fails to compile
    """
    if raw is None:
        return []
    try:
        document = SpecificationDocument.model_validate(raw)
    except ValidationError as e:
        raise SpecificationLoadError(source, f"invalid specification document: {e}") from e
    return [compile_operation(spec, source=source) for spec in document.specifications]


def load_specifications(path: Path) -> list[OperationConditions]:
    """Load and compile a specification file.

    Raises:
        FileNotFoundError: If path doesn't exist
        SpecificationLoadError: If the file is not valid YAML/JSON or any
            declaration fails to validate or compile
    """
    if not path.exists():
        raise FileNotFoundError(f"Specification file not found: {path}")
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise SpecificationLoadError(str(path), f"cannot parse: {e}") from e
    return parse_specifications(raw, source=str(path))
