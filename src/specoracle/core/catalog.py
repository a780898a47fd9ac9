# src/specoracle/core/catalog.py
"""Specification catalog with inheritance flattening.

Declarations are registered per qualified operation name. Looking up the
conditions for a member of a class walks the class's method resolution
order once and merges every declaration found along it into a single
immutable OperationConditions. The engine never traverses the hierarchy
itself; it only folds the flattened clauses.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

from specoracle.core.logging import get_logger
from specoracle.core.specification import load_specifications
from specoracle.engine.conditions import OperationConditions

logger = get_logger(__name__)

CONSTRUCTOR = "__init__"


def qualified_type_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


class SpecificationCatalog:
    """Registry of declared conditions, flattened on lookup.

    Register everything before generation starts. Lookups cache their
    flattened result; registering again clears the cache.

    Example:
        catalog = SpecificationCatalog()
        catalog.load(Path("specs/stack.yaml"))
        conditions = catalog.conditions_for(LimitedStack, "pop")
    """

    def __init__(self, declarations: Iterable[OperationConditions] = ()) -> None:
        self._declared: dict[str, OperationConditions] = {}
        self._flattened: dict[tuple[type, str], OperationConditions] = {}
        for conditions in declarations:
            self.register(conditions)

    def register(self, conditions: OperationConditions) -> None:
        """Add a declaration; repeated declarations for one operation are merged."""
        existing = self._declared.get(conditions.operation)
        self._declared[conditions.operation] = conditions if existing is None else existing.merge(conditions)
        self._flattened.clear()

    def load(self, path: Path) -> int:
        """Register every declaration in a specification file.

        Returns:
            Number of declarations loaded

        Raises:
            FileNotFoundError: If path doesn't exist
            SpecificationLoadError: If the file is invalid
        """
        declarations = load_specifications(path)
        for conditions in declarations:
            self.register(conditions)
        logger.info("specifications_loaded", path=str(path), declarations=len(declarations))
        return len(declarations)

    def declared(self, operation: str) -> OperationConditions | None:
        """Conditions declared directly for operation, without inheritance."""
        return self._declared.get(operation)

    def operations(self) -> list[str]:
        return sorted(self._declared)

    def conditions_for(self, owner: type, member: str) -> OperationConditions:
        """Flattened conditions for owner.member across its supertypes.

        The owner's own declaration comes first, then each base class in
        method resolution order. Constructors use member "__init__".
        """
        key = (owner, member)
        cached = self._flattened.get(key)
        if cached is not None:
            return cached

        found = [
            conditions
            for klass in inspect.getmro(owner)
            if (conditions := self._declared.get(f"{qualified_type_name(klass)}.{member}")) is not None
        ]
        operation = f"{qualified_type_name(owner)}.{member}"
        if not found:
            flattened = OperationConditions.empty(operation)
        else:
            flattened = OperationConditions(operation=operation).merge(*found)
        logger.debug("conditions_flattened", operation=operation, declarations=len(found))

        self._flattened[key] = flattened
        return flattened

    def conditions_for_constructor(self, owner: type) -> OperationConditions:
        return self.conditions_for(owner, CONSTRUCTOR)

    def conditions_for_function(self, func: Callable[..., Any]) -> OperationConditions:
        """Conditions for a module-level function (no inheritance to walk)."""
        operation = f"{func.__module__}.{func.__qualname__}"
        return self._declared.get(operation) or OperationConditions.empty(operation)
