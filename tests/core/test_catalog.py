# tests/core/test_catalog.py
"""Tests for SpecificationCatalog inheritance flattening."""

from pathlib import Path

from specoracle.contracts import CheckKind, ThrowsClause, VerdictHandler
from specoracle.core.catalog import SpecificationCatalog, qualified_type_name
from specoracle.engine.conditions import OperationConditions
from tests.fixtures.factories import property_pair, throws_pair
from tests.fixtures.stack import BoundedStack, Stack, StackFullError

STACK = "tests.fixtures.stack.Stack"
BOUNDED = "tests.fixtures.stack.BoundedStack"


class TestRegistration:
    def test_qualified_type_name(self) -> None:
        assert qualified_type_name(BoundedStack) == BOUNDED

    def test_declared_lookup(self, catalog: SpecificationCatalog) -> None:
        conditions = OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair(None, IndexError),))
        catalog.register(conditions)
        assert catalog.declared(f"{STACK}.pop") is conditions
        assert catalog.declared(f"{STACK}.peek") is None
        assert catalog.operations() == [f"{STACK}.pop"]

    def test_repeated_declarations_merge(self, catalog: SpecificationCatalog) -> None:
        catalog.register(OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair(None, IndexError),)))
        catalog.register(OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair(None, KeyError),)))
        declared = catalog.declared(f"{STACK}.pop")
        assert declared is not None
        assert len(declared.guard_throws_pairs) == 2

    def test_load_from_file(self, catalog: SpecificationCatalog, tmp_path: Path) -> None:
        path = tmp_path / "stack.yaml"
        path.write_text(f"specifications:\n  - operation: {STACK}.pop\n    throws:\n      - exception: IndexError\n")
        assert catalog.load(path) == 1
        assert catalog.declared(f"{STACK}.pop") is not None


class TestFlattening:
    def test_unspecified_member_is_empty(self, catalog: SpecificationCatalog) -> None:
        conditions = catalog.conditions_for(Stack, "peek")
        assert conditions.is_empty
        assert conditions.operation == f"{STACK}.peek"

    def test_inherits_supertype_declaration(self, catalog: SpecificationCatalog) -> None:
        catalog.register(OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair(None, IndexError),)))
        conditions = catalog.conditions_for(BoundedStack, "pop")
        assert conditions.operation == f"{BOUNDED}.pop"
        assert conditions.guard_throws_pairs[0].throws == frozenset({ThrowsClause(IndexError)})

    def test_own_declaration_precedes_inherited(self, catalog: SpecificationCatalog) -> None:
        own = throws_pair("len(receiver.items) >= receiver.capacity", StackFullError)
        inherited = property_pair(None, "receiver.items[-1] == args[0]")
        catalog.register(OperationConditions(operation=f"{STACK}.push", guard_property_pairs=(inherited,)))
        catalog.register(OperationConditions(operation=f"{BOUNDED}.push", guard_throws_pairs=(own,)))

        conditions = catalog.conditions_for(BoundedStack, "push")
        assert conditions.guard_throws_pairs == (own,)
        assert conditions.guard_property_pairs == (inherited,)

    def test_inherited_throws_decide_verdict(self, catalog: SpecificationCatalog) -> None:
        catalog.register(
            OperationConditions(
                operation=f"{BOUNDED}.push",
                guard_throws_pairs=(throws_pair("len(receiver.items) >= receiver.capacity", StackFullError),),
            )
        )
        catalog.register(OperationConditions(operation=f"{STACK}.push", guard_property_pairs=(property_pair(None, "True"),)))
        table = catalog.conditions_for(BoundedStack, "push").check_prestate(BoundedStack(1, "x"), ("y",))
        handler = table.add_post_check_generator(VerdictHandler.pass_through())
        assert handler.kind == CheckKind.EXPECTED_EXCEPTION

    def test_supertype_does_not_see_subtype_declaration(self, catalog: SpecificationCatalog) -> None:
        catalog.register(OperationConditions(operation=f"{BOUNDED}.push", guard_throws_pairs=(throws_pair(None, StackFullError),)))
        assert catalog.conditions_for(Stack, "push").is_empty

    def test_lookup_is_cached_until_next_registration(self, catalog: SpecificationCatalog) -> None:
        first = catalog.conditions_for(BoundedStack, "pop")
        assert catalog.conditions_for(BoundedStack, "pop") is first
        catalog.register(OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair(None, IndexError),)))
        assert catalog.conditions_for(BoundedStack, "pop") is not first
        assert not catalog.conditions_for(BoundedStack, "pop").is_empty

    def test_constructor_lookup(self, catalog: SpecificationCatalog) -> None:
        catalog.register(
            OperationConditions(
                operation=f"{BOUNDED}.__init__",
                guard_throws_pairs=(throws_pair("args[0] < 0", ValueError),),
            )
        )
        conditions = catalog.conditions_for_constructor(BoundedStack)
        assert conditions.check_prestate(None, (-1,)).exception_sets == (frozenset({ThrowsClause(ValueError)}),)

    def test_function_lookup(self, catalog: SpecificationCatalog) -> None:
        operation = f"{_target.__module__}._target"
        assert catalog.conditions_for_function(_target).is_empty
        catalog.register(OperationConditions(operation=operation, guard_throws_pairs=(throws_pair(None, KeyError),)))
        conditions = catalog.conditions_for_function(_target)
        assert conditions.operation == operation
        assert not conditions.is_empty


class TestFlattenedPrestate:
    """Flattened conditions evaluated end to end through check_prestate."""

    def test_inherited_guard_keeps_supertype_parameter_names(self, catalog: SpecificationCatalog, tmp_path: Path) -> None:
        path = tmp_path / "push.yaml"
        path.write_text(f"""
specifications:
  - operation: {STACK}.push
    parameters: [item]
    throws:
      - guard: item is None
        exception: ValueError
  - operation: {BOUNDED}.push
    parameters: [value]
    throws:
      - guard: len(receiver.items) >= receiver.capacity
        exception: tests.fixtures.stack.StackFullError
    post:
      - guard: value is not None
        property: receiver.items[-1] == value
""")
        catalog.load(path)
        conditions = catalog.conditions_for(BoundedStack, "push")
        assert conditions.parameters == ("value",)

        rejected = conditions.check_prestate(BoundedStack(2), (None,))
        assert rejected.exception_sets == (frozenset({ThrowsClause(ValueError)}),)

        accepted = conditions.check_prestate(BoundedStack(2), (7,))
        assert accepted.exception_sets == ()
        assert len(accepted.post_conditions) == 1
        assert accepted.add_post_check_generator(VerdictHandler.pass_through()).kind == CheckKind.POST_CONDITION

    def test_throws_only_catalog_with_no_guard_holding_is_invalid(self, catalog: SpecificationCatalog) -> None:
        catalog.register(OperationConditions(operation=f"{STACK}.pop", guard_throws_pairs=(throws_pair("False", IndexError),)))
        table = catalog.conditions_for(BoundedStack, "pop").check_prestate(BoundedStack(1, "x"), ())
        assert not table.is_empty
        assert table.is_invalid_prestate()
        assert table.add_post_check_generator(VerdictHandler.pass_through()) == VerdictHandler.invalid()


def _target() -> None:
    """Module-level function used as a lookup key."""
