# tests/property/__init__.py
"""Property-based tests for specoracle.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of.

Test categories:
- engine/: Outcome table folding and handler precedence, expression parser safety
"""
