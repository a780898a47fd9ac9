"""Property-based tests for the oracle engine."""
