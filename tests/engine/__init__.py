"""Tests for the oracle engine: parser, predicates, outcome table, verdicts."""
