"""Tests for contract types: handlers, verdicts, clauses and outcomes."""
