# tests/fixtures/__init__.py
"""Shared test fixtures: sample classes under test and clause factories."""
