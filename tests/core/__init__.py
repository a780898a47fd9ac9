"""Tests for specification loading, the catalog, configuration and logging."""
