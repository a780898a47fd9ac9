"""Tests for specoracle."""
