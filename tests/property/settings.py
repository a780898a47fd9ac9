# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(rows=table_rows)
    @STANDARD_SETTINGS
    def test_something(rows):
        ...

Tiers:
- DETERMINISM_SETTINGS: 500 examples - Handler decision must be a pure function of the rows
- STATE_MACHINE_SETTINGS: 200 examples - Stateful tests (sufficient state exploration)
- STANDARD_SETTINGS: 100 examples - Regular property tests
- SLOW_SETTINGS: 50 examples - File system tests
- QUICK_SETTINGS: 20 examples - Fast validation tests (simple rejection)
"""

from hypothesis import settings

DETERMINISM_SETTINGS = settings(max_examples=500)

# RuleBasedStateMachine tests benefit from more examples
STATE_MACHINE_SETTINGS = settings(max_examples=200)

STANDARD_SETTINGS = settings(max_examples=100)

SLOW_SETTINGS = settings(max_examples=50)

QUICK_SETTINGS = settings(max_examples=20)
