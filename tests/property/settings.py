# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(template=templates())
    @STANDARD_SETTINGS
    def test_something(template):
        ...

Tiers:
- STANDARD_SETTINGS: 100 examples - Regular property tests
- SLOW_SETTINGS: 50 examples - Tests that build whole forms per example
- QUICK_SETTINGS: 20 examples - Fast validation tests
"""

from hypothesis import settings

# Standard property tests - good balance of coverage and speed
STANDARD_SETTINGS = settings(max_examples=100)

# Tests that build a Form or pipeline per example
SLOW_SETTINGS = settings(max_examples=50)

# Quick validation tests where more examples add little value
QUICK_SETTINGS = settings(max_examples=20)
