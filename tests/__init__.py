"""
Test suite for vatcalc

Contains:
- tests/unit/          : Unit tests for individual modules and the auto-save session
"""
