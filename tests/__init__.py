"""
Test suite for the margin guard engine

Contains:
- tests/unit/          : Unit tests for individual modules
"""
