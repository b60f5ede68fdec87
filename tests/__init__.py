"""
Test suite for zakat-stocks-core

Contains:
- tests/unit/          : Unit tests for individual modules
- tests/conftest.py    : Fakes for price source, converter, asset registry
"""
