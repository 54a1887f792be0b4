# tests/contracts/__init__.py
"""Contract tests."""
