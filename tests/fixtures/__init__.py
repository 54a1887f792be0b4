# tests/fixtures/__init__.py
"""Shared pytest fixtures and pipeline building blocks for typestep tests."""
