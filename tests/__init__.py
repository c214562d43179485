"""Test suite for the pytest-scrn package.

This package contains unit and integration tests validating
specification parsing and planning, action handlers, pytest
integration, and execution semantics of screenshot workflows.
"""
