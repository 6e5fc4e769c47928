"""
Shared testing utilities for station components.

All component tests inherit from ComponentTest.
"""

from shared.tests.test_base import ComponentTest

__all__ = ["ComponentTest"]
