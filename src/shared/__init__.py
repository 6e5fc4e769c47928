"""
Shared utilities for the environmental station components.

Provides the logging reporter, resilience helpers and the component
test base used across the station codebase.
"""
