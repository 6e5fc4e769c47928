"""
Base exception for the station agent.
"""


class StationError(Exception):
    """Base exception for all station errors."""

    pass
