"""
Dependency injection for the station.
"""

from station.di.container import Container

__all__ = ["Container"]
