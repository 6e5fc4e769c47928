"""
Scheduling infrastructure.
"""

from station.infrastructure.scheduling.periodic_task import PeriodicTask

__all__ = ["PeriodicTask"]
