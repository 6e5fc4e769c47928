"""
Graceful shutdown infrastructure.
"""

from station.infrastructure.shutdown.shutdown_manager import (
    ShutdownManager,
    ShutdownState,
)

__all__ = ["ShutdownManager", "ShutdownState"]
