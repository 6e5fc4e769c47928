"""
Resilience patterns for unreliable network links.

- Retry: bounded retry with exponential backoff and jitter
"""

from shared.resilience.retry import (
    Retry,
    RetryConfig,
    RetryError,
)

__all__ = [
    "Retry",
    "RetryConfig",
    "RetryError",
]
